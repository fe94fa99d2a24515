"""Remote client for the movie catalog API.

Issues one typed GET request, decodes the JSON body into a Pydantic model
and lets transport and status errors propagate untouched. Classifying those
errors is the catalog service's job.

See: https://developer.themoviedb.org/reference/intro/getting-started
"""

from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel

from cinema.config import Settings, get_settings

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

API_KEY_PARAM = "api_key"


class RemoteClient:
    """Async GET-and-decode client.

    The API key is injected into every request and never logged.

    Usage:
        ```python
        client = RemoteClient(settings)
        page = await client.get("/movie/now_playing", PageResponse, {"page": 1})
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Application settings (defaults to cached settings)
            transport: Optional httpx transport, used by tests
        """
        self._settings = settings or get_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def _user_agent(self) -> str:
        return f"{self._settings.app_name}/{self._settings.app_version}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._settings.tmdb_base_url,
                timeout=self._settings.tmdb_timeout,
                headers={"User-Agent": self._user_agent, "Accept": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _with_credentials(self, params: Mapping[str, Any] | None) -> dict[str, Any]:
        query = dict(params or {})
        query[API_KEY_PARAM] = self._settings.tmdb_api_key.get_secret_value()
        return query

    async def get(
        self,
        endpoint: str,
        model: type[ModelT],
        params: Mapping[str, Any] | None = None,
    ) -> ModelT:
        """GET ``{base_url}{endpoint}?{params}&api_key=...`` and decode the body.

        Args:
            endpoint: Path relative to the API base URL (e.g. "/movie/550")
            model: Pydantic model to decode the JSON body into
            params: Query parameters, without credentials

        Returns:
            Decoded model instance

        Raises:
            httpx.InvalidURL: The request URL could not be built
            httpx.HTTPStatusError: Non-2xx response
            httpx.HTTPError: Any other transport failure
            ValueError: The body is not JSON
            pydantic.ValidationError: The JSON does not match ``model``
        """
        if not endpoint.startswith("/"):
            raise httpx.InvalidURL(f"Endpoint must be an absolute path: {endpoint!r}")

        client = await self._get_client()
        response = await client.get(endpoint, params=self._with_credentials(params))

        if not response.is_success:
            logger.warning(
                "remote_request_failed",
                endpoint=endpoint,
                params=dict(params or {}),
                status_code=response.status_code,
            )
        response.raise_for_status()

        data = response.json()
        logger.debug("remote_request_succeeded", endpoint=endpoint)
        return model.model_validate(data)
