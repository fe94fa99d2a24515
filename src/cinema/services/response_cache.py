"""ResponseCache - persisted page responses with a fixed TTL.

Maps a request fingerprint (endpoint path plus query parameters, never the
API key) to the last successfully decoded page for that request.

- Reads are awaited by the caller. A stale entry is reported as a miss and
  deleted in the background.
- Writes are fire-and-forget: ``put`` schedules the write and returns at
  once. Serialisation and storage failures are logged and dropped; the
  cache is best-effort and never a source of truth.
- At most one entry exists per fingerprint: a write deletes the old row(s)
  before inserting, under a single-writer lock.

Fingerprint examples:
    - /trending/movie/week?page=1
    - /movie/now_playing?page=3
"""

import asyncio
from collections.abc import Callable, Coroutine, Mapping
from datetime import UTC, datetime, timedelta
from typing import Any
from urllib.parse import urlencode

import structlog
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinema.config import Settings, get_settings
from cinema.core.database import acquire_session_factory
from cinema.core.exceptions import StoreNotReadyError
from cinema.repositories.cached_response import CachedResponseRepository
from cinema.schemas.movie import PageResponse

logger = structlog.get_logger(__name__)

# Query parameters that carry credentials and never enter a fingerprint
SECRET_PARAMS = frozenset({"api_key", "access_token", "session_id"})


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ResponseCache:
    """Keyed store of page responses with time-based expiry.

    Usage:
        ```python
        cache = ResponseCache(settings)
        key = ResponseCache.fingerprint("/movie/now_playing", {"page": 1})
        page = await cache.get(key)
        if page is None:
            page = await fetch()
            cache.put(key, page)
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the cache.

        Args:
            settings: Application settings (defaults to cached settings)
            session_factory: Explicit session factory; the process-wide store
                is used when omitted
            clock: Returns the current UTC time, injectable for tests
        """
        self._settings = settings or get_settings()
        self._session_factory = session_factory
        self._clock = clock
        self._write_lock = asyncio.Lock()
        self._background: set[asyncio.Task[Any]] = set()

    @property
    def ttl(self) -> timedelta:
        return timedelta(seconds=self._settings.response_cache_ttl)

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def get(self, fingerprint: str) -> PageResponse | None:
        """Return the cached page for a fingerprint, or None.

        Never raises: storage and decoding failures are reported as a miss.
        """
        try:
            factory = await self._factory()
            async with factory() as session:
                entry = await CachedResponseRepository(session).get_by_fingerprint(
                    fingerprint
                )
        except StoreNotReadyError:
            logger.debug("response_cache_store_not_ready", fingerprint=fingerprint)
            return None
        except Exception as e:
            logger.warning("response_cache_get_failed", fingerprint=fingerprint, error=str(e))
            return None

        if entry is None:
            logger.debug("response_cache_miss", fingerprint=fingerprint)
            return None

        age = self._clock() - entry.timestamp
        if age > self.ttl:
            logger.debug(
                "response_cache_expired",
                fingerprint=fingerprint,
                age_seconds=int(age.total_seconds()),
            )
            self._spawn(self._delete_entry(entry.id, fingerprint))
            return None

        try:
            page = PageResponse.model_validate_json(entry.payload)
        except ValidationError as e:
            logger.warning(
                "response_cache_decode_failed", fingerprint=fingerprint, error=str(e)
            )
            self._spawn(self._delete_entry(entry.id, fingerprint))
            return None

        logger.debug("response_cache_hit", fingerprint=fingerprint)
        return page

    def put(self, fingerprint: str, response: PageResponse) -> asyncio.Task[None] | None:
        """Schedule a write that supersedes any entry for ``fingerprint``.

        Returns:
            The background write task, or None if the write was dropped
        """
        try:
            payload = response.model_dump_json().encode("utf-8")
        except Exception as e:
            logger.warning(
                "response_cache_serialize_failed", fingerprint=fingerprint, error=str(e)
            )
            return None

        return self._spawn(self._write(fingerprint, payload, self._clock()))

    async def clear_expired(self) -> int:
        """Delete every entry older than the TTL.

        Returns:
            Number of entries deleted (0 on failure)
        """
        cutoff = self._clock() - self.ttl
        try:
            factory = await self._factory()
            async with self._write_lock, factory() as session:
                deleted = await CachedResponseRepository(session).delete_older_than(cutoff)
                await session.commit()
        except StoreNotReadyError:
            return 0
        except Exception as e:
            logger.warning("response_cache_sweep_failed", error=str(e))
            return 0

        if deleted:
            logger.info("response_cache_swept", deleted=deleted)
        return deleted

    async def run_periodic_sweep(self, interval: float) -> None:
        """Call ``clear_expired`` every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            await self.clear_expired()

    async def drain(self) -> None:
        """Wait for every scheduled background write/delete to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # -------------------------------------------------------------------------
    # Fingerprints
    # -------------------------------------------------------------------------

    @staticmethod
    def fingerprint(endpoint: str, params: Mapping[str, Any] | None = None) -> str:
        """Build a deterministic cache key from an endpoint and its query.

        Parameters are sorted by name and credentials are dropped, so the
        same request always maps to the same key.

        Returns:
            Fingerprint (e.g., "/movie/now_playing?page=2")
        """
        items = sorted(
            (str(k), str(v))
            for k, v in (params or {}).items()
            if k not in SECRET_PARAMS and v is not None
        )
        query = urlencode(items)
        return f"{endpoint}?{query}" if query else endpoint

    # -------------------------------------------------------------------------
    # Background work
    # -------------------------------------------------------------------------

    async def _factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is not None:
            return self._session_factory
        return await acquire_session_factory(self._settings.store_ready_timeout)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def _write(self, fingerprint: str, payload: bytes, timestamp: datetime) -> None:
        try:
            factory = await self._factory()
            async with self._write_lock, factory() as session:
                await CachedResponseRepository(session).replace(
                    fingerprint, payload, timestamp
                )
                await session.commit()
        except StoreNotReadyError:
            logger.debug("response_cache_put_skipped", fingerprint=fingerprint)
            return
        except Exception as e:
            logger.warning("response_cache_put_failed", fingerprint=fingerprint, error=str(e))
            return

        logger.debug("response_cache_put", fingerprint=fingerprint, bytes=len(payload))

    async def _delete_entry(self, entry_id: Any, fingerprint: str) -> None:
        try:
            factory = await self._factory()
            async with self._write_lock, factory() as session:
                await CachedResponseRepository(session).delete_entry(entry_id)
                await session.commit()
        except Exception as e:
            logger.warning(
                "response_cache_delete_failed", fingerprint=fingerprint, error=str(e)
            )
            return

        logger.debug("response_cache_deleted", fingerprint=fingerprint)
