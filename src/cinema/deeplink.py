"""Deep links of the form ``cinema://movie/{id}``.

``handle`` records which movie a link asks to open; anything that is not a
movie link for our scheme is ignored.
"""

from urllib.parse import urlsplit

import structlog

from cinema.config import Settings, get_settings

logger = structlog.get_logger(__name__)

MOVIE_HOST = "movie"


class DeepLinkHandler:
    """Parses incoming deep links and builds outgoing ones."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self.selected_movie_id: int | None = None

    @property
    def scheme(self) -> str:
        return self._settings.deep_link_scheme

    def create_deep_link(self, movie_id: int) -> str:
        return f"{self.scheme}://{MOVIE_HOST}/{movie_id}"

    def parse(self, url: str) -> int | None:
        """Extract the movie id from a deep link.

        Returns:
            The movie id, or None if the link is not a movie link
        """
        try:
            parts = urlsplit(url.strip())
        except ValueError:
            return None

        if parts.scheme.lower() != self.scheme.lower() or parts.netloc != MOVIE_HOST:
            return None

        segments = [s for s in parts.path.split("/") if s]
        movie_id = segments[0] if len(segments) == 1 else ""
        if not (movie_id.isascii() and movie_id.isdigit()):
            return None
        return int(movie_id)

    def handle(self, url: str) -> bool:
        """Select the movie a deep link points at.

        Returns:
            True if the link was recognised
        """
        movie_id = self.parse(url)
        if movie_id is None:
            logger.debug("deep_link_ignored", url=url)
            return False

        self.selected_movie_id = movie_id
        logger.info("deep_link_handled", movie_id=movie_id)
        return True

    def clear_selection(self) -> None:
        self.selected_movie_id = None
