"""ImageCache - two-tier (memory + disk) byte cache for remote images.

Memory tier:
    LRU bounded by entry count (100) and total byte cost (50 MB).
Disk tier:
    One file per URL under ``image_cache_dir``, named by percent-encoding
    the absolute URL. No size cap; files older than 7 days are removed by a
    background sweep.

Disk I/O runs in worker threads so the event loop never blocks on it.
"""

import asyncio
import hashlib
import shutil
import time
from collections import OrderedDict
from pathlib import Path
from urllib.parse import quote

import httpx
import structlog

from cinema.config import Settings, get_settings

logger = structlog.get_logger(__name__)

# Most filesystems cap a name at 255 bytes
MAX_FILENAME_LENGTH = 200


class MemoryTier:
    """In-memory LRU of image bytes with count and cost limits."""

    def __init__(self, count_limit: int, cost_limit: int) -> None:
        self.count_limit = count_limit
        self.cost_limit = cost_limit
        self._items: OrderedDict[str, bytes] = OrderedDict()
        self._total_cost = 0

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items

    @property
    def total_cost(self) -> int:
        return self._total_cost

    def get(self, key: str) -> bytes | None:
        data = self._items.get(key)
        if data is not None:
            self._items.move_to_end(key)
        return data

    def set(self, key: str, data: bytes) -> None:
        if len(data) > self.cost_limit:
            # Would evict everything and still not fit
            self.delete(key)
            return
        self.delete(key)
        self._items[key] = data
        self._total_cost += len(data)
        self._evict()

    def delete(self, key: str) -> None:
        data = self._items.pop(key, None)
        if data is not None:
            self._total_cost -= len(data)

    def clear(self) -> None:
        self._items.clear()
        self._total_cost = 0

    def _evict(self) -> None:
        while self._items and (
            len(self._items) > self.count_limit or self._total_cost > self.cost_limit
        ):
            oldest_key, oldest = self._items.popitem(last=False)
            self._total_cost -= len(oldest)
            logger.debug("image_memory_evicted", url=oldest_key)


class ImageCache:
    """Get/set/evict image bytes keyed by absolute URL.

    Usage:
        ```python
        images = ImageCache(settings)
        images.start()                       # create dir, schedule sweep
        data = await images.load(movie.poster_url(settings))
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            settings: Application settings (defaults to cached settings)
            transport: Optional httpx transport used for downloads (tests)
        """
        self._settings = settings or get_settings()
        self.directory = Path(self._settings.image_cache_dir).expanduser()
        self.memory = MemoryTier(
            count_limit=self._settings.image_memory_count_limit,
            cost_limit=self._settings.image_memory_cost_limit,
        )
        self._transport = transport
        self._sweep_task: asyncio.Task[int] | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> asyncio.Task[int]:
        """Create the cache directory and schedule the age sweep."""
        self.directory.mkdir(parents=True, exist_ok=True)
        self._sweep_task = asyncio.create_task(self.sweep_disk(), name="image-cache-sweep")
        return self._sweep_task

    async def close(self) -> None:
        if self._sweep_task is not None and not self._sweep_task.done():
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
        self._sweep_task = None

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def get(self, url: str) -> bytes | None:
        """Memory first, then disk. A disk hit is promoted to memory."""
        data = self.memory.get(url)
        if data is not None:
            return data

        data = await asyncio.to_thread(self._read_file, self.path_for(url))
        if data is not None:
            self.memory.set(url, data)
        return data

    async def set(self, url: str, data: bytes) -> None:
        """Store bytes in both tiers. Disk failures are logged and ignored."""
        self.memory.set(url, data)
        await asyncio.to_thread(self._write_file, self.path_for(url), data)

    async def clear(self) -> None:
        """Empty both tiers."""
        self.memory.clear()
        await asyncio.to_thread(self._reset_directory)
        logger.info("image_cache_cleared")

    async def load(self, url: str | None) -> bytes | None:
        """Return cached bytes for ``url``, downloading and caching on a miss.

        Returns None when the URL is empty or the download fails.
        """
        if not url:
            return None

        cached = await self.get(url)
        if cached is not None:
            return cached

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.tmdb_timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("image_download_failed", url=url, error=str(e))
            return None

        data = response.content
        if not data:
            return None

        await self.set(url, data)
        return data

    async def sweep_disk(self, max_age: float | None = None) -> int:
        """Delete cached files older than ``max_age`` seconds (default 7 days).

        Returns:
            Number of files removed
        """
        max_age = self._settings.image_disk_max_age if max_age is None else max_age
        removed = await asyncio.to_thread(self._remove_older_than, time.time() - max_age)
        if removed:
            logger.info("image_cache_swept", removed=removed)
        return removed

    # -------------------------------------------------------------------------
    # Disk helpers (run in worker threads)
    # -------------------------------------------------------------------------

    def path_for(self, url: str) -> Path:
        """File path for a URL: the percent-encoded URL, or its hash if too long."""
        name = quote(url, safe="")
        if len(name) > MAX_FILENAME_LENGTH:
            name = hashlib.sha256(url.encode("utf-8")).hexdigest()
        return self.directory / name

    @staticmethod
    def _read_file(path: Path) -> bytes | None:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("image_disk_read_failed", path=str(path), error=str(e))
            return None

    @staticmethod
    def _write_file(path: Path, data: bytes) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.warning("image_disk_write_failed", path=str(path), error=str(e))

    def _reset_directory(self) -> None:
        shutil.rmtree(self.directory, ignore_errors=True)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _remove_older_than(self, cutoff: float) -> int:
        if not self.directory.is_dir():
            return 0

        removed = 0
        for path in self.directory.iterdir():
            try:
                if path.is_file() and path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except OSError as e:
                logger.warning("image_sweep_failed", path=str(path), error=str(e))
        return removed
