"""CachedResponseRepository for the response cache table.

Provides fingerprint lookups, supersede-on-write and age-based deletes.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select

from cinema.models.cached_response import CachedResponse
from cinema.repositories.base import BaseRepository


class CachedResponseRepository(BaseRepository[CachedResponse]):
    """Repository for CachedResponse entities."""

    async def get_by_fingerprint(self, fingerprint: str) -> CachedResponse | None:
        """Get the newest entry stored for a fingerprint.

        Args:
            fingerprint: Request fingerprint

        Returns:
            CachedResponse if found, None otherwise
        """
        result = await self.session.execute(
            select(CachedResponse)
            .where(CachedResponse.fingerprint == fingerprint)
            .order_by(CachedResponse.timestamp.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def replace(
        self,
        fingerprint: str,
        payload: bytes,
        timestamp: datetime,
    ) -> CachedResponse:
        """Delete every row for the fingerprint, then insert a fresh one.

        Args:
            fingerprint: Request fingerprint
            payload: Encoded page response
            timestamp: Write time (UTC)

        Returns:
            The inserted entry
        """
        await self.delete_by_fingerprint(fingerprint)
        return await self.create(
            CachedResponse(
                fingerprint=fingerprint,
                payload=payload,
                timestamp=timestamp,
            )
        )

    async def delete_by_fingerprint(self, fingerprint: str) -> int:
        """Delete all rows for a fingerprint.

        Returns:
            Number of rows deleted
        """
        result = await self.session.execute(
            delete(CachedResponse).where(CachedResponse.fingerprint == fingerprint)
        )
        return result.rowcount or 0

    async def delete_entry(self, entry_id: UUID) -> bool:
        """Delete one row by id.

        Only the row that was observed stale is removed, so a fresh write
        that landed in between survives.

        Returns:
            True if a row was deleted
        """
        result = await self.session.execute(
            delete(CachedResponse).where(CachedResponse.id == entry_id)
        )
        return (result.rowcount or 0) > 0

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete every row written before ``cutoff``.

        Returns:
            Number of rows deleted
        """
        result = await self.session.execute(
            delete(CachedResponse).where(CachedResponse.timestamp < cutoff)
        )
        return result.rowcount or 0
