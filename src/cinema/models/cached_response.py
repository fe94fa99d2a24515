"""CachedResponse model - persisted page responses keyed by fingerprint.

The ResponseCache service is the only writer of this table; all SQL goes
through CachedResponseRepository.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Index, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from cinema.models.base import Base, UTCDateTime, UUIDPrimaryKeyMixin


class CachedResponse(UUIDPrimaryKeyMixin, Base):
    """One encoded page response for a request fingerprint.

    At most one live row exists per fingerprint: writes delete any previous
    row for the key before inserting.

    Attributes:
        fingerprint: Endpoint path plus query parameters, never the API key
        payload: JSON-encoded page response
        timestamp: When the payload was written (UTC)
    """

    __tablename__ = "cached_responses"

    fingerprint: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        index=True,
    )
    payload: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        # Sweep queries filter on age only
        Index("ix_cached_responses_timestamp", "timestamp"),
    )

    def __repr__(self) -> str:
        return (
            f"<CachedResponse(fingerprint='{self.fingerprint}', "
            f"timestamp={self.timestamp}, bytes={len(self.payload or b'')})>"
        )
