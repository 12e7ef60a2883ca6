"""SQLAlchemy ORM models for the local response cache.

Tables:
- cache_entries: JSON values keyed by string with an expiry instant
"""

from datetime import datetime, timezone

from sqlalchemy import Float, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CacheEntry(Base):
    """A cached value with a fixed expiry."""

    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(String(500), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)  # JSON

    # POSIX seconds, compared numerically
    expires_at: Mapped[float] = mapped_column(Float, nullable=False, index=True)
    created_at: Mapped[str] = mapped_column(
        String(32), default=lambda: datetime.now(timezone.utc).isoformat()
    )

    def __repr__(self) -> str:
        return f"<CacheEntry(key='{self.key}', expires_at={self.expires_at})>"

    def is_expired(self, now: float) -> bool:
        """Check if the entry has expired at the given POSIX time."""
        return self.expires_at <= now
