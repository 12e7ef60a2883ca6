"""Time-boxed key/value cache persisted in SQLite.

Handles database connection, session management and cache operations.
"""

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Optional, Union

from sqlalchemy import create_engine, delete, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..accrual import calculator
from ..accrual.calculator import Instant, parse_instant
from .models import Base, CacheEntry

logger = logging.getLogger(__name__)


def _timestamp(now: Optional[Instant]) -> float:
    """POSIX seconds for an instant, defaulting to the current time."""
    at = now if now is not None else calculator.clock()
    return parse_instant(at, "now").timestamp()


class ResponseCache:
    """Key/value cache whose entries expire after a fixed TTL."""

    def __init__(self, db_path: Union[str, Path] = ":memory:", ttl: int = 300):
        """Initialize cache storage.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
            ttl: Default time to live in seconds
        """
        if ttl < 0:
            raise ValueError("ttl must not be negative")

        self.ttl = ttl
        self.db_path = Path(db_path)
        self._is_memory = str(db_path) == ":memory:"

        # In-memory databases must share one connection across sessions
        if self._is_memory:
            self.engine = create_engine(
                "sqlite:///:memory:",
                echo=False,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                connect_args={"check_same_thread": False},
            )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        Base.metadata.create_all(self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session context manager."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get(self, key: str, now: Optional[Instant] = None) -> Optional[Any]:
        """Get a cached value.

        Args:
            key: Cache key
            now: Evaluation instant (default: current time)

        Returns:
            The stored value, or None if missing or expired
        """
        at = _timestamp(now)
        with self.get_session() as session:
            entry = session.execute(
                select(CacheEntry).where(CacheEntry.key == key)
            ).scalar_one_or_none()

            if entry is None:
                return None

            if entry.is_expired(at):
                session.delete(entry)
                return None

            return json.loads(entry.value)

    def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None,
        now: Optional[Instant] = None,
    ) -> None:
        """Store a value.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time to live in seconds (default: cache TTL)
            now: Instant the entry is written (default: current time)
        """
        lifetime = self.ttl if ttl is None else ttl
        if lifetime < 0:
            raise ValueError("ttl must not be negative")

        payload = json.dumps(value)
        expires_at = _timestamp(now) + lifetime

        with self.get_session() as session:
            entry = session.get(CacheEntry, key)
            if entry is None:
                session.add(CacheEntry(key=key, value=payload, expires_at=expires_at))
            else:
                entry.value = payload
                entry.expires_at = expires_at

    def delete(self, key: str) -> bool:
        """Delete a cached value.

        Returns:
            True if an entry was removed
        """
        with self.get_session() as session:
            result = session.execute(delete(CacheEntry).where(CacheEntry.key == key))
            return result.rowcount > 0

    def clear(self) -> int:
        """Remove every entry, return the number removed."""
        with self.get_session() as session:
            result = session.execute(delete(CacheEntry))
            count = result.rowcount or 0
        logger.debug("Cleared %d cache entries", count)
        return count

    def purge_expired(self, now: Optional[Instant] = None) -> int:
        """Remove expired entries, return the number removed."""
        at = _timestamp(now)
        with self.get_session() as session:
            result = session.execute(delete(CacheEntry).where(CacheEntry.expires_at <= at))
            count = result.rowcount or 0
        if count:
            logger.info("Purged %d expired cache entries", count)
        return count

    def __len__(self) -> int:
        with self.get_session() as session:
            return len(session.execute(select(CacheEntry.key)).all())
