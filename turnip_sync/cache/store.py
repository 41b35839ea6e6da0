"""
Persistent expiring key/value store.

Values are serialized to JSON and written to the ``cache_entries`` table
with an expiration timestamp. Staleness is only judged when a caller asks
through ``is_expired``; nothing is evicted in the background.

All operations run under one lock shared by every key because SQLite
connections are not safe for concurrent use. The lock covers local I/O
only and is never held while a network request is in flight.
"""

import json
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Type, TypeVar

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import sessionmaker

from ..logging_config import get_logger
from ..models import CacheEntry
from ..serialization import encode_payload

logger = get_logger(__name__)

T = TypeVar("T")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as a naive UTC datetime, matching the column type."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class CacheStore:
    """
    Thread-safe persistent cache with per-entry expiration.

    Attributes:
        session_factory: SQLAlchemy session factory bound to the store database
        clock: Callable returning the current naive UTC time
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        clock: Optional[Clock] = None,
        lock: Optional[threading.Lock] = None,
    ) -> None:
        """
        Initialize cache store.

        Args:
            session_factory: Session factory for the cache database
            clock: Time source, defaults to the system UTC clock
            lock: Lock guarding the database, shared with every other user
                of ``session_factory``
        """
        self.session_factory = session_factory
        self.clock = clock or utc_now
        self._lock = lock or threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """
        Get the decoded JSON value stored under ``key``.

        Expired entries are returned as well; use ``is_expired`` to judge
        freshness.

        Args:
            key: Cache key

        Returns:
            Stored value, or None if absent or unreadable
        """
        with self._lock:
            raw = self._read(key)

        if raw is None:
            logger.debug("Cache miss", key=key)
            return None

        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt cache entry", key=key)
            return None

    def get_model(self, key: str, model: Type[T]) -> Optional[T]:
        """
        Get the value stored under ``key`` decoded into ``model``.

        Args:
            key: Cache key
            model: Target type (pydantic model or typing annotation)

        Returns:
            Decoded value, or None if absent or not decodable into ``model``
        """
        with self._lock:
            raw = self._read(key)

        if raw is None:
            logger.debug("Cache miss", key=key)
            return None

        try:
            return TypeAdapter(model).validate_json(raw)
        except PydanticValidationError:
            logger.warning("Discarding corrupt cache entry", key=key)
            return None

    def put(self, key: str, value: Any, ttl: timedelta) -> None:
        """
        Store ``value`` under ``key`` for ``ttl``.

        Args:
            key: Cache key
            value: JSON-serializable value or pydantic model
            ttl: Time until the entry is considered expired
        """
        payload = encode_payload(value)

        with self._lock:
            now = self.clock()
            with self.session_factory() as session:
                session.merge(
                    CacheEntry(key=key, value=payload, expires_at=now + ttl, created_at=now)
                )
                session.commit()

        logger.debug("Cached", key=key, ttl_seconds=int(ttl.total_seconds()))

    def is_expired(self, key: str) -> bool:
        """
        Check whether ``key`` must be refreshed.

        Args:
            key: Cache key

        Returns:
            True if the entry is absent or past its expiration
        """
        with self._lock:
            with self.session_factory() as session:
                entry = session.get(CacheEntry, key)
                if entry is None:
                    return True
                return entry.is_expired(self.clock())

    def exists(self, key: str) -> bool:
        with self._lock:
            with self.session_factory() as session:
                return session.get(CacheEntry, key) is not None

    def get_expiration(self, key: str) -> Optional[datetime]:
        """Expiration timestamp of ``key`` (naive UTC), or None if absent."""
        with self._lock:
            with self.session_factory() as session:
                entry = session.get(CacheEntry, key)
                return entry.expires_at if entry is not None else None

    def empty(self, *keys: str) -> int:
        """
        Remove the given keys.

        Returns:
            Number of entries removed
        """
        with self._lock:
            with self.session_factory() as session:
                removed = (
                    session.query(CacheEntry)
                    .filter(CacheEntry.key.in_(keys))
                    .delete(synchronize_session=False)
                )
                session.commit()
        return removed

    def empty_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self.clock()
            with self.session_factory() as session:
                removed = (
                    session.query(CacheEntry)
                    .filter(CacheEntry.expires_at < now)
                    .delete(synchronize_session=False)
                )
                session.commit()

        logger.info("Removed expired cache entries", count=removed)
        return removed

    def empty_all(self) -> int:
        """Remove every entry."""
        with self._lock:
            with self.session_factory() as session:
                removed = session.query(CacheEntry).delete(synchronize_session=False)
                session.commit()

        logger.info("Cleared cache", count=removed)
        return removed

    def _read(self, key: str) -> Optional[str]:
        # Caller holds the lock
        with self.session_factory() as session:
            entry = session.get(CacheEntry, key)
            return entry.value if entry is not None else None
