"""
Database models for the local store.

This module defines SQLAlchemy ORM models for expiring cache entries and
persisted client settings such as the registration flag.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base: Any = declarative_base()


class CacheEntry(Base):
    """
    Expiring cache entry holding a serialized payload.

    Attributes:
        key: Cache key (e.g. ``profile``, ``week_12_2026``)
        value: Serialized JSON payload
        expires_at: Naive UTC timestamp after which the entry is stale
        created_at: When the entry was last written
    """

    __tablename__ = "cache_entries"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def __repr__(self) -> str:
        return f"<CacheEntry(key={self.key}, expires_at={self.expires_at})>"


class AppSetting(Base):
    """Persisted client preference, stored as text."""

    __tablename__ = "app_settings"

    name = Column(String(100), primary_key=True)
    value = Column(String(255), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
