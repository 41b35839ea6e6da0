"""Cache module initialization."""

from .store import CacheStore, utc_now

__all__ = ["CacheStore", "utc_now"]
