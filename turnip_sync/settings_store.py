"""
Persisted client preferences.

A small key/value table next to the cache, used for values that must
outlive cache expiry such as the registration flag.
"""

import threading
from typing import Optional

from sqlalchemy.orm import sessionmaker

from .models import AppSetting

HAS_REGISTERED = "has_registered"


class SettingsStore:
    """Thread-safe access to the ``app_settings`` table."""

    def __init__(self, session_factory: sessionmaker, lock: Optional[threading.Lock] = None) -> None:
        self.session_factory = session_factory
        # Must be the cache store's lock when both share a connection
        self._lock = lock or threading.Lock()

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            with self.session_factory() as session:
                setting = session.get(AppSetting, name)
                return setting.value if setting is not None else None

    def set(self, name: str, value: str) -> None:
        with self._lock:
            with self.session_factory() as session:
                session.merge(AppSetting(name=name, value=value))
                session.commit()

    def get_bool(self, name: str, default: bool = False) -> bool:
        value = self.get(name)
        if value is None:
            return default
        return value.lower() == "true"

    def set_bool(self, name: str, value: bool) -> None:
        self.set(name, "true" if value else "false")
