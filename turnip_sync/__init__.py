"""
Turnip sync package.

Local-first data access for weekly turnip prices and the friend graph:
an expiring local cache, an authenticated HTTP gateway and the policy that
decides between them.
"""

__version__ = "1.0.0"

from .config import Settings, get_settings
from .context import SyncContext, build_context
from .data_service import DataService

__all__ = [
    "DataService",
    "Settings",
    "SyncContext",
    "build_context",
    "get_settings",
    "__version__",
]
