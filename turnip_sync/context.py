"""
Process-wide context bundling the shared store and HTTP client.

Built once by the host application and handed to ``DataService``; nothing
in the package keeps module-level client or cache instances.
"""

import threading
from dataclasses import dataclass
from typing import Optional

import httpx

from .cache.store import CacheStore, Clock
from .collaborators import Connectivity, IdentityProvider
from .config import Settings, get_settings
from .database import create_db_engine, create_session_factory
from .endpoints import Endpoints
from .gateway import HttpGateway
from .logging_config import setup_logging
from .registration import RegistrationStateMachine
from .settings_store import SettingsStore


@dataclass
class SyncContext:
    """Shared collaborators of every data operation."""

    settings: Settings
    store: CacheStore
    settings_store: SettingsStore
    gateway: HttpGateway
    registration: RegistrationStateMachine
    endpoints: Endpoints
    identity: IdentityProvider
    connectivity: Connectivity

    async def close(self) -> None:
        await self.gateway.close()


def build_context(
    identity: IdentityProvider,
    connectivity: Connectivity,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Optional[Clock] = None,
    configure_logging: bool = True,
) -> SyncContext:
    """
    Construct the shared context.

    Args:
        identity: Secure-storage accessor for the key pair
        connectivity: Online/offline signal
        settings: Configuration, defaults to environment settings
        transport: Optional HTTP transport override
        clock: Optional UTC clock for cache expiry
        configure_logging: Apply LOG_LEVEL and LOG_JSON to the process logging setup;
            hosts that configure logging themselves pass False

    Returns:
        Ready-to-use context
    """
    settings = settings or get_settings()

    if configure_logging:
        setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)

    engine = create_db_engine(settings.CACHE_DATABASE_URL)
    session_factory = create_session_factory(engine)

    # Both tables live on one connection for in-memory databases
    db_lock = threading.Lock()
    store = CacheStore(session_factory, clock=clock, lock=db_lock)
    settings_store = SettingsStore(session_factory, lock=db_lock)
    endpoints = Endpoints(settings)
    gateway = HttpGateway(
        settings.BASE_URL,
        store,
        identity,
        timeout=settings.REQUEST_TIMEOUT,
        transport=transport,
    )
    registration = RegistrationStateMachine(settings_store, gateway, endpoints)

    return SyncContext(
        settings=settings,
        store=store,
        settings_store=settings_store,
        gateway=gateway,
        registration=registration,
        endpoints=endpoints,
        identity=identity,
        connectivity=connectivity,
    )
