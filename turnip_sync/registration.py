"""
Registration state machine for the remote profile.

The first successful profile upsert creates the user remotely and flips a
persisted flag; every later upsert updates the existing record. A failed
call leaves the state untouched, so a failed create is retried through the
create endpoint next time.
"""

from enum import Enum

from .domain.entities import User
from .endpoints import Endpoints
from .gateway import HttpGateway
from .logging_config import get_logger
from .settings_store import HAS_REGISTERED, SettingsStore

logger = get_logger(__name__)


class RegistrationState(str, Enum):
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"


class RegistrationStateMachine:
    """Routes profile upserts to the create or update endpoint."""

    def __init__(self, settings_store: SettingsStore, gateway: HttpGateway, endpoints: Endpoints) -> None:
        self.settings_store = settings_store
        self.gateway = gateway
        self.endpoints = endpoints

    @property
    def has_registered(self) -> bool:
        return self.settings_store.get_bool(HAS_REGISTERED)

    @property
    def state(self) -> RegistrationState:
        if self.has_registered:
            return RegistrationState.REGISTERED
        return RegistrationState.UNREGISTERED

    async def upsert(self, user: User) -> RegistrationState:
        """
        Create or update ``user`` remotely depending on the current state.

        Args:
            user: Profile payload including the public key

        Returns:
            State after the call

        Raises:
            TransportError, ApplicationError: Propagated from the gateway,
                with the state unchanged
        """
        if self.state is RegistrationState.REGISTERED:
            await self.gateway.put(self.endpoints.update_profile(), user)
            logger.info("Profile updated")
            return RegistrationState.REGISTERED

        await self.gateway.post(self.endpoints.create_profile(), user)
        self.settings_store.set_bool(HAS_REGISTERED, True)
        logger.info("Profile created, registration complete")
        return RegistrationState.REGISTERED
