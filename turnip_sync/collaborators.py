"""
Contracts for the collaborators this package consumes but does not own.

Secure key storage and connectivity detection live in the host
application. Static implementations are provided for embedding and tests.
"""

from typing import Protocol, runtime_checkable

from .domain.entities import Identity


@runtime_checkable
class IdentityProvider(Protocol):
    """Async accessor for the identity key pair held in secure storage."""

    async def get_public_key(self) -> str: ...

    async def get_private_key(self) -> str: ...


@runtime_checkable
class Connectivity(Protocol):
    """Online/offline signal from the host platform."""

    def is_online(self) -> bool: ...


class StaticIdentityProvider:
    """Identity provider backed by an in-memory key pair."""

    def __init__(self, identity: Identity) -> None:
        self.identity = identity

    async def get_public_key(self) -> str:
        return self.identity.public_key

    async def get_private_key(self) -> str:
        return self.identity.private_key


class StaticConnectivity:
    """Connectivity flag that the host flips as network state changes."""

    def __init__(self, online: bool = True) -> None:
        self.online = online

    def is_online(self) -> bool:
        return self.online

    def set_online(self, online: bool) -> None:
        self.online = online
