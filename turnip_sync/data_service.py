"""
Data service: cache-or-network policy for every read and routing for every write.

Reads of remote lists follow one policy:

1. Offline: serve whatever is cached, expired or not (None if never cached).
2. Online and the entry is fresh, unless ``force_refresh``: serve the cache.
3. Otherwise fetch; a failed fetch raises and never falls back to the cache.

Writes go straight to the gateway and fail with ``TransportError`` while
offline.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Type, TypeVar

from .context import SyncContext
from .domain.entities import (
    DayPriceRecord,
    FriendRequest,
    FriendStatus,
    PendingFriendRequest,
    Profile,
    TurnipUpdate,
    User,
    default_profile,
    empty_week,
)
from .domain.exceptions import DeserializationError, TransportError, ValidationError
from .logging_config import get_logger
from .registration import RegistrationState
from .serialization import decode_payload
from .week_key import day_of_week, week_key

logger = get_logger(__name__)

T = TypeVar("T")

PROFILE_KEY = "profile"
FRIENDS_KEY = "get_friends"
FRIEND_REQUESTS_KEY = "get_friend_requests"

REQUIRED_PROFILE_FIELDS = ("name", "island_name", "time_zone")


class DataService:
    """
    Entry point for all reads and writes of the client.

    Attributes:
        context: Shared store, gateway and collaborators
    """

    def __init__(self, context: SyncContext) -> None:
        self.context = context
        self.store = context.store
        self.gateway = context.gateway
        self.endpoints = context.endpoints
        self.settings = context.settings

    def _is_online(self) -> bool:
        return self.context.connectivity.is_online()

    def _require_online(self, operation: str) -> None:
        if not self._is_online():
            logger.warning("Write attempted while offline", operation=operation)
            raise TransportError(f"cannot {operation} while offline")

    def _decode_cached(self, cached: Any, model: Type[T]) -> T:
        if not isinstance(cached, str):
            raise DeserializationError(
                getattr(model, "__name__", str(model)), "cached payload is not text"
            )
        return decode_payload(cached, model)

    async def fetch(
        self,
        url: str,
        cache_key: str,
        model: Type[T],
        ttl_minutes: int,
        force_refresh: bool = False,
    ) -> Optional[T]:
        """
        Read a remote resource through the cache.

        Args:
            url: Relative URL including its access code
            cache_key: Store key of the resource
            model: Target type of the payload
            ttl_minutes: Lifetime of a freshly fetched payload
            force_refresh: Skip a fresh cache entry when online

        Returns:
            Decoded payload, or None when offline with nothing cached

        Raises:
            TransportError, ApplicationError, DeserializationError
        """
        if not self._is_online():
            cached = self.store.get(cache_key)
            if cached is None:
                logger.info("Offline with nothing cached", cache_key=cache_key)
                return None
            logger.info("Offline, serving cached value", cache_key=cache_key)
            return self._decode_cached(cached, model)

        if not force_refresh and not self.store.is_expired(cache_key):
            cached = self.store.get(cache_key)
            if cached is not None:
                logger.debug("Cache hit", cache_key=cache_key)
                return self._decode_cached(cached, model)

        return await self.gateway.get(
            url,
            cache_key,
            model,
            ttl_minutes=ttl_minutes,
            force_refresh=force_refresh,
        )

    # Profile

    def get_profile(self) -> Profile:
        """Locally saved profile, or the default one."""
        profile = self.store.get_model(PROFILE_KEY, Profile)
        return profile if profile is not None else default_profile()

    def save_profile(self, profile: Profile) -> None:
        self.store.put(PROFILE_KEY, profile, timedelta(days=self.settings.PROFILE_TTL_DAYS))

    async def upsert_user_profile(self, profile: Optional[Profile] = None) -> RegistrationState:
        """
        Push the profile to the backend, creating the user on first use.

        Args:
            profile: Profile to send, defaults to the locally saved one

        Returns:
            Registration state after the call

        Raises:
            ValidationError: If a required field is blank (nothing is sent)
            TransportError, ApplicationError: Propagated from the gateway
        """
        profile = profile or self.get_profile()

        for field_name in REQUIRED_PROFILE_FIELDS:
            value = getattr(profile, field_name)
            if value is None or not value.strip():
                raise ValidationError(field_name, "is required", value)

        self._require_online("update profile")

        public_key = await self.context.identity.get_public_key()
        user = User.from_profile(profile, public_key)
        return await self.context.registration.upsert(user)

    # Weekly prices

    def get_current_week(self, now: Optional[datetime] = None) -> List[DayPriceRecord]:
        """Locally saved prices of the current week, or a blank Sunday-first week."""
        days = self.store.get_model(week_key(now), List[DayPriceRecord])
        return days if days is not None else empty_week()

    def save_current_week(self, days: List[DayPriceRecord], now: Optional[datetime] = None) -> None:
        if len(days) != 7:
            raise ValidationError("days", f"expected 7 days, got {len(days)}", len(days))
        self.store.put(week_key(now), days, timedelta(days=self.settings.WEEK_TTL_DAYS))

    async def update_turnip_prices(
        self,
        day: Optional[DayPriceRecord] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """
        Send one day's prices to the backend.

        Args:
            day: Prices to send, defaults to today's entry of the current week
            now: Local time of the update, defaults to the current time
        """
        if now is None:
            now = datetime.now()
            update_time = datetime.now(timezone.utc)
        else:
            update_time = now.astimezone(timezone.utc)
        day = day or self.get_current_week(now)[day_of_week(now)]

        self._require_online("update prices")

        public_key = await self.context.identity.get_public_key()
        update = TurnipUpdate(
            public_key=public_key,
            morning_price=day.morning_price or 0,
            evening_price=day.evening_price or 0,
            buy_price=day.buy_price or 0,
            year=now.year,
            day_of_year=now.timetuple().tm_yday,
            update_timestamp_utc=update_time,
        )
        await self.gateway.put(self.endpoints.update_turnip_prices(), update)

    # Friends

    async def _friend_request(self, friend_key: str) -> FriendRequest:
        public_key = await self.context.identity.get_public_key()
        return FriendRequest(my_public_key=public_key, friend_public_key=friend_key)

    async def submit_friend_request(self, friend_key: str) -> None:
        self._require_online("submit friend request")
        body = await self._friend_request(friend_key)
        await self.gateway.post(self.endpoints.submit_friend_request(), body)

    async def remove_friend_request(self, friend_key: str) -> None:
        """Reject a pending request from ``friend_key``."""
        self._require_online("reject friend request")
        body = await self._friend_request(friend_key)
        await self.gateway.post(self.endpoints.reject_friend_request(), body)

    async def approve_friend_request(self, friend_key: str) -> None:
        self._require_online("approve friend request")
        body = await self._friend_request(friend_key)
        await self.gateway.post(self.endpoints.approve_friend_request(), body)

    async def remove_friend(self, friend_key: str) -> None:
        self._require_online("remove friend")
        public_key = await self.context.identity.get_public_key()
        await self.gateway.delete(self.endpoints.remove_friend(public_key, friend_key))

    async def get_friends(self, force_refresh: bool = False) -> Optional[List[FriendStatus]]:
        public_key = await self.context.identity.get_public_key()
        return await self.fetch(
            self.endpoints.get_friends(public_key),
            FRIENDS_KEY,
            List[FriendStatus],
            ttl_minutes=self.settings.SOCIAL_TTL_MINUTES,
            force_refresh=force_refresh,
        )

    async def get_friend_requests(
        self, force_refresh: bool = False
    ) -> Optional[List[PendingFriendRequest]]:
        public_key = await self.context.identity.get_public_key()
        return await self.fetch(
            self.endpoints.get_friend_requests(public_key),
            FRIEND_REQUESTS_KEY,
            List[PendingFriendRequest],
            ttl_minutes=self.settings.SOCIAL_TTL_MINUTES,
            force_refresh=force_refresh,
        )
