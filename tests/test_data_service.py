"""
Tests for the data service: read policy, local profile and week storage,
and write pass-throughs.
"""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from turnip_sync.data_service import FRIEND_REQUESTS_KEY, FRIENDS_KEY, PROFILE_KEY
from turnip_sync.domain.entities import DayPriceRecord, FruitKind, Profile, empty_week
from turnip_sync.domain.exceptions import (
    ApplicationError,
    DeserializationError,
    TransportError,
    ValidationError,
)
from turnip_sync.week_key import week_key

from .conftest import PUBLIC_KEY

FRIENDS_PATH = f"/api/GetFriends/{PUBLIC_KEY}"
REQUESTS_PATH = f"/api/GetFriendRequests/{PUBLIC_KEY}"

FRIENDS = [{"publicKey": "F1", "name": "Isabelle", "islandName": "Town", "fruit": 3}]
NEW_FRIENDS = [{"publicKey": "F2", "name": "Tom Nook"}]


class TestReadPolicyOnline:
    """Test cache-vs-network decisions while online."""

    @pytest.mark.asyncio
    async def test_empty_cache_fetches(self, service, backend, store):
        backend.respond("GET", FRIENDS_PATH, json_body=FRIENDS)

        friends = await service.get_friends()

        assert [f.name for f in friends] == ["Isabelle"]
        assert friends[0].fruit is FruitKind.PEACH
        assert len(backend.calls("GET", FRIENDS_PATH)) == 1
        assert store.get(FRIENDS_KEY) == json.dumps(FRIENDS)

    @pytest.mark.asyncio
    async def test_fresh_cache_skips_network(self, service, backend):
        backend.respond("GET", FRIENDS_PATH, json_body=FRIENDS)
        await service.get_friends()

        backend.respond("GET", FRIENDS_PATH, json_body=NEW_FRIENDS)
        friends = await service.get_friends()

        assert friends[0].name == "Isabelle"
        assert len(backend.calls("GET", FRIENDS_PATH)) == 1

    @pytest.mark.asyncio
    async def test_expired_cache_fetches(self, service, backend, clock):
        backend.respond("GET", FRIENDS_PATH, json_body=FRIENDS)
        await service.get_friends()

        clock.advance(timedelta(minutes=6))
        backend.respond("GET", FRIENDS_PATH, json_body=NEW_FRIENDS)
        friends = await service.get_friends()

        assert friends[0].name == "Tom Nook"
        assert len(backend.calls("GET", FRIENDS_PATH)) == 2

    @pytest.mark.asyncio
    async def test_force_refresh_bypasses_fresh_cache(self, service, backend):
        backend.respond("GET", FRIENDS_PATH, json_body=FRIENDS)
        await service.get_friends()

        backend.respond("GET", FRIENDS_PATH, json_body=NEW_FRIENDS)
        friends = await service.get_friends(force_refresh=True)

        assert friends[0].name == "Tom Nook"
        assert len(backend.calls("GET", FRIENDS_PATH)) == 2

    @pytest.mark.asyncio
    async def test_failed_refresh_does_not_fall_back(self, service, backend, clock):
        """A failed fetch raises even when a stale value is cached."""
        backend.respond("GET", FRIENDS_PATH, json_body=FRIENDS)
        await service.get_friends()

        clock.advance(timedelta(minutes=6))
        backend.respond("GET", FRIENDS_PATH, status_code=500, text="storage down")

        with pytest.raises(ApplicationError) as exc_info:
            await service.get_friends()

        assert exc_info.value.status_code == 500
        assert exc_info.value.body == "storage down"

    @pytest.mark.asyncio
    async def test_failed_forced_refresh_raises_transport_error(self, service, backend):
        backend.respond("GET", FRIENDS_PATH, json_body=FRIENDS)
        await service.get_friends()

        backend.fail("GET", FRIENDS_PATH, httpx.ConnectError("unreachable"))

        with pytest.raises(TransportError):
            await service.get_friends(force_refresh=True)

    @pytest.mark.asyncio
    async def test_corrupt_fresh_entry_surfaces(self, service, store):
        store.put(FRIENDS_KEY, "not json", timedelta(minutes=5))

        with pytest.raises(DeserializationError):
            await service.get_friends()

    @pytest.mark.asyncio
    async def test_request_uses_access_code(self, service, backend):
        backend.respond("GET", REQUESTS_PATH, json_body=[])

        await service.get_friend_requests()

        assert backend.requests[0].url.params["code"] == "requests-code"


class TestReadPolicyOffline:
    """Test stale-while-offline reads."""

    @pytest.mark.asyncio
    async def test_offline_serves_stale_entry(self, service, backend, clock, connectivity):
        backend.respond("GET", FRIENDS_PATH, json_body=FRIENDS)
        await service.get_friends()

        clock.advance(timedelta(days=2))
        connectivity.set_online(False)
        friends = await service.get_friends(force_refresh=True)

        assert friends[0].name == "Isabelle"
        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_offline_without_cache_returns_none(self, service, backend, connectivity):
        connectivity.set_online(False)

        assert await service.get_friend_requests() is None
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_offline_read_of_pending_requests(self, service, backend, connectivity):
        backend.respond(
            "GET", REQUESTS_PATH, json_body=[{"requesterPublicKey": "R1", "name": "Blathers"}]
        )
        await service.get_friend_requests()

        connectivity.set_online(False)
        requests = await service.get_friend_requests()

        assert requests[0].requester_public_key == "R1"
        assert len(backend.requests) == 1


class TestProfileStorage:
    """Test the locally saved profile."""

    def test_default_profile(self, service):
        profile = service.get_profile()

        assert profile.fruit is FruitKind.APPLE
        assert profile.status == "😍"
        assert profile.name is None

    def test_save_and_get_profile(self, service):
        profile = Profile(
            name="Ada", island_name="Nook", fruit=FruitKind.CHERRY, status="🍒", time_zone="UTC"
        )
        service.save_profile(profile)

        assert service.get_profile() == profile

    def test_profile_ttl_is_one_day(self, service, store, clock):
        service.save_profile(Profile(name="Ada"))

        assert store.get_expiration(PROFILE_KEY) == clock.now + timedelta(days=1)

    def test_expired_profile_still_read_locally(self, service, clock):
        service.save_profile(Profile(name="Ada"))
        clock.advance(timedelta(days=3))

        assert service.get_profile().name == "Ada"


class TestWeekStorage:
    """Test the locally saved weekly prices."""

    def test_empty_week_template(self, service, backend):
        days = service.get_current_week(datetime(2026, 3, 10))

        assert len(days) == 7
        assert days[0].day_name == "Sunday"
        assert days[0].is_first_day_of_week is True
        assert not any(d.is_first_day_of_week for d in days[1:])
        assert all(
            d.morning_price is None and d.evening_price is None and d.buy_price is None
            for d in days
        )
        assert backend.requests == []

    def test_save_and_get_week(self, service):
        now = datetime(2026, 3, 10)
        days = empty_week()
        days[0].buy_price = 95
        days[2].morning_price = 120

        service.save_current_week(days, now)

        assert service.get_current_week(now) == days
        assert service.get_current_week(now + timedelta(days=7)) == empty_week()

    def test_week_ttl_is_seven_days(self, service, store, clock):
        now = datetime(2026, 3, 10)
        service.save_current_week(empty_week(), now)

        assert store.get_expiration(week_key(now)) == clock.now + timedelta(days=7)

    def test_save_rejects_partial_week(self, service):
        with pytest.raises(ValidationError):
            service.save_current_week(empty_week()[:3])


class TestUpdateTurnipPrices:
    """Test price updates."""

    @pytest.mark.asyncio
    async def test_defaults_to_today(self, service, backend):
        now = datetime(2026, 3, 10, 9, 30)  # Tuesday
        days = empty_week()
        days[2].morning_price = 120
        days[2].evening_price = 85
        service.save_current_week(days, now)
        backend.respond("PUT", "/api/UpdateTurnipPrices")

        await service.update_turnip_prices(now=now)

        request = backend.requests[0]
        body = json.loads(request.content)
        assert request.url.params["code"] == "prices-code"
        assert body["publicKey"] == PUBLIC_KEY
        assert body["amPrice"] == 120
        assert body["pmPrice"] == 85
        assert body["buyPrice"] == 0
        assert body["year"] == 2026
        assert body["dayOfYear"] == 69
        assert "turnipUpdateTimeUTC" in body

    @pytest.mark.asyncio
    async def test_explicit_day(self, service, backend):
        backend.respond("PUT", "/api/UpdateTurnipPrices")

        await service.update_turnip_prices(
            DayPriceRecord(day_name="Sunday", is_first_day_of_week=True, buy_price=98),
            now=datetime(2026, 3, 8),
        )

        body = json.loads(backend.requests[0].content)
        assert body["buyPrice"] == 98
        assert body["amPrice"] == 0

    @pytest.mark.asyncio
    async def test_update_time_follows_given_now(self, service, backend):
        backend.respond("PUT", "/api/UpdateTurnipPrices")
        eastern = timezone(timedelta(hours=-5))

        await service.update_turnip_prices(
            DayPriceRecord(day_name="Tuesday", morning_price=110),
            now=datetime(2026, 3, 10, 9, 30, tzinfo=eastern),
        )

        body = json.loads(backend.requests[0].content)
        sent = datetime.fromisoformat(body["turnipUpdateTimeUTC"].replace("Z", "+00:00"))
        assert sent == datetime(2026, 3, 10, 14, 30, tzinfo=timezone.utc)
        assert sent.utcoffset() == timedelta(0)

    @pytest.mark.asyncio
    async def test_offline_update_fails(self, service, backend, connectivity):
        connectivity.set_online(False)

        with pytest.raises(TransportError):
            await service.update_turnip_prices(now=datetime(2026, 3, 10))

        assert backend.requests == []


class TestFriendWrites:
    """Test friend actions."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method_name,path,code",
        [
            ("submit_friend_request", "/api/SubmitFriendRequest", "submit-code"),
            ("remove_friend_request", "/api/RejectFriendRequest", "reject-code"),
            ("approve_friend_request", "/api/ApproveFriendRequest", "approve-code"),
        ],
    )
    async def test_friend_request_actions(self, service, backend, method_name, path, code):
        backend.respond("POST", path)

        await getattr(service, method_name)("FRIEND9")

        request = backend.calls("POST", path)[0]
        assert request.url.params["code"] == code
        assert json.loads(request.content) == {
            "myPublicKey": PUBLIC_KEY,
            "friendPublicKey": "FRIEND9",
        }

    @pytest.mark.asyncio
    async def test_remove_friend(self, service, backend):
        path = f"/api/RemoveFriend/{PUBLIC_KEY}/FRIEND9"
        backend.respond("DELETE", path)

        await service.remove_friend("FRIEND9")

        assert len(backend.calls("DELETE", path)) == 1
        assert backend.requests[0].url.params["code"] == "remove-code"

    @pytest.mark.asyncio
    async def test_write_error_propagates(self, service, backend):
        backend.respond("POST", "/api/SubmitFriendRequest", status_code=409, text="Already friends")

        with pytest.raises(ApplicationError) as exc_info:
            await service.submit_friend_request("FRIEND9")

        assert exc_info.value.status_code == 409
        assert exc_info.value.body == "Already friends"

    @pytest.mark.asyncio
    async def test_writes_are_not_cached(self, service, backend, store):
        backend.respond("POST", "/api/ApproveFriendRequest")

        await service.approve_friend_request("FRIEND9")

        assert store.exists(FRIENDS_KEY) is False
        assert store.exists(FRIEND_REQUESTS_KEY) is False

    @pytest.mark.asyncio
    async def test_offline_write_fails(self, service, backend, connectivity):
        connectivity.set_online(False)

        with pytest.raises(TransportError):
            await service.remove_friend("FRIEND9")

        assert backend.requests == []
