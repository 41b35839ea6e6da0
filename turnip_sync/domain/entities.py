"""
Domain entities for profiles, weekly prices and the friend graph.

Entities are pydantic models so the same definitions serve the local cache
and the remote wire format. Field names are snake_case in Python and
camelCase on the wire; a few wire names keep the backend's spelling and
carry an explicit alias.
"""

from datetime import datetime
from enum import IntEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


class FruitKind(IntEnum):
    """Native island fruit, sent to the backend as its integer value."""

    APPLE = 0
    CHERRY = 1
    ORANGE = 2
    PEACH = 3
    PEAR = 4


class WireModel(BaseModel):
    """Base model with camelCase aliases that still accepts field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Identity(BaseModel):
    """Key pair supplied by secure storage. Read-only to this package."""

    model_config = ConfigDict(frozen=True)

    public_key: str
    private_key: str


class Profile(WireModel):
    """Locally edited profile."""

    name: Optional[str] = None
    island_name: Optional[str] = None
    fruit: FruitKind = FruitKind.APPLE
    status: Optional[str] = None
    time_zone: Optional[str] = None


def default_profile() -> Profile:
    """Profile used before the user has saved one."""
    return Profile(fruit=FruitKind.APPLE, status="😍")


class User(WireModel):
    """Profile payload sent to the create and update endpoints."""

    public_key: str
    name: Optional[str] = None
    island_name: Optional[str] = None
    fruit: FruitKind = FruitKind.APPLE
    status: str = ""
    time_zone: str = ""

    @classmethod
    def from_profile(cls, profile: Profile, public_key: str) -> "User":
        return cls(
            public_key=public_key,
            name=profile.name,
            island_name=profile.island_name,
            fruit=profile.fruit,
            status=profile.status or "",
            time_zone=profile.time_zone or "",
        )


class DayPriceRecord(WireModel):
    """Prices entered for a single day of the week."""

    day_name: str
    is_first_day_of_week: bool = False
    morning_price: Optional[int] = None
    evening_price: Optional[int] = None
    buy_price: Optional[int] = None


def empty_week() -> List[DayPriceRecord]:
    """Seven blank days starting on Sunday."""
    return [
        DayPriceRecord(day_name=name, is_first_day_of_week=(index == 0))
        for index, name in enumerate(DAY_NAMES)
    ]


class TurnipUpdate(WireModel):
    """Price update payload. Missing prices are sent as zero."""

    public_key: str
    morning_price: int = Field(default=0, alias="amPrice")
    evening_price: int = Field(default=0, alias="pmPrice")
    buy_price: int = 0
    year: int
    day_of_year: int
    update_timestamp_utc: datetime = Field(alias="turnipUpdateTimeUTC")


class FriendRequest(WireModel):
    """Body of the submit, reject and approve friend request endpoints."""

    my_public_key: str
    friend_public_key: str


class FriendStatus(WireModel):
    """A friend's profile and latest prices, as listed by the backend."""

    model_config = ConfigDict(extra="allow")

    public_key: Optional[str] = None
    name: Optional[str] = None
    island_name: Optional[str] = None
    fruit: Optional[FruitKind] = None
    status: Optional[str] = None
    time_zone: Optional[str] = None
    am_price: Optional[int] = None
    pm_price: Optional[int] = None
    buy_price: Optional[int] = None
    turnip_update_year: Optional[int] = None
    turnip_update_day_of_year: Optional[int] = None
    turnip_update_time_utc: Optional[datetime] = Field(
        default=None, alias="turnipUpdateTimeUTC"
    )


class PendingFriendRequest(WireModel):
    """An incoming friend request awaiting approval or rejection."""

    model_config = ConfigDict(extra="allow")

    requester_public_key: Optional[str] = None
    name: Optional[str] = None
    island_name: Optional[str] = None
