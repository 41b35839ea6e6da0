"""
Relative URLs of the remote functions.

Each function has its own access code which travels as the ``code`` query
parameter. Path segments built from keys are percent-encoded because
public keys may contain ``/`` and ``+``.
"""

from urllib.parse import quote, urlencode

from .config import Settings


def api_url(path: str, code: str) -> str:
    return f"api/{path}?{urlencode({'code': code})}"


def _segment(value: str) -> str:
    return quote(value, safe="")


class Endpoints:
    """URL builder bound to the configured access codes."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def create_profile(self) -> str:
        return api_url("CreateProfile", self.settings.CREATE_PROFILE_CODE)

    def update_profile(self) -> str:
        return api_url("UpdateProfile", self.settings.UPDATE_PROFILE_CODE)

    def update_turnip_prices(self) -> str:
        return api_url("UpdateTurnipPrices", self.settings.UPDATE_TURNIP_PRICES_CODE)

    def submit_friend_request(self) -> str:
        return api_url("SubmitFriendRequest", self.settings.SUBMIT_FRIEND_REQUEST_CODE)

    def reject_friend_request(self) -> str:
        return api_url("RejectFriendRequest", self.settings.REJECT_FRIEND_REQUEST_CODE)

    def approve_friend_request(self) -> str:
        return api_url("ApproveFriendRequest", self.settings.APPROVE_FRIEND_REQUEST_CODE)

    def remove_friend(self, public_key: str, friend_key: str) -> str:
        path = f"RemoveFriend/{_segment(public_key)}/{_segment(friend_key)}"
        return api_url(path, self.settings.REMOVE_FRIEND_CODE)

    def get_friends(self, public_key: str) -> str:
        return api_url(f"GetFriends/{_segment(public_key)}", self.settings.GET_FRIENDS_CODE)

    def get_friend_requests(self, public_key: str) -> str:
        return api_url(
            f"GetFriendRequests/{_segment(public_key)}",
            self.settings.GET_FRIEND_REQUESTS_CODE,
        )
