"""
Custom exceptions for the sync client.

Every failure surfaced by the data layer is one of these types. None of
them is retried or recovered here; callers decide what to show the user.
"""

from typing import Any, Optional


class TurnipSyncError(Exception):
    """Base exception for all sync client errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(TurnipSyncError):
    """Raised when a payload is missing required fields before it is sent."""

    def __init__(self, field_name: str, reason: str, value: Any = None):
        self.field_name = field_name
        self.reason = reason
        message = f"Validation failed for '{field_name}': {reason}"
        super().__init__(
            message=message,
            details={"field": field_name, "value": value, "reason": reason},
        )


class TransportError(TurnipSyncError):
    """Raised when no HTTP response was obtained at all."""

    def __init__(self, reason: str, url: Optional[str] = None):
        self.reason = reason
        self.url = url
        message = f"Transport failure: {reason}"
        super().__init__(message=message, details={"reason": reason, "url": url})


class ApplicationError(TurnipSyncError):
    """
    Raised when the remote service answers with a non-success status.

    Attributes:
        status_code: HTTP status code of the response
        body: Response body exactly as received
    """

    def __init__(self, status_code: int, body: str, url: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(
            message=body or f"Request failed with status {status_code}",
            details={"status_code": status_code, "url": url},
        )

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_transient(self) -> bool:
        """Server-side failures that may succeed if the caller tries again."""
        return self.status_code >= 500


class DeserializationError(TurnipSyncError):
    """Raised when a payload does not decode into the expected shape."""

    def __init__(self, model_name: str, reason: str):
        self.model_name = model_name
        self.reason = reason
        message = f"Unable to decode {model_name}: {reason}"
        super().__init__(
            message=message, details={"model": model_name, "reason": reason}
        )
