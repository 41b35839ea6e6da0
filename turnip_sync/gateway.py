"""
HTTP gateway to the remote functions host.

Wraps a single shared ``httpx.AsyncClient``. Authenticates every request
with a bearer token derived once per gateway. Turns every failure into
the package's error types and writes fetched payloads through to the
cache store.
"""

import asyncio
import time
from datetime import timedelta
from typing import Any, Optional, Type, TypeVar

import httpx

from .cache.store import CacheStore
from .collaborators import IdentityProvider
from .domain.exceptions import ApplicationError, TransportError
from .logging_config import get_logger
from .security import authorization_header
from .serialization import decode_payload, encode_payload

logger = get_logger(__name__)

T = TypeVar("T")

JSON_HEADERS = {"Content-Type": "application/json; charset=utf-8"}


def _path_of(url: str) -> str:
    """URL without its query string, which carries access codes."""
    return url.split("?", 1)[0]


class HttpGateway:
    """
    Authenticated HTTP access to the remote service.

    No retries, no per-request re-authentication. Timeouts are disabled
    unless configured.

    Attributes:
        base_url: Base URL of the functions host
        store: Cache store that fetched payloads are written through to
        identity: Provider of the private key used for the bearer token
    """

    def __init__(
        self,
        base_url: str,
        store: CacheStore,
        identity: IdentityProvider,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the gateway.

        Args:
            base_url: Base URL of the functions host
            store: Cache store for write-through of fetched payloads
            identity: Identity key pair accessor
            timeout: Request timeout in seconds, None to wait indefinitely
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url
        self.store = store
        self.identity = identity
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._auth_lock = asyncio.Lock()

        logger.info("Initialized HttpGateway", base_url=base_url, timeout=timeout)

    @property
    def is_authorized(self) -> bool:
        return "Authorization" in self._client.headers

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed HTTP client")

    async def __aenter__(self) -> "HttpGateway":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _ensure_authorization(self) -> None:
        if self.is_authorized:
            return
        async with self._auth_lock:
            if self.is_authorized:
                return
            private_key = await self.identity.get_private_key()
            self._client.headers["Authorization"] = authorization_header(private_key)
            logger.debug("Attached bearer credential")

    async def _send(self, method: str, url: str, body: Any = None) -> str:
        """
        Send a request and return the full response body.

        Raises:
            TransportError: If no response was received
            ApplicationError: If the response status is not a success
        """
        await self._ensure_authorization()

        path = _path_of(url)
        content = None
        headers = None
        if body is not None:
            content = body if isinstance(body, str) else encode_payload(body)
            headers = JSON_HEADERS

        start_time = time.perf_counter()
        try:
            response = await self._client.request(method, url, content=content, headers=headers)
        except httpx.RequestError as error:
            logger.error(
                "Request failed without response",
                method=method,
                path=path,
                error_type=type(error).__name__,
                error_message=str(error),
            )
            raise TransportError(str(error) or type(error).__name__, url=path) from error

        duration_ms = (time.perf_counter() - start_time) * 1000
        response_body = response.text

        if not response.is_success:
            logger.warning(
                "Remote service returned error",
                method=method,
                path=path,
                status_code=response.status_code,
                response_body=response_body[:500],
                duration_ms=round(duration_ms, 2),
            )
            raise ApplicationError(response.status_code, response_body, url=path)

        logger.info(
            "Request completed",
            method=method,
            path=path,
            status_code=response.status_code,
            response_size=len(response.content),
            duration_ms=round(duration_ms, 2),
        )
        return response_body

    async def get(
        self,
        url: str,
        cache_key: str,
        model: Type[T],
        ttl_minutes: int = 7,
        force_refresh: bool = False,
    ) -> T:
        """
        Fetch ``url``, cache the raw body and decode it into ``model``.

        The raw body is written to the store before decoding, so cached and
        fetched payloads share one decoding step.

        Args:
            url: Relative URL including its access code
            cache_key: Store key to write the payload under
            model: Target type of the decoded payload
            ttl_minutes: Lifetime of the cached payload
            force_refresh: Whether the caller bypassed a fresh cache entry

        Returns:
            Decoded payload

        Raises:
            TransportError: If no response was received
            ApplicationError: If the response status is not a success
            DeserializationError: If the body does not decode into ``model``
        """
        logger.debug("Fetching", path=_path_of(url), cache_key=cache_key, force_refresh=force_refresh)

        payload = await self._send("GET", url)
        self.store.put(cache_key, payload, timedelta(minutes=ttl_minutes))
        return decode_payload(payload, model)

    async def post(self, url: str, body: Any) -> None:
        await self._send("POST", url, body)

    async def post_json(self, url: str, body: Any, model: Type[T]) -> T:
        """POST ``body`` and decode the response into ``model``."""
        payload = await self._send("POST", url, body)
        return decode_payload(payload, model)

    async def put(self, url: str, body: Any) -> None:
        await self._send("PUT", url, body)

    async def delete(self, url: str) -> None:
        await self._send("DELETE", url)
