from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol

import aiohttp

from .const import DEFAULT_TIMEOUT_SECONDS, PLACEHOLDER

_LOGGER = logging.getLogger(__name__)


class HttpCurtainError(Exception):
    """Base class for all errors raised by this library."""


class TransportError(HttpCurtainError):
    """Raised on network failure or a non-success HTTP status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class InvalidResponseError(HttpCurtainError):
    """Raised when a device response carries no usable value."""


class RegistrationConflict(HttpCurtainError):
    """Raised by a push source when the identity is already registered."""


@dataclass(frozen=True)
class HttpEndpoint:
    url: str
    method: str = "GET"
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    def resolve(self, value: int) -> HttpEndpoint:
        """Return a copy with every placeholder in url and body replaced by value."""
        text = str(value)
        return dataclasses.replace(
            self,
            url=self.url.replace(PLACEHOLDER, text),
            body=self.body.replace(PLACEHOLDER, text),
            headers=dict(self.headers),
        )


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: str

    @property
    def ok(self) -> bool:
        return self.status == 200


class Transport(Protocol):
    async def request(self, endpoint: HttpEndpoint) -> HttpResponse: ...


NotificationHandler = Callable[[Mapping[str, Any]], Any]


class PushSource(Protocol):
    def register(self, identity: str, handler: NotificationHandler, secret: str | None) -> None: ...


class HttpCurtainApi:
    """Single-attempt HTTP transport on a shared aiohttp session."""

    def __init__(self, session: aiohttp.ClientSession, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def request(self, endpoint: HttpEndpoint) -> HttpResponse:
        kwargs: dict[str, Any] = {"timeout": self._timeout}
        if endpoint.headers:
            kwargs["headers"] = dict(endpoint.headers)
        if endpoint.body:
            kwargs["data"] = endpoint.body.encode()

        _LOGGER.debug("%s %s", endpoint.method, endpoint.url)
        try:
            async with self._session.request(endpoint.method, endpoint.url, **kwargs) as resp:
                body = await resp.text(errors="replace")
                return HttpResponse(status=resp.status, body=body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"{endpoint.method} {endpoint.url} failed: {e!r}") from e
