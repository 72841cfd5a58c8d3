"""Settings for the HTTP client shared by API-backed sources.

Retries and rate limiting always apply. Response caching is opt-in: a
``ResilienceConfig`` without ``cache`` talks to the API on every call.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Literal

import httpx

from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

ResponseHook = Callable[[httpx.Response], Awaitable[None] | None]

# award search is a read-only POST
READ_METHODS: Final[frozenset[str]] = frozenset({"GET", "HEAD", "OPTIONS", "POST"})
TRANSIENT_STATUSES: Final[frozenset[int]] = frozenset({408, 429, 500, 502, 503, 504})
TRANSIENT_ERRORS: Final[tuple[type[httpx.HTTPError], ...]] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """When a failed request is tried again before the source gives up."""

    attempts: int = 3
    backoff_factor: float = 0.5
    max_backoff_seconds: float = 30.0
    jitter: float = 1.0
    honour_retry_after: bool = True
    methods: frozenset[str] = READ_METHODS
    statuses: frozenset[int] = TRANSIENT_STATUSES
    errors: tuple[type[httpx.HTTPError], ...] = TRANSIENT_ERRORS

    def __post_init__(self) -> None:
        if self.attempts < 0:
            raise ConfigurationError(f"Retry attempts must be >= 0, got {self.attempts}")


@dataclass(slots=True, frozen=True)
class RateLimit:
    calls: int
    period_seconds: float

    def __post_init__(self) -> None:
        if self.calls < 1 or self.period_seconds <= 0:
            msg = f"Rate limit needs positive values, got {self.calls}/{self.period_seconds}s"
            raise ConfigurationError(msg)


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """hishel storage; ``path=None`` puts the sqlite file in the data dir."""

    backend: Literal["sqlite", "memory"] = "sqlite"
    path: str | None = None
    ttl_seconds: float | None = None
    refresh_on_access: bool = True


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    rate_limit: RateLimit | None = None
    cache: CacheConfig | None = None
    response_hooks: tuple[ResponseHook, ...] = ()
    headers: Mapping[str, str] | None = None
