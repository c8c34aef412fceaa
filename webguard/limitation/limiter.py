"""Fixed-window rate limiter backed by Redis."""

from __future__ import annotations

import warnings
from collections.abc import Callable
from datetime import timedelta
from typing import Any, Optional, Union

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from webguard.http import Request
from webguard.limitation.errors import ClientError, LimitExceeded
from webguard.limitation.status import Status, epoch_utc_plus

DEFAULT_REQUEST_LIMIT = 5000
"""Default request limit."""

DEFAULT_PERIOD_SECS = 3600
"""Default period (in seconds)."""

DEFAULT_COOKIE_NAME = "sid"
"""Default cookie name."""

KeyFn = Callable[[Request], Optional[str]]
Period = Union[int, float, timedelta]


def _to_timedelta(period: Period) -> timedelta:
    return period if isinstance(period, timedelta) else timedelta(seconds=period)


class Limiter:
    """Rate limiter counting requests per key in fixed windows."""

    def __init__(self, client: Any, limit: int, period: Period, get_key_fn: KeyFn) -> None:
        self.client = client
        self.limit = limit
        self.period = _to_timedelta(period)
        self.get_key_fn = get_key_fn

    def __repr__(self) -> str:
        return f"Limiter(limit={self.limit!r}, period={self.period!r})"

    @classmethod
    def builder(cls, redis_url: str) -> Builder:
        """Start a builder with the default settings."""
        return Builder(redis_url)

    async def count(self, key: str) -> Status:
        """Consume one rate limit unit for `key` and return the resulting status.

        Raises LimitExceeded when the limit for the current period is exceeded.
        """
        count, reset = await self._track(str(key))
        status = Status.from_count(count, self.limit, reset)
        if count > self.limit:
            raise LimitExceeded(status)
        return status

    async def _track(self, key: str) -> tuple[int, int]:
        """Count `key` in the current period; return the count and reset timestamp."""
        expires = int(self.period.total_seconds())
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.set(key, 0, ex=expires, nx=True)
                pipe.incr(key)
                pipe.ttl(key)
                _, count, ttl = await pipe.execute()
        except RedisError as err:
            raise ClientError(str(err)) from err

        count, ttl = int(count), int(ttl)
        if ttl < 0:
            raise ClientError(f"unexpected time-to-live {ttl} for key")
        return count, epoch_utc_plus(ttl)


class Builder:
    """Rate limiter builder."""

    def __init__(self, redis_url: str) -> None:
        self._redis_url = redis_url
        self._limit = DEFAULT_REQUEST_LIMIT
        self._period = timedelta(seconds=DEFAULT_PERIOD_SECS)
        self._get_key_fn: KeyFn | None = None
        self._cookie_name = DEFAULT_COOKIE_NAME

    def limit(self, limit: int) -> Builder:
        """Set the upper limit of requests per period."""
        self._limit = limit
        return self

    def period(self, period: Period) -> Builder:
        """Set the window length, as a timedelta or in seconds."""
        self._period = _to_timedelta(period)
        return self

    def key_by(self, resolver: KeyFn) -> Builder:
        """Set the function deriving the rate limit key from a request."""
        self._get_key_fn = resolver
        return self

    def cookie_name(self, cookie_name: str) -> Builder:
        """Set the name of the cookie used as key. Prefer `key_by`."""
        warnings.warn("Prefer `key_by`.", DeprecationWarning, stacklevel=2)
        if self._get_key_fn is not None:
            raise RuntimeError(
                "This method should not be used in combination of get_key as they "
                "overwrite each other"
            )
        self._cookie_name = cookie_name
        return self

    def build(self) -> Limiter:
        """Create the limiter. Raises ClientError when the Redis URL is invalid."""
        if self._get_key_fn is not None:
            get_key = self._get_key_fn
        else:
            cookie_name = self._cookie_name

            def get_key(request: Request) -> str | None:
                value = request.cookie(cookie_name)
                return None if value is None else f"{cookie_name}={value}"

        try:
            client = aioredis.from_url(self._redis_url)
        except (ValueError, RedisError) as err:
            raise ClientError(f"Redis URL did not parse: {err}") from err

        return Limiter(client=client, limit=self._limit, period=self._period, get_key_fn=get_key)