"""Rate limiting request handler wrapper."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from http import HTTPStatus
from typing import Union

from webguard.http import Request, Response
from webguard.limitation.errors import ClientError, LimitationError, LimitExceeded
from webguard.limitation.limiter import Limiter

logger = logging.getLogger(__name__)

Handler = Callable[[Request], Union[Response, Awaitable[Response]]]


class RateLimiter:
    """Rate limit middleware factory bound to a limiter."""

    def __init__(self, limiter: Limiter) -> None:
        self.limiter = limiter

    def wrap(self, handler: Handler) -> RateLimiterMiddleware:
        """Build the middleware around `handler`."""
        return RateLimiterMiddleware(handler, self.limiter)


class RateLimiterMiddleware:
    """Counts each keyed request and rejects those beyond the limit."""

    def __init__(self, handler: Handler, limiter: Limiter) -> None:
        self.handler = handler
        self.limiter = limiter

    async def _call_handler(self, request: Request) -> Response:
        result = self.handler(request)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def __call__(self, request: Request) -> Response:
        key = self.limiter.get_key_fn(request)
        if key is None:
            return await self._call_handler(request)

        try:
            await self.limiter.count(key)
        except LimitExceeded:
            logger.warning("Rate limit exceed error for %s", key)
            return Response(status=int(HTTPStatus.TOO_MANY_REQUESTS))
        except ClientError as err:
            logger.error("Client request failed, redis error: %s", err)
            return Response(status=int(HTTPStatus.INTERNAL_SERVER_ERROR))
        except LimitationError as err:
            logger.error("Count failed: %s", err)
            return Response(status=int(HTTPStatus.INTERNAL_SERVER_ERROR))

        return await self._call_handler(request)