"""Failure modes of the rate limiter."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from webguard.limitation.status import Status


class LimitationError(Exception):
    """Base class of rate limiter errors."""

    message = "Rate limiter error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(*(() if detail is None else (detail,)))
        self.detail = detail

    def __str__(self) -> str:
        return self.message if self.detail is None else f"{self.message}: {self.detail}"


class ClientError(LimitationError):
    """Redis client failed to connect or run a query."""

    message = "Redis client failed to connect or run a query"


class LimitExceeded(LimitationError):
    """Limit is exceeded for a key."""

    message = "Limit is exceeded for a key"

    def __init__(self, status: Status) -> None:
        super().__init__()
        self.status = status


class TimeConversionError(LimitationError):
    """Time conversion failed."""

    message = "Time conversion failed"


class OtherError(LimitationError):
    """Generic error."""

    message = "Generic error"