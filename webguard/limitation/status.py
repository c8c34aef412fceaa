"""Rate limit status reports."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Union

from webguard.limitation.errors import OtherError

_OUT_OF_RANGE = "Source duration value is out of range for the target type"

Seconds = Union[int, float, timedelta]


@dataclass(frozen=True)
class Status:
    """A report for a given key containing the limit status."""

    limit: int
    """The maximum number of requests allowed in the current period."""
    remaining: int
    """How many requests are left in the current period."""
    reset_epoch_utc: int
    """UNIX timestamp (UTC) of approximately when the next period begins."""

    @classmethod
    def from_count(cls, count: int, limit: int, reset_epoch_utc: int) -> Status:
        """Build a status from the number of requests counted so far."""
        remaining = 0 if count >= limit else limit - count
        return cls(limit=limit, remaining=remaining, reset_epoch_utc=reset_epoch_utc)


def epoch_utc_plus(seconds: Seconds) -> int:
    """Return the current UNIX time plus `seconds`, rounded to a whole second.

    Raises OtherError when the duration cannot be represented.
    """
    try:
        delta = seconds if isinstance(seconds, timedelta) else timedelta(seconds=seconds)
        moment = datetime.now(timezone.utc) + delta
    except OverflowError as err:
        raise OtherError(_OUT_OF_RANGE) from err
    return max(math.floor(moment.timestamp() + 0.5), 0)