"""Per-batch execution deadline derived from the remaining invocation budget."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable

DEFAULT_SAFETY_MARGIN_SECONDS = 5.0
DEFAULT_MINIMUM_FLOOR_SECONDS = 10.0


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


@dataclass(frozen=True)
class Deadline:
    """A fixed point on a monotonic clock, shared read-only by one batch.

    ``deadline = now + max(remaining - safety_margin, minimum_floor)``
    leaves headroom for the invoking runtime to finish cleanly.
    """

    at: float
    clock: Callable[[], float] = field(default=time.monotonic, repr=False, compare=False)

    @classmethod
    def from_budget(
        cls,
        remaining: float | timedelta,
        *,
        safety_margin: float | timedelta = DEFAULT_SAFETY_MARGIN_SECONDS,
        minimum_floor: float | timedelta = DEFAULT_MINIMUM_FLOOR_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> Deadline:
        window = max(_seconds(remaining) - _seconds(safety_margin), _seconds(minimum_floor))
        return cls(at=clock() + window, clock=clock)

    def remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(self.at - self.clock(), 0.0)

    @property
    def expired(self) -> bool:
        return self.clock() >= self.at
