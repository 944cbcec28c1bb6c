"""
Absolute deadline shared by every step of one fetch.
"""

import time
from dataclasses import dataclass, field
from typing import Callable

from .errors import DeadlineExceededError


@dataclass(frozen=True)
class Deadline:
    """A fixed point on the monotonic clock.

    Built once per external fetch and passed down unchanged; each step asks
    for what is left instead of starting a fresh per-step timer.
    """

    expires_at: float
    clock: Callable[[], float] = field(default=time.monotonic, compare=False, repr=False)

    @classmethod
    def after(cls, seconds: float, clock: Callable[[], float] = time.monotonic) -> "Deadline":
        return cls(expires_at=clock() + seconds, clock=clock)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.expires_at - self.clock())

    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def require(self, step: str) -> float:
        """Return the remaining budget or raise if nothing is left for ``step``."""
        remaining = self.remaining()
        if remaining <= 0.0:
            raise DeadlineExceededError(step)
        return remaining
