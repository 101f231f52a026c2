"""Time source port so waits can run against virtual time in tests."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from cacheplane.domain.model import WaitTimeoutError


@runtime_checkable
class Clock(Protocol):
    def monotonic(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class SystemClock:
    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


@dataclass(frozen=True, slots=True)
class Deadline:
    """Absolute point on a clock's timeline that bounds a whole reconciliation."""

    clock: Clock
    expires_at: float

    @classmethod
    def after(cls, clock: Clock, seconds: float) -> Deadline:
        return cls(clock=clock, expires_at=clock.monotonic() + seconds)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - self.clock.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def cap(self, seconds: float) -> float:
        """Clamp a step's own timeout to what is left of the deadline."""

        return min(seconds, self.remaining())

    def check(self, what: str) -> None:
        if self.expired:
            raise WaitTimeoutError(f"Reconciliation deadline elapsed before {what}")


__all__ = ["Clock", "Deadline", "SystemClock"]
