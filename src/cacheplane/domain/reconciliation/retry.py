"""Bounded retry of a single mutating control-plane call."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from cacheplane.domain.model import TransientConflictError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from cacheplane.domain.ports import Clock, Deadline

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RetryBudget:
    """Wall-clock ceiling for one mutation; created per call, never reused."""

    total_duration: float
    poll_interval: float

    def __post_init__(self) -> None:
        if self.total_duration < 0:
            raise ValueError("Retry budget cannot be negative")
        if self.poll_interval <= 0:
            raise ValueError("Retry interval must be positive")


async def retry_mutation[T](
    call: Callable[[], Awaitable[T]],
    budget: RetryBudget,
    *,
    clock: Clock,
    deadline: Deadline | None = None,
    description: str = "mutation",
) -> T:
    """Invoke ``call``, retrying only while it raises ``TransientConflictError``.

    The budget is measured in elapsed time, not attempts. Once it is spent the
    call is made exactly once more outside the retry loop and whatever that
    attempt returns or raises is passed through unchanged. This guarantees the
    operation is attempted even when the loop starved on sleeps. Every other
    error is raised immediately.
    """

    total = deadline.cap(budget.total_duration) if deadline is not None else budget.total_duration
    expires_at = clock.monotonic() + total
    attempts = 0

    while True:
        attempts += 1
        try:
            return await call()
        except TransientConflictError as exc:
            remaining = expires_at - clock.monotonic()
            if remaining <= 0:
                log.warning(
                    "%s still conflicting after %s attempts; retry budget spent: %s",
                    description,
                    attempts,
                    exc,
                )
                break
            log.warning("%s hit a transient conflict, retrying: %s", description, exc)
            await clock.sleep(min(budget.poll_interval, remaining))

    log.debug("Making final unguarded attempt of %s", description)
    return await call()
