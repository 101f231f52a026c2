"""Error taxonomy for topology reconciliation.

Every error names the resource and the phase it surfaced in so a caller can
resume narrowly after partial convergence. The engine never rolls back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .enums import Phase


class TopologyError(RuntimeError):
    """Base class for every reconciliation failure."""

    def __init__(
        self,
        message: str,
        *,
        resource_id: str | None = None,
        phase: Phase | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.resource_id = resource_id
        self.phase = phase
        self.code = code

    def attach(self, *, resource_id: str | None = None, phase: Phase | None = None) -> Self:
        """Fill in context the raiser did not know, keeping anything already set."""

        if self.resource_id is None:
            self.resource_id = resource_id
        if self.phase is None:
            self.phase = phase
        return self

    def __str__(self) -> str:
        context = [
            f"{label}={value}"
            for label, value in (("resource", self.resource_id), ("phase", self.phase))
            if value is not None
        ]
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class NotFoundError(TopologyError):
    """The remote resource does not exist."""


class TerminalStateError(TopologyError):
    """The resource reached a failure status it will never leave on its own."""

    def __init__(
        self,
        message: str,
        *,
        status: str,
        resource_id: str | None = None,
        phase: Phase | None = None,
    ) -> None:
        super().__init__(message, resource_id=resource_id, phase=phase)
        self.status = status


class WaitTimeoutError(TopologyError):
    """A wait or the overall reconciliation deadline elapsed."""

    def __init__(
        self,
        message: str,
        *,
        last_status: str | None = None,
        resource_id: str | None = None,
        phase: Phase | None = None,
    ) -> None:
        super().__init__(message, resource_id=resource_id, phase=phase)
        self.last_status = last_status


class TransientConflictError(TopologyError):
    """The resource is mid-transition; the same call may succeed later."""


class PrimaryConflictError(TopologyError):
    """The call targeted the current write-primary."""


class PartialProvisioningError(TopologyError):
    """A member create was rejected after earlier creates were accepted."""

    def __init__(
        self,
        message: str,
        *,
        submitted: Sequence[str] = (),
        resource_id: str | None = None,
        phase: Phase | None = None,
    ) -> None:
        super().__init__(message, resource_id=resource_id, phase=phase)
        self.submitted = tuple(submitted)


class NoEligiblePrimaryError(TopologyError):
    """Every remaining member is scheduled for removal."""


class NonRetryableError(TopologyError):
    """Any other remote failure."""
