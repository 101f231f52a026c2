"""Per-invocation context shared by the reconciliation steps."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from cacheplane.domain.model import MemberStatus, Phase, TopologyError, TopologyStatus

from .polling import await_status, member_watch, topology_watch
from .retry import RetryBudget, retry_mutation

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from cacheplane.config.timeouts import TimeoutConfig
    from cacheplane.domain.model import Member, Topology
    from cacheplane.domain.ports import Clock, ControlPlane, Deadline

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconcileSession:
    """Everything one reconciliation needs to call and wait on the control plane.

    ``wait_timeout`` bounds each individual wait; ``deadline`` bounds the whole
    invocation and caps every wait and retry budget beneath it.
    """

    control_plane: ControlPlane
    clock: Clock
    timeouts: TimeoutConfig
    deadline: Deadline
    wait_timeout: float

    async def mutate[T](
        self,
        call: Callable[[], Awaitable[T]],
        *,
        resource_id: str,
        phase: Phase,
        description: str,
        budget_seconds: float | None = None,
    ) -> T:
        budget = RetryBudget(
            total_duration=(
                budget_seconds if budget_seconds is not None else self.timeouts.mutation_retry_seconds
            ),
            poll_interval=self.timeouts.retry_interval_seconds,
        )
        try:
            self.deadline.check(description)
            return await retry_mutation(
                call,
                budget,
                clock=self.clock,
                deadline=self.deadline,
                description=description,
            )
        except TopologyError as exc:
            exc.attach(resource_id=resource_id, phase=phase)
            raise

    async def wait_for_topology(
        self,
        topology_id: str,
        target: TopologyStatus = TopologyStatus.AVAILABLE,
        *,
        phase: Phase = Phase.POLL,
        timeout: float | None = None,
    ) -> Topology | None:
        return await await_status(
            topology_watch(self.control_plane),
            topology_id,
            target,
            timeout=timeout if timeout is not None else self.wait_timeout,
            interval=self.timeouts.poll_interval_seconds,
            clock=self.clock,
            deadline=self.deadline,
            phase=phase,
        )

    async def wait_for_member(
        self,
        member_id: str,
        target: MemberStatus,
        *,
        phase: Phase = Phase.POLL,
    ) -> Member | None:
        return await await_status(
            member_watch(self.control_plane),
            member_id,
            target,
            timeout=self.wait_timeout,
            interval=self.timeouts.poll_interval_seconds,
            clock=self.clock,
            deadline=self.deadline,
            phase=phase,
        )
