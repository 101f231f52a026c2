"""Orchestrator for topology reconciliation.

One call moves a replication group from an observed topology to a desired one:
shard count first, then member count, then in-place attributes. Each step
waits for the control plane to report the group available before the next
one starts. Nothing is rolled back on failure; callers re-observe and
reconcile again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from cacheplane.config.timeouts import TimeoutConfig
from cacheplane.domain.model import NotFoundError, TopologyChanges, TopologyStatus
from cacheplane.domain.ports import Deadline, SystemClock

from .decommission import DecommissionReport, Decommissioner
from .modify import apply_changes, diff_attributes
from .plan import ReconciliationPlan, diff_members
from .provision import Provisioner
from .session import ReconcileSession
from .shards import ShardResizer
from .teardown import delete_topology

if TYPE_CHECKING:
    from cacheplane.domain.model import Member, Topology, TopologyRequest
    from cacheplane.domain.ports import Clock, ControlPlane

log = getLogger(__name__)


@dataclass(slots=True)
class ReconcileResult:
    topology_id: str
    plan: ReconciliationPlan = field(default_factory=ReconciliationPlan)
    shards_removed: tuple[str, ...] = ()
    added: tuple[Member, ...] = ()
    decommission: DecommissionReport | None = None
    changes: TopologyChanges = field(default_factory=TopologyChanges)

    @property
    def changed(self) -> bool:
        return (
            not self.plan.is_empty
            or bool(self.shards_removed)
            or not self.changes.is_empty
        )


@dataclass(slots=True)
class TopologyReconciler:
    """Entry point the declarative layer calls; the control plane is injected."""

    control_plane: ControlPlane
    clock: Clock = field(default_factory=SystemClock)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)

    async def reconcile(
        self,
        old: Topology,
        new: Topology,
        final_snapshot_id: str | None = None,
        *,
        apply_immediately: bool = True,
        timeout: float | None = None,
    ) -> ReconcileResult:
        """Converge the group from ``old`` to ``new``.

        ``old`` must be freshly observed: after a partial failure the caller
        re-reads the group (see :meth:`observe`) rather than reusing a stale
        snapshot.
        """

        _validate_transition(old, new)
        topology_id = new.topology_id
        session = self._session(timeout if timeout is not None else self.timeouts.update_seconds)
        result = ReconcileResult(topology_id=topology_id)
        log.info("Reconciling replication group %s", topology_id)

        if old.shard_count != new.shard_count:
            result.shards_removed = await ShardResizer(session).resize_shards(
                topology_id, old.shard_count, new.shard_count
            )

        if old.member_count != new.member_count:
            result.plan = diff_members(old.member_count, new.member_count, topology_id)
            log.info(
                "Member plan for %s: add=%s remove=%s",
                topology_id,
                list(result.plan.to_add),
                list(result.plan.to_remove),
            )
            if result.plan.to_add:
                result.added = await Provisioner(session).provision(topology_id, result.plan.to_add)
            if result.plan.to_remove:
                result.decommission = await Decommissioner(session).decommission(
                    topology_id, result.plan.to_remove, final_snapshot_id
                )

        result.changes = diff_attributes(old, new)
        await apply_changes(session, topology_id, result.changes, apply_immediately=apply_immediately)

        log.info("Replication group %s reconciled (changed=%s)", topology_id, result.changed)
        return result

    async def observe(self, topology_id: str) -> Topology | None:
        """Read the group as it is now; ``None`` when absent or being deleted."""

        try:
            topology = await self.control_plane.describe_topology(topology_id)
        except NotFoundError:
            log.warning("Replication group %s not found", topology_id)
            return None
        if topology.status == TopologyStatus.DELETING:
            log.warning("Replication group %s is currently in the deleting state", topology_id)
            return None
        return topology

    async def create(self, request: TopologyRequest, *, timeout: float | None = None) -> Topology | None:
        session = self._session(
            timeout if timeout is not None else self.timeouts.create_seconds,
            wait_timeout=self.timeouts.create_seconds,
        )
        return await Provisioner(session).create_topology(request)

    async def delete(
        self,
        topology_id: str,
        final_snapshot_id: str | None = None,
        *,
        timeout: float | None = None,
    ) -> None:
        session = self._session(
            timeout
            if timeout is not None
            else self.timeouts.group_delete_retry_seconds + self.timeouts.delete_seconds,
            wait_timeout=self.timeouts.delete_seconds,
        )
        await delete_topology(session, topology_id, final_snapshot_id)

    def _session(self, timeout: float, *, wait_timeout: float | None = None) -> ReconcileSession:
        return ReconcileSession(
            control_plane=self.control_plane,
            clock=self.clock,
            timeouts=self.timeouts,
            deadline=Deadline.after(self.clock, timeout),
            wait_timeout=wait_timeout if wait_timeout is not None else self.timeouts.update_seconds,
        )


def _validate_transition(old: Topology, new: Topology) -> None:
    if old.topology_id != new.topology_id:
        raise ValueError(
            f"Cannot reconcile {old.topology_id!r} into a different group {new.topology_id!r}"
        )
    if new.member_count < 1 or new.shard_count < 1:
        raise ValueError("Desired topology needs at least one member and one shard")
    if old.shard_count != new.shard_count and old.member_count != new.member_count:
        raise ValueError("Shard count and member count cannot change in the same reconciliation")
