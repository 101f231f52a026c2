"""Member removal, including removal of the current write-primary.

The control plane refuses to delete the member serving as primary. When that
happens the primary is handed to a member outside the removal set, which
requires automatic failover to be off, and the delete is resubmitted. The
failover flag is topology-wide, so it is switched off at most once per batch
and restored once after the whole batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, NoReturn

from cacheplane.domain.model import (
    MemberStatus,
    NoEligiblePrimaryError,
    NonRetryableError,
    Phase,
    PrimaryConflictError,
    TopologyChanges,
    TopologyError,
)

if TYPE_CHECKING:
    from .session import ReconcileSession

log = getLogger(__name__)


class RemovalState(StrEnum):
    REQUESTED = "requested"
    PRIMARY_CONFLICT = "primary_conflict"
    REASSIGNING = "reassigning"
    RETRIED = "retried"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class DecommissionReport:
    topology_id: str
    states: dict[str, RemovalState] = field(default_factory=dict[str, RemovalState])
    new_primaries: dict[str, str] = field(default_factory=dict[str, str])
    failover_disabled: bool = False
    failover_restored: bool = False

    def mark(self, member_id: str, state: RemovalState) -> None:
        log.debug("Cache cluster %s: %s -> %s", member_id, self.states.get(member_id), state)
        self.states[member_id] = state

    @property
    def removed(self) -> tuple[str, ...]:
        return tuple(mid for mid, state in self.states.items() if state is RemovalState.DONE)


@dataclass(slots=True)
class Decommissioner:
    session: ReconcileSession

    async def decommission(
        self,
        topology_id: str,
        to_remove: tuple[str, ...],
        final_snapshot_id: str | None = None,
    ) -> DecommissionReport:
        """Delete every member in ``to_remove`` and wait until all are gone.

        Any failure other than a primary conflict aborts the batch. Members
        already deleted stay deleted.
        """

        report = DecommissionReport(topology_id=topology_id)
        for member_id in to_remove:
            report.mark(member_id, RemovalState.REQUESTED)
        removal_set = frozenset(to_remove)

        try:
            for member_id in to_remove:
                await self._remove(topology_id, member_id, removal_set, final_snapshot_id, report)

            for member_id in to_remove:
                try:
                    await self.session.wait_for_member(member_id, MemberStatus.DELETED)
                except TopologyError:
                    report.mark(member_id, RemovalState.FAILED)
                    raise
                report.mark(member_id, RemovalState.DONE)
        except TopologyError as exc:
            if report.failover_disabled and not report.failover_restored:
                await self._restore_after_failure(topology_id, report, exc)
            raise

        if report.failover_disabled:
            await self._restore_failover(topology_id, report)
        log.info(
            "Removed %s cache clusters from %s: %s",
            len(report.removed),
            topology_id,
            {mid: str(state) for mid, state in report.states.items()},
        )
        return report

    async def _remove(
        self,
        topology_id: str,
        member_id: str,
        removal_set: frozenset[str],
        final_snapshot_id: str | None,
        report: DecommissionReport,
    ) -> None:
        try:
            await self._delete(member_id, final_snapshot_id)
        except PrimaryConflictError as exc:
            log.warning("Cache cluster %s is serving as primary: %s", member_id, exc.message)
            report.mark(member_id, RemovalState.PRIMARY_CONFLICT)
        except TopologyError as exc:
            report.mark(member_id, RemovalState.FAILED)
            _raise_fatal(
                exc,
                "error deleting cache cluster (removing replica)",
                member_id,
                Phase.SUBMIT,
            )
        else:
            return

        report.mark(member_id, RemovalState.REASSIGNING)
        try:
            new_primary = await self._reassign_primary(topology_id, removal_set, report)
        except TopologyError:
            report.mark(member_id, RemovalState.FAILED)
            raise
        report.new_primaries[member_id] = new_primary

        report.mark(member_id, RemovalState.RETRIED)
        try:
            await self._delete(member_id, final_snapshot_id)
        except TopologyError as exc:
            report.mark(member_id, RemovalState.FAILED)
            _raise_fatal(
                exc,
                "error deleting cache cluster (removing replica after setting new primary)",
                member_id,
                Phase.REASSIGN,
            )

    async def _delete(self, member_id: str, final_snapshot_id: str | None) -> None:
        log.debug("Deleting cache cluster %s (final snapshot: %s)", member_id, final_snapshot_id)
        await self.session.mutate(
            partial(self.session.control_plane.delete_member, member_id, final_snapshot_id),
            resource_id=member_id,
            phase=Phase.SUBMIT,
            description=f"delete cache cluster {member_id}",
        )

    async def _reassign_primary(
        self,
        topology_id: str,
        removal_set: frozenset[str],
        report: DecommissionReport,
    ) -> str:
        try:
            observed = await self.session.control_plane.describe_topology(topology_id)
        except TopologyError as exc:
            raise NonRetryableError(
                f"error reading replication group to determine new primary: {exc.message}",
                resource_id=topology_id,
                phase=Phase.REASSIGN,
                code=exc.code,
            ) from exc
        if not observed.member_ids:
            raise NonRetryableError(
                "error reading replication group to determine new primary: "
                "missing member information",
                resource_id=topology_id,
                phase=Phase.REASSIGN,
            )

        new_primary = next((mid for mid in observed.member_ids if mid not in removal_set), None)
        if new_primary is None:
            raise NoEligiblePrimaryError(
                "unable to assign new primary: every member is being removed",
                resource_id=topology_id,
                phase=Phase.REASSIGN,
            )

        # A new primary cannot be promoted manually while failover is on.
        if observed.automatic_failover_enabled:
            log.info("Disabling automatic failover on %s to reassign primary", topology_id)
            await self._modify(topology_id, TopologyChanges.failover(enabled=False))
            report.failover_disabled = True
            await self.session.wait_for_topology(topology_id, phase=Phase.REASSIGN)

        log.info("Promoting %s to primary of %s", new_primary, topology_id)
        await self._modify(topology_id, TopologyChanges.new_primary(new_primary))
        await self.session.wait_for_topology(topology_id, phase=Phase.REASSIGN)
        return new_primary

    async def _restore_failover(self, topology_id: str, report: DecommissionReport) -> None:
        log.info("Re-enabling automatic failover on %s", topology_id)
        await self._modify(topology_id, TopologyChanges.failover(enabled=True))
        report.failover_restored = True
        await self.session.wait_for_topology(topology_id, phase=Phase.REASSIGN)

    async def _restore_after_failure(
        self,
        topology_id: str,
        report: DecommissionReport,
        error: TopologyError,
    ) -> None:
        try:
            await self._restore_failover(topology_id, report)
        except TopologyError as restore_exc:
            log.exception("Could not re-enable automatic failover on %s", topology_id)
            error.add_note(
                f"automatic failover on {topology_id} was left disabled: {restore_exc}"
            )

    async def _modify(self, topology_id: str, changes: TopologyChanges) -> None:
        log.debug("Modifying replication group %s: %s", topology_id, changes.as_fields())
        await self.session.mutate(
            partial(self.session.control_plane.modify_topology, topology_id, changes),
            resource_id=topology_id,
            phase=Phase.REASSIGN,
            description=f"modify replication group {topology_id}",
        )


def _raise_fatal(exc: TopologyError, message: str, member_id: str, phase: Phase) -> NoReturn:
    if isinstance(exc, NonRetryableError):
        exc.attach(resource_id=member_id, phase=phase)
        raise exc
    raise NonRetryableError(
        f"{message}: {exc.message}",
        resource_id=member_id,
        phase=phase,
        code=exc.code,
    ) from exc
