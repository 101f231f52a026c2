"""Replication group deletion."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from cacheplane.domain.model import NotFoundError, Phase, TopologyStatus

if TYPE_CHECKING:
    from .session import ReconcileSession

log = getLogger(__name__)


async def delete_topology(
    session: ReconcileSession,
    topology_id: str,
    final_snapshot_id: str | None = None,
) -> None:
    """Delete a replication group and wait until it is gone.

    Member creates/deletes or snapshots in flight make the group refuse
    deletion for a while; those conflicts are retried within the group-delete
    budget. A group that is already gone counts as deleted.
    """

    control_plane = session.control_plane

    async def submit() -> None:
        try:
            await control_plane.delete_topology(topology_id, final_snapshot_id)
        except NotFoundError:
            log.info("Replication group %s already deleted", topology_id)

    log.debug("Deleting replication group %s (final snapshot: %s)", topology_id, final_snapshot_id)
    await session.mutate(
        submit,
        resource_id=topology_id,
        phase=Phase.DELETE,
        description=f"delete replication group {topology_id}",
        budget_seconds=session.timeouts.group_delete_retry_seconds,
    )
    await session.wait_for_topology(
        topology_id,
        TopologyStatus.DELETED,
        phase=Phase.DELETE,
        timeout=session.timeouts.delete_seconds,
    )
    log.info("Replication group %s deleted", topology_id)
