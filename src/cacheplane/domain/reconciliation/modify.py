"""General attribute modification as an immutable change-set."""

from __future__ import annotations

from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from cacheplane.domain.model import Phase, TopologyChanges

from .plan import member_id

if TYPE_CHECKING:
    from cacheplane.domain.model import Topology

    from .session import ReconcileSession

log = getLogger(__name__)


def diff_attributes(old: Topology, new: Topology) -> TopologyChanges:
    """Collect every in-place setting that differs between ``old`` and ``new``."""

    before, after = old.attributes, new.attributes
    changes: dict[str, object] = {}

    if before.description != after.description:
        changes["description"] = after.description
    if old.automatic_failover_enabled != new.automatic_failover_enabled:
        changes["automatic_failover_enabled"] = new.automatic_failover_enabled
    if before.auto_minor_version_upgrade != after.auto_minor_version_upgrade:
        changes["auto_minor_version_upgrade"] = after.auto_minor_version_upgrade
    # An empty set means "not managed", not "detach everything".
    if before.security_group_ids != after.security_group_ids and after.security_group_ids:
        changes["security_group_ids"] = after.security_group_ids
    if before.security_group_names != after.security_group_names and after.security_group_names:
        changes["security_group_names"] = after.security_group_names
    if _lower(before.maintenance_window) != _lower(after.maintenance_window):
        changes["maintenance_window"] = _lower(after.maintenance_window)
    if before.notification_topic_arn != after.notification_topic_arn:
        changes["notification_topic_arn"] = after.notification_topic_arn
    if before.parameter_group_name != after.parameter_group_name:
        changes["parameter_group_name"] = after.parameter_group_name
    if before.engine_version != after.engine_version:
        changes["engine_version"] = after.engine_version
    if before.snapshot_retention_limit != after.snapshot_retention_limit:
        # Turning snapshots on needs a member to take them; use the first.
        if before.snapshot_retention_limit == 0:
            changes["snapshotting_member_id"] = member_id(new.topology_id, 1)
        changes["snapshot_retention_limit"] = after.snapshot_retention_limit
    if before.snapshot_window != after.snapshot_window:
        changes["snapshot_window"] = after.snapshot_window
    if before.node_type != after.node_type:
        changes["node_type"] = after.node_type

    return TopologyChanges(**changes)  # type: ignore[arg-type]


async def apply_changes(
    session: ReconcileSession,
    topology_id: str,
    changes: TopologyChanges,
    *,
    apply_immediately: bool = True,
) -> bool:
    """Submit ``changes`` in one call and wait for the group to settle.

    Returns ``False`` without calling the control plane when there is nothing
    to change.
    """

    if changes.is_empty:
        return False
    log.debug("Updating replication group %s: %s", topology_id, changes.as_fields())
    await session.mutate(
        partial(
            session.control_plane.modify_topology,
            topology_id,
            changes,
            apply_immediately=apply_immediately,
        ),
        resource_id=topology_id,
        phase=Phase.MODIFY,
        description=f"update replication group {topology_id}",
    )
    await session.wait_for_topology(topology_id, phase=Phase.MODIFY)
    return True


def _lower(value: str | None) -> str | None:
    return value.lower() if value is not None else None
