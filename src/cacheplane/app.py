"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from cacheplane.adapters.control_plane import HttpControlPlane
from cacheplane.config import get_control_plane_config, get_timeout_config
from cacheplane.domain.model import NotFoundError
from cacheplane.domain.reconciliation import ReconcileResult, TopologyReconciler

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from cacheplane.config.timeouts import TimeoutConfig
    from cacheplane.domain.model import Topology
    from cacheplane.domain.ports import Clock, ControlPlane


log = getLogger(__name__)


def describe_topology(
    topology_id: str,
    *,
    control_plane: ControlPlane | None = None,
) -> Topology | None:
    """Return the replication group as currently observed, or ``None`` if absent."""

    async def work(plane: ControlPlane) -> Topology | None:
        return await TopologyReconciler(control_plane=plane).observe(topology_id)

    return asyncio.run(_with_control_plane(work, control_plane))


def reconcile_topology(
    topology_id: str,
    *,
    member_count: int | None = None,
    shard_count: int | None = None,
    automatic_failover_enabled: bool | None = None,
    final_snapshot_id: str | None = None,
    apply_immediately: bool = True,
    timeout_seconds: float | None = None,
    control_plane: ControlPlane | None = None,
    clock: Clock | None = None,
    timeouts: TimeoutConfig | None = None,
) -> ReconcileResult:
    """Re-observe ``topology_id`` and converge it to the requested shape.

    Unspecified dimensions keep their observed values, so the diff is always
    taken against the live group rather than a remembered one.
    """

    effective_timeouts = timeouts or get_timeout_config()

    async def work(plane: ControlPlane) -> ReconcileResult:
        reconciler = _reconciler(plane, clock=clock, timeouts=effective_timeouts)
        observed = await reconciler.observe(topology_id)
        if observed is None:
            raise NotFoundError("replication group not found", resource_id=topology_id)

        desired = replace(
            observed,
            member_count=member_count if member_count is not None else observed.member_count,
            shard_count=shard_count if shard_count is not None else observed.shard_count,
            automatic_failover_enabled=(
                automatic_failover_enabled
                if automatic_failover_enabled is not None
                else observed.automatic_failover_enabled
            ),
        )
        log.info(
            "Starting reconciliation of %s: members %s -> %s, shards %s -> %s, failover %s -> %s",
            topology_id,
            observed.member_count,
            desired.member_count,
            observed.shard_count,
            desired.shard_count,
            observed.automatic_failover_enabled,
            desired.automatic_failover_enabled,
        )
        return await reconciler.reconcile(
            observed,
            desired,
            final_snapshot_id,
            apply_immediately=apply_immediately,
            timeout=timeout_seconds,
        )

    result = asyncio.run(_with_control_plane(work, control_plane))
    log.info("Finished reconciliation of %s: changed=%s", topology_id, result.changed)
    return result


def delete_replication_group(
    topology_id: str,
    *,
    final_snapshot_id: str | None = None,
    timeout_seconds: float | None = None,
    control_plane: ControlPlane | None = None,
    clock: Clock | None = None,
    timeouts: TimeoutConfig | None = None,
) -> None:
    effective_timeouts = timeouts or get_timeout_config()

    async def work(plane: ControlPlane) -> None:
        reconciler = _reconciler(plane, clock=clock, timeouts=effective_timeouts)
        await reconciler.delete(topology_id, final_snapshot_id, timeout=timeout_seconds)

    asyncio.run(_with_control_plane(work, control_plane))


def _reconciler(
    plane: ControlPlane,
    *,
    clock: Clock | None,
    timeouts: TimeoutConfig,
) -> TopologyReconciler:
    if clock is None:
        return TopologyReconciler(control_plane=plane, timeouts=timeouts)
    return TopologyReconciler(control_plane=plane, clock=clock, timeouts=timeouts)


async def _with_control_plane[T](
    work: Callable[[ControlPlane], Awaitable[T]],
    control_plane: ControlPlane | None,
) -> T:
    if control_plane is not None:
        return await work(control_plane)
    async with HttpControlPlane(config=get_control_plane_config()) as http_control_plane:
        return await work(http_control_plane)
