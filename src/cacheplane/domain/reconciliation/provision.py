"""Member creation fan-out/fan-in and replication group creation."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from cacheplane.config.errors import ConfigurationError
from cacheplane.domain.model import (
    MemberStatus,
    PartialProvisioningError,
    Phase,
    TopologyError,
    TopologyStatus,
)

if TYPE_CHECKING:
    from cacheplane.domain.model import Member, Topology, TopologyRequest

    from .session import ReconcileSession

log = getLogger(__name__)


@dataclass(slots=True)
class Provisioner:
    session: ReconcileSession

    async def provision(self, topology_id: str, to_add: tuple[str, ...]) -> tuple[Member, ...]:
        """Create every member in ``to_add`` and wait until all are available.

        All creates are submitted before any wait begins. A rejected create
        aborts immediately; members accepted before it are left creating and
        are reported on the error rather than cleaned up.
        """

        control_plane = self.session.control_plane
        submitted: list[str] = []
        for member_id in to_add:
            log.debug("Creating cache cluster %s in replication group %s", member_id, topology_id)
            try:
                await self.session.mutate(
                    partial(control_plane.create_member, member_id, topology_id),
                    resource_id=member_id,
                    phase=Phase.SUBMIT,
                    description=f"create cache cluster {member_id}",
                )
            except TopologyError as exc:
                raise PartialProvisioningError(
                    f"error creating cache cluster (adding replica) after {len(submitted)} "
                    f"accepted creates: {exc.message}",
                    submitted=submitted,
                    resource_id=member_id,
                    phase=Phase.SUBMIT,
                ) from exc
            submitted.append(member_id)

        log.info("Submitted %s member creates for %s, waiting", len(submitted), topology_id)
        members: list[Member] = []
        for member_id in submitted:
            member = await self.session.wait_for_member(member_id, MemberStatus.AVAILABLE)
            if member is not None:
                members.append(member)
        return tuple(members)

    async def create_topology(self, request: TopologyRequest) -> Topology | None:
        """Create a replication group and wait for it to become available."""

        if request.restores_from_snapshot:
            return await self.restore_from_snapshot(request)
        return await self._create(request)

    async def restore_from_snapshot(self, request: TopologyRequest) -> Topology | None:
        """Seed a replication group from snapshots.

        Restoring needs an explicit slot layout, so a node group configuration
        with at least one slot range is required.
        """

        config = request.node_group_configuration
        if not request.snapshot_arns:
            raise ConfigurationError("Restoring from snapshot requires at least one snapshot ARN")
        if config is None or not config.slots:
            raise ConfigurationError("`snapshot_arns` needs a node group configuration with `slots`")
        return await self._create(request)

    async def _create(self, request: TopologyRequest) -> Topology | None:
        control_plane = self.session.control_plane
        topology_id = request.topology_id
        log.debug("Creating replication group %s", topology_id)
        await self.session.mutate(
            partial(control_plane.create_topology, request),
            resource_id=topology_id,
            phase=Phase.SUBMIT,
            description=f"create replication group {topology_id}",
        )
        return await self.session.wait_for_topology(topology_id, TopologyStatus.AVAILABLE)
