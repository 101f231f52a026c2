"""Port for the remote, eventually-consistent cache control plane."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cacheplane.domain.model import Member, Topology, TopologyChanges, TopologyRequest


@runtime_checkable
class ControlPlane(Protocol):
    """Capability set the engine consumes.

    Every method is a single remote call. Mutating calls return once the
    control plane has accepted the request, not once it has completed.
    Failures are raised as :class:`cacheplane.domain.model.TopologyError`
    subclasses; ``describe_*`` raise ``NotFoundError`` for absent resources.
    """

    async def describe_topology(self, topology_id: str) -> Topology: ...

    async def describe_member(self, member_id: str) -> Member: ...

    async def create_member(self, member_id: str, topology_id: str) -> None: ...

    async def delete_member(self, member_id: str, final_snapshot_id: str | None = None) -> None: ...

    async def modify_topology(
        self,
        topology_id: str,
        changes: TopologyChanges,
        *,
        apply_immediately: bool = True,
    ) -> None: ...

    async def modify_shard_configuration(
        self,
        topology_id: str,
        target_count: int,
        removals: tuple[str, ...] = (),
    ) -> None: ...

    async def create_topology(self, request: TopologyRequest) -> Topology: ...

    async def delete_topology(self, topology_id: str, final_snapshot_id: str | None = None) -> None: ...


__all__ = ["ControlPlane"]
