"""Shard (node group) count changes."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from cacheplane.domain.model import Phase

from .plan import shard_removals

if TYPE_CHECKING:
    from .session import ReconcileSession

log = getLogger(__name__)


@dataclass(slots=True)
class ShardResizer:
    session: ReconcileSession

    async def resize_shards(self, topology_id: str, old_count: int, new_count: int) -> tuple[str, ...]:
        """Move a sharded topology to ``new_count`` node groups.

        Shrinking names the groups to drop, highest first; growing sends only
        the target count and lets the control plane lay out the new groups.
        Returns the removed group ids.
        """

        if new_count < 1:
            raise ValueError(f"Shard count must be at least 1, got {new_count}")
        if old_count == new_count:
            return ()

        removals = shard_removals(old_count, new_count)
        log.debug(
            "Modifying replication group %s shard configuration: count=%s remove=%s",
            topology_id,
            new_count,
            list(removals),
        )
        await self.session.mutate(
            partial(
                self.session.control_plane.modify_shard_configuration,
                topology_id,
                new_count,
                removals,
            ),
            resource_id=topology_id,
            phase=Phase.RESIZE,
            description=f"shard reconfiguration of {topology_id}",
        )
        await self.session.wait_for_topology(topology_id, phase=Phase.RESIZE)
        log.info("Replication group %s now has %s shards", topology_id, new_count)
        return removals
