"""Member and shard identifier planning.

Identifiers are derived from sequence numbers, never discovered, so the same
counts always yield the same plan. Members of a flat topology are named
``{topology_id}-{NNN}``; shards (node groups) are named ``{NNNN}``. Both are
one-indexed.
"""

from __future__ import annotations

from dataclasses import dataclass

MEMBER_SEQUENCE_WIDTH = 3
SHARD_SEQUENCE_WIDTH = 4


def member_id(topology_id: str, sequence: int) -> str:
    return f"{topology_id}-{sequence:0{MEMBER_SEQUENCE_WIDTH}d}"


def shard_id(sequence: int) -> str:
    return f"{sequence:0{SHARD_SEQUENCE_WIDTH}d}"


@dataclass(frozen=True, slots=True)
class ReconciliationPlan:
    """Ordered member identifiers to create and to delete.

    ``to_remove`` is always highest sequence first so that removals never open
    a gap in the middle of the live range.
    """

    to_add: tuple[str, ...] = ()
    to_remove: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        overlap = set(self.to_add) & set(self.to_remove)
        if overlap:
            raise ValueError(f"Plan adds and removes the same members: {sorted(overlap)}")

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def diff_members(old_count: int, new_count: int, topology_id: str) -> ReconciliationPlan:
    """Plan the member creates/deletes that move ``old_count`` to ``new_count``."""

    if old_count < 0 or new_count < 0:
        raise ValueError(f"Member counts must be non-negative: {old_count} -> {new_count}")
    to_add = tuple(member_id(topology_id, seq) for seq in range(old_count + 1, new_count + 1))
    to_remove = tuple(member_id(topology_id, seq) for seq in range(old_count, new_count, -1))
    return ReconciliationPlan(to_add=to_add, to_remove=to_remove)


def shard_removals(old_count: int, new_count: int) -> tuple[str, ...]:
    """Shard ids dropped when shrinking, highest first; empty when growing."""

    return tuple(shard_id(seq) for seq in range(old_count, new_count, -1))
