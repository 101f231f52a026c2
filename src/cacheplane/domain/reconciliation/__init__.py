"""Reconciliation engine for replicated, shardable cache topologies.

Layered flow for one ``reconcile`` call:
1) resize shards when the node group count changed
2) plan member creates/deletes from the member counts
3) create members, then wait for each to become available
4) delete members, reassigning the primary if it is among them
5) apply remaining attribute changes as one change-set
"""

from __future__ import annotations

from .decommission import DecommissionReport, Decommissioner, RemovalState
from .engine import ReconcileResult, TopologyReconciler
from .modify import apply_changes, diff_attributes
from .plan import ReconciliationPlan, diff_members, member_id, shard_id, shard_removals
from .polling import StatusWatch, await_status, member_watch, topology_watch
from .provision import Provisioner
from .retry import RetryBudget, retry_mutation
from .session import ReconcileSession
from .shards import ShardResizer
from .teardown import delete_topology

__all__ = [
    "DecommissionReport",
    "Decommissioner",
    "Provisioner",
    "ReconcileResult",
    "ReconcileSession",
    "ReconciliationPlan",
    "RemovalState",
    "RetryBudget",
    "ShardResizer",
    "StatusWatch",
    "TopologyReconciler",
    "apply_changes",
    "await_status",
    "delete_topology",
    "diff_attributes",
    "diff_members",
    "member_id",
    "member_watch",
    "retry_mutation",
    "shard_id",
    "shard_removals",
    "topology_watch",
]
