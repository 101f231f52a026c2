"""Public domain model surface."""

from __future__ import annotations

from cacheplane.domain.model.enums import (
    AutomaticFailoverStatus,
    MemberRole,
    MemberStatus,
    Phase,
    TopologyStatus,
)
from cacheplane.domain.model.errors import (
    NoEligiblePrimaryError,
    NonRetryableError,
    NotFoundError,
    PartialProvisioningError,
    PrimaryConflictError,
    TerminalStateError,
    TopologyError,
    TransientConflictError,
    WaitTimeoutError,
)
from cacheplane.domain.model.requests import (
    NodeGroupConfiguration,
    NodeGroupPlacement,
    TopologyRequest,
    normalize_topology_id,
)
from cacheplane.domain.model.topology import Member, Topology, TopologyAttributes, TopologyChanges

__all__ = [  # noqa: RUF022
    # enums
    "AutomaticFailoverStatus",
    "MemberRole",
    "MemberStatus",
    "Phase",
    "TopologyStatus",
    # values
    "Member",
    "Topology",
    "TopologyAttributes",
    "TopologyChanges",
    # requests
    "NodeGroupConfiguration",
    "NodeGroupPlacement",
    "TopologyRequest",
    "normalize_topology_id",
    # errors
    "TopologyError",
    "NotFoundError",
    "TerminalStateError",
    "WaitTimeoutError",
    "TransientConflictError",
    "PrimaryConflictError",
    "PartialProvisioningError",
    "NoEligiblePrimaryError",
    "NonRetryableError",
]
