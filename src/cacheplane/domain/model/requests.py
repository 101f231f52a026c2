"""Creation requests and identifier rules for replication groups."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from cacheplane.config.errors import ConfigurationError

from .topology import TopologyAttributes

SUPPORTED_ENGINE = "redis"
MAX_TOPOLOGY_ID_LENGTH = 40

_ID_CHARACTERS = re.compile(r"^[0-9a-zA-Z-]+$")


def normalize_topology_id(value: str) -> str:
    """Validate a replication group id and return its canonical lower-case form."""

    if not 1 <= len(value) <= MAX_TOPOLOGY_ID_LENGTH:
        raise ValueError(
            f"Replication group id must be 1-{MAX_TOPOLOGY_ID_LENGTH} characters: {value!r}"
        )
    if not _ID_CHARACTERS.match(value):
        raise ValueError(f"Replication group id must contain only alphanumerics and hyphens: {value!r}")
    if not value[0].isalpha():
        raise ValueError(f"Replication group id must begin with a letter: {value!r}")
    if "--" in value:
        raise ValueError(f"Replication group id cannot contain two consecutive hyphens: {value!r}")
    if value.endswith("-"):
        raise ValueError(f"Replication group id cannot end with a hyphen: {value!r}")
    return value.lower()


@dataclass(frozen=True, slots=True)
class NodeGroupConfiguration:
    """Slot layout used when seeding shards from snapshots."""

    slots: tuple[str, ...]
    primary_availability_zone: str | None = None
    replica_availability_zones: tuple[str, ...] = ()
    replica_count: int | None = None


@dataclass(frozen=True, slots=True)
class NodeGroupPlacement:
    """One node group of a create request, as sent to the control plane."""

    slots: str
    primary_availability_zone: str | None
    replica_availability_zones: tuple[str, ...]
    replica_count: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TopologyRequest:
    topology_id: str
    description: str
    node_type: str
    engine: str = SUPPORTED_ENGINE
    member_count: int | None = None
    shard_count: int | None = None
    replicas_per_shard: int | None = None
    automatic_failover_enabled: bool = False
    availability_zones: tuple[str, ...] = ()
    port: int | None = None
    subnet_group_name: str | None = None
    kms_key_id: str | None = None
    at_rest_encryption_enabled: bool = False
    transit_encryption_enabled: bool = False
    auth_token: str | None = None
    snapshot_arns: tuple[str, ...] = ()
    snapshot_name: str | None = None
    node_group_configuration: NodeGroupConfiguration | None = None
    attributes: TopologyAttributes = field(default_factory=TopologyAttributes)

    def __post_init__(self) -> None:
        object.__setattr__(self, "topology_id", normalize_topology_id(self.topology_id))
        if self.engine.lower() != SUPPORTED_ENGINE:
            raise ConfigurationError(
                f"The only acceptable engine for replication groups is {SUPPORTED_ENGINE}"
            )
        if (self.member_count is None) == (self.shard_count is None):
            raise ConfigurationError("Exactly one of member_count or shard_count must be set")
        for arn in self.snapshot_arns:
            if "," in arn:
                raise ConfigurationError(f"Snapshot ARN cannot contain commas: {arn!r}")

    @property
    def restores_from_snapshot(self) -> bool:
        return bool(self.snapshot_arns)

    def node_group_placements(self) -> tuple[NodeGroupPlacement, ...]:
        """Expand the node group configuration into one placement per slot range."""

        config = self.node_group_configuration
        if config is None:
            return ()
        return tuple(
            NodeGroupPlacement(
                slots=slots,
                primary_availability_zone=config.primary_availability_zone,
                replica_availability_zones=config.replica_availability_zones,
                replica_count=config.replica_count,
            )
            for slots in config.slots
        )
