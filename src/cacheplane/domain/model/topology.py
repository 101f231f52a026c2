"""Topology and member value objects.

Values here are immutable snapshots: an observed topology is what the control
plane reported at one instant, a desired topology is what the caller wants.
Neither is ever mutated in place; reconciliation derives new values instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields

from .enums import MemberRole, MemberStatus, TopologyStatus


@dataclass(frozen=True, slots=True)
class Member:
    member_id: str
    status: MemberStatus
    role: MemberRole = MemberRole.UNKNOWN
    topology_id: str | None = None


@dataclass(frozen=True, slots=True)
class TopologyAttributes:
    """Mutable-in-place settings of a replication group that do not change its shape."""

    description: str | None = None
    auto_minor_version_upgrade: bool = True
    security_group_ids: frozenset[str] = frozenset()
    security_group_names: frozenset[str] = frozenset()
    maintenance_window: str | None = None
    notification_topic_arn: str | None = None
    parameter_group_name: str | None = None
    engine_version: str | None = None
    snapshot_retention_limit: int = 0
    snapshot_window: str | None = None
    node_type: str | None = None


@dataclass(frozen=True, slots=True)
class Topology:
    topology_id: str
    member_count: int = 1
    shard_count: int = 1
    automatic_failover_enabled: bool = False
    status: TopologyStatus = TopologyStatus.AVAILABLE
    member_ids: tuple[str, ...] = ()
    primary_id: str | None = None
    replicas_per_shard: int | None = None
    cluster_enabled: bool = False
    attributes: TopologyAttributes = field(default_factory=TopologyAttributes)

    def __post_init__(self) -> None:
        if not self.topology_id:
            raise ValueError("Topology requires a replication group id")
        if self.member_count < 0:
            raise ValueError(f"member_count must be non-negative, got {self.member_count}")
        if self.shard_count < 0:
            raise ValueError(f"shard_count must be non-negative, got {self.shard_count}")


@dataclass(frozen=True, slots=True, kw_only=True)
class TopologyChanges:
    """Immutable change-set consumed by a single ``modify_topology`` call.

    ``None`` means "leave unchanged". Build these with
    :func:`cacheplane.domain.reconciliation.modify.diff_attributes` or the
    narrow constructors below rather than field-by-field mutation.
    """

    description: str | None = None
    automatic_failover_enabled: bool | None = None
    auto_minor_version_upgrade: bool | None = None
    security_group_ids: frozenset[str] | None = None
    security_group_names: frozenset[str] | None = None
    maintenance_window: str | None = None
    notification_topic_arn: str | None = None
    parameter_group_name: str | None = None
    engine_version: str | None = None
    snapshot_retention_limit: int | None = None
    snapshotting_member_id: str | None = None
    snapshot_window: str | None = None
    node_type: str | None = None
    primary_member_id: str | None = None

    @classmethod
    def failover(cls, *, enabled: bool) -> TopologyChanges:
        return cls(automatic_failover_enabled=enabled)

    @classmethod
    def new_primary(cls, member_id: str) -> TopologyChanges:
        return cls(primary_member_id=member_id)

    @property
    def is_empty(self) -> bool:
        return not self.as_fields()

    def as_fields(self) -> dict[str, object]:
        """Return only the fields that carry a change."""

        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) is not None
        }
