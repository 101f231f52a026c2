"""Translate control-plane payloads to domain values and back."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from cacheplane.domain.model import (
    AutomaticFailoverStatus,
    Member,
    MemberRole,
    MemberStatus,
    NonRetryableError,
    Topology,
    TopologyAttributes,
    TopologyStatus,
)

from .schema import (
    CacheClusterPayload,
    CreateReplicationGroupRequest,
    ModifyReplicationGroupRequest,
    NodeGroupConfigurationPayload,
    ReplicationGroupPayload,
)

if TYPE_CHECKING:
    from cacheplane.domain.model import TopologyChanges, TopologyRequest

log = getLogger(__name__)


def parse_topology(
    payload: ReplicationGroupPayload,
    *,
    first_member: CacheClusterPayload | None = None,
) -> Topology:
    """Flatten a replication group (and optionally its first member) into a ``Topology``.

    Node type, engine version and the other per-node settings are only
    reported on members, so they come from ``first_member`` when given.
    """

    node_groups = payload.node_groups
    replicas_per_shard = (
        len(node_groups[0].node_group_members) - 1
        if node_groups and node_groups[0].node_group_members
        else None
    )
    primary_id = next(
        (
            member.cache_cluster_id
            for group in node_groups
            for member in group.node_group_members
            if member.current_role == MemberRole.PRIMARY
        ),
        None,
    )

    attributes = TopologyAttributes(
        description=payload.description,
        snapshot_retention_limit=payload.snapshot_retention_limit or 0,
        snapshot_window=payload.snapshot_window,
        node_type=payload.cache_node_type,
    )
    if first_member is not None:
        attributes = _with_member_attributes(attributes, first_member)

    return Topology(
        topology_id=payload.replication_group_id,
        member_count=len(payload.member_clusters),
        shard_count=len(node_groups) or 1,
        automatic_failover_enabled=_parse_failover(payload),
        status=_parse_enum(TopologyStatus, payload.status, payload.replication_group_id),
        member_ids=tuple(payload.member_clusters),
        primary_id=primary_id,
        replicas_per_shard=replicas_per_shard,
        cluster_enabled=bool(payload.cluster_enabled),
        attributes=attributes,
    )


def parse_member(payload: CacheClusterPayload) -> Member:
    return Member(
        member_id=payload.cache_cluster_id,
        status=_parse_enum(MemberStatus, payload.cache_cluster_status, payload.cache_cluster_id),
        topology_id=payload.replication_group_id,
    )


def member_role(payload: ReplicationGroupPayload, member_id: str) -> MemberRole:
    """Role the group reports for ``member_id``; ``UNKNOWN`` when it is not listed."""

    for group in payload.node_groups:
        for member in group.node_group_members:
            if member.cache_cluster_id != member_id or member.current_role is None:
                continue
            try:
                return MemberRole(member.current_role.lower())
            except ValueError:
                log.warning("Unknown role %s for %s", member.current_role, member_id)
    return MemberRole.UNKNOWN


def build_modify_request(
    changes: TopologyChanges,
    *,
    apply_immediately: bool,
) -> ModifyReplicationGroupRequest:
    return ModifyReplicationGroupRequest(
        apply_immediately=apply_immediately,
        replication_group_description=changes.description,
        automatic_failover_enabled=changes.automatic_failover_enabled,
        auto_minor_version_upgrade=changes.auto_minor_version_upgrade,
        security_group_ids=_sorted(changes.security_group_ids),
        cache_security_group_names=_sorted(changes.security_group_names),
        preferred_maintenance_window=changes.maintenance_window,
        notification_topic_arn=changes.notification_topic_arn,
        cache_parameter_group_name=changes.parameter_group_name,
        engine_version=changes.engine_version,
        snapshot_retention_limit=changes.snapshot_retention_limit,
        snapshotting_cluster_id=changes.snapshotting_member_id,
        snapshot_window=changes.snapshot_window,
        cache_node_type=changes.node_type,
        primary_cluster_id=changes.primary_member_id,
    )


def build_create_request(request: TopologyRequest) -> CreateReplicationGroupRequest:
    attributes = request.attributes
    placements = request.node_group_placements()
    restoring = request.restores_from_snapshot and bool(placements)
    return CreateReplicationGroupRequest(
        replication_group_id=request.topology_id,
        replication_group_description=request.description,
        automatic_failover_enabled=request.automatic_failover_enabled,
        auto_minor_version_upgrade=attributes.auto_minor_version_upgrade,
        cache_node_type=request.node_type,
        engine=request.engine,
        engine_version=attributes.engine_version,
        preferred_cache_cluster_a_zs=list(request.availability_zones) or None,
        cache_parameter_group_name=attributes.parameter_group_name,
        port=request.port,
        cache_subnet_group_name=request.subnet_group_name,
        cache_security_group_names=_sorted(attributes.security_group_names) or None,
        security_group_ids=_sorted(attributes.security_group_ids) or None,
        snapshot_arns=list(request.snapshot_arns) if restoring else None,
        node_group_configuration=[
            NodeGroupConfigurationPayload(
                slots=placement.slots,
                primary_availability_zone=placement.primary_availability_zone,
                replica_availability_zones=list(placement.replica_availability_zones) or None,
                replica_count=placement.replica_count,
            )
            for placement in placements
        ]
        if restoring
        else None,
        preferred_maintenance_window=(
            attributes.maintenance_window.lower() if attributes.maintenance_window else None
        ),
        notification_topic_arn=attributes.notification_topic_arn,
        kms_key_id=request.kms_key_id,
        snapshot_retention_limit=attributes.snapshot_retention_limit or None,
        snapshot_window=attributes.snapshot_window,
        snapshot_name=request.snapshot_name,
        transit_encryption_enabled=request.transit_encryption_enabled or None,
        at_rest_encryption_enabled=request.at_rest_encryption_enabled or None,
        auth_token=request.auth_token,
        num_node_groups=request.shard_count,
        replicas_per_node_group=request.replicas_per_shard,
        num_cache_clusters=request.member_count,
    )


def _with_member_attributes(
    attributes: TopologyAttributes,
    member: CacheClusterPayload,
) -> TopologyAttributes:
    parameter_group = member.cache_parameter_group
    notification = member.notification_configuration
    return TopologyAttributes(
        description=attributes.description,
        auto_minor_version_upgrade=(
            member.auto_minor_version_upgrade
            if member.auto_minor_version_upgrade is not None
            else attributes.auto_minor_version_upgrade
        ),
        security_group_ids=frozenset(group.security_group_id for group in member.security_groups),
        security_group_names=frozenset(
            group.cache_security_group_name for group in member.cache_security_groups
        ),
        maintenance_window=member.preferred_maintenance_window,
        notification_topic_arn=notification.topic_arn if notification else None,
        parameter_group_name=parameter_group.cache_parameter_group_name if parameter_group else None,
        engine_version=member.engine_version,
        snapshot_retention_limit=attributes.snapshot_retention_limit,
        snapshot_window=attributes.snapshot_window,
        node_type=member.cache_node_type or attributes.node_type,
    )


def _parse_failover(payload: ReplicationGroupPayload) -> bool:
    if payload.automatic_failover is None:
        return False
    try:
        return AutomaticFailoverStatus(payload.automatic_failover.lower()).is_enabled
    except ValueError:
        log.warning(
            "Unknown automatic failover state %s on %s",
            payload.automatic_failover,
            payload.replication_group_id,
        )
        return False


def _parse_enum[E: (TopologyStatus, MemberStatus)](
    enum_type: type[E], value: str, resource_id: str
) -> E:
    try:
        return enum_type(value.lower())
    except ValueError as exc:
        raise NonRetryableError(
            f"unrecognised status {value!r}",
            resource_id=resource_id,
        ) from exc


def _sorted(values: frozenset[str] | None) -> list[str] | None:
    return sorted(values) if values is not None else None
