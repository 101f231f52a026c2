"""Pydantic models for the control-plane JSON API.

Field names are snake_case in Python and PascalCase on the wire.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", alias_generator=to_pascal, populate_by_name=True)

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class Endpoint(WireModel):
    address: str | None = None
    port: int | None = None


class NodeGroupMember(WireModel):
    cache_cluster_id: str
    current_role: str | None = None
    preferred_availability_zone: str | None = None


class NodeGroup(WireModel):
    node_group_id: str
    status: str | None = None
    slots: str | None = None
    primary_endpoint: Endpoint | None = None
    reader_endpoint: Endpoint | None = None
    node_group_members: list[NodeGroupMember] = Field(default_factory=list["NodeGroupMember"])


class ReplicationGroupPayload(WireModel):
    replication_group_id: str
    description: str | None = None
    status: str
    automatic_failover: str | None = None
    member_clusters: list[str] = Field(default_factory=list)
    node_groups: list[NodeGroup] = Field(default_factory=list["NodeGroup"])
    cluster_enabled: bool | None = None
    configuration_endpoint: Endpoint | None = None
    snapshot_retention_limit: int | None = None
    snapshot_window: str | None = None
    snapshotting_cluster_id: str | None = None
    cache_node_type: str | None = None
    kms_key_id: str | None = None
    arn: str | None = Field(default=None, alias="ARN")


class CacheParameterGroup(WireModel):
    cache_parameter_group_name: str | None = None


class SecurityGroupMembership(WireModel):
    security_group_id: str


class CacheSecurityGroupMembership(WireModel):
    cache_security_group_name: str


class NotificationConfiguration(WireModel):
    topic_arn: str | None = None


class CacheClusterPayload(WireModel):
    cache_cluster_id: str
    cache_cluster_status: str
    replication_group_id: str | None = None
    cache_node_type: str | None = None
    engine: str | None = None
    engine_version: str | None = None
    preferred_maintenance_window: str | None = None
    cache_parameter_group: CacheParameterGroup | None = None
    security_groups: list[SecurityGroupMembership] = Field(
        default_factory=list["SecurityGroupMembership"]
    )
    cache_security_groups: list[CacheSecurityGroupMembership] = Field(
        default_factory=list["CacheSecurityGroupMembership"]
    )
    notification_configuration: NotificationConfiguration | None = None
    auto_minor_version_upgrade: bool | None = None
    at_rest_encryption_enabled: bool | None = None
    transit_encryption_enabled: bool | None = None
    auth_token_enabled: bool | None = None


class ErrorDetail(WireModel):
    code: str = "Unknown"
    message: str = ""


class ErrorResponse(WireModel):
    error: ErrorDetail


class CreateCacheClusterRequest(WireModel):
    cache_cluster_id: str
    replication_group_id: str


class ModifyReplicationGroupRequest(WireModel):
    apply_immediately: bool
    replication_group_description: str | None = None
    automatic_failover_enabled: bool | None = None
    auto_minor_version_upgrade: bool | None = None
    security_group_ids: list[str] | None = None
    cache_security_group_names: list[str] | None = None
    preferred_maintenance_window: str | None = None
    notification_topic_arn: str | None = None
    cache_parameter_group_name: str | None = None
    engine_version: str | None = None
    snapshot_retention_limit: int | None = None
    snapshotting_cluster_id: str | None = None
    snapshot_window: str | None = None
    cache_node_type: str | None = None
    primary_cluster_id: str | None = None


class ModifyShardConfigurationRequest(WireModel):
    apply_immediately: bool = True
    node_group_count: int
    node_groups_to_remove: list[str] | None = None


class NodeGroupConfigurationPayload(WireModel):
    slots: str
    primary_availability_zone: str | None = None
    replica_availability_zones: list[str] | None = None
    replica_count: int | None = None


class CreateReplicationGroupRequest(WireModel):
    replication_group_id: str
    replication_group_description: str
    automatic_failover_enabled: bool
    auto_minor_version_upgrade: bool
    cache_node_type: str
    engine: str
    engine_version: str | None = None
    preferred_cache_cluster_a_zs: list[str] | None = Field(
        default=None, alias="PreferredCacheClusterAZs"
    )
    cache_parameter_group_name: str | None = None
    port: int | None = None
    cache_subnet_group_name: str | None = None
    cache_security_group_names: list[str] | None = None
    security_group_ids: list[str] | None = None
    snapshot_arns: list[str] | None = None
    node_group_configuration: list[NodeGroupConfigurationPayload] | None = None
    preferred_maintenance_window: str | None = None
    notification_topic_arn: str | None = None
    kms_key_id: str | None = None
    snapshot_retention_limit: int | None = None
    snapshot_window: str | None = None
    snapshot_name: str | None = None
    transit_encryption_enabled: bool | None = None
    at_rest_encryption_enabled: bool | None = None
    auth_token: str | None = None
    num_node_groups: int | None = None
    replicas_per_node_group: int | None = None
    num_cache_clusters: int | None = None
