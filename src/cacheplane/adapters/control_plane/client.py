"""HTTP client for the cache control-plane API."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx

from cacheplane.adapters.http_resilience import ResilientClient
from cacheplane.domain.model import NonRetryableError, NotFoundError, TransientConflictError

from .errors import error_from_response
from .schema import (
    CacheClusterPayload,
    CreateCacheClusterRequest,
    ModifyShardConfigurationRequest,
    ReplicationGroupPayload,
)
from .translator import (
    build_create_request,
    build_modify_request,
    member_role,
    parse_member,
    parse_topology,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from cacheplane.config.control_plane import ControlPlaneConfig
    from cacheplane.config.http_resilience import ResilienceConfig
    from cacheplane.domain.model import Member, Topology, TopologyChanges, TopologyRequest

log = getLogger(__name__)


class HttpControlPlane:
    """``ControlPlane`` port over the JSON API.

    One ``ResilientClient`` is shared by every call made through an instance;
    use it as an async context manager so the connection pool is closed.
    """

    def __init__(
        self,
        *,
        config: ControlPlaneConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client = (client_factory or ResilientClient)(config.resilience)

    async def __aenter__(self) -> HttpControlPlane:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def describe_topology(self, topology_id: str) -> Topology:
        payload = await self._read_replication_group(topology_id)

        first_member: CacheClusterPayload | None = None
        if payload.node_groups and payload.node_groups[0].node_group_members:
            member_id = payload.node_groups[0].node_group_members[0].cache_cluster_id
            try:
                first_member = await self._read_cache_cluster(member_id)
            except (NotFoundError, TransientConflictError) as exc:
                # Members go away before their group does; the group read stands on its own.
                log.debug("Skipping member attributes of %s: %s", topology_id, exc)

        return parse_topology(payload, first_member=first_member)

    async def describe_member(self, member_id: str) -> Member:
        member = parse_member(await self._read_cache_cluster(member_id))
        if member.topology_id is None:
            return member
        try:
            group = await self._read_replication_group(member.topology_id)
        except (NotFoundError, TransientConflictError) as exc:
            log.debug("Role of %s unavailable: %s", member_id, exc)
            return member
        return replace(member, role=member_role(group, member_id))

    async def create_member(self, member_id: str, topology_id: str) -> None:
        body = CreateCacheClusterRequest(cache_cluster_id=member_id, replication_group_id=topology_id)
        await self._call("POST", "cache-clusters", resource_id=member_id, json=body.to_wire())

    async def delete_member(self, member_id: str, final_snapshot_id: str | None = None) -> None:
        params = {"FinalSnapshotIdentifier": final_snapshot_id} if final_snapshot_id else None
        await self._call(
            "DELETE",
            f"cache-clusters/{_segment(member_id)}",
            resource_id=member_id,
            params=params,
        )

    async def modify_topology(
        self,
        topology_id: str,
        changes: TopologyChanges,
        *,
        apply_immediately: bool = True,
    ) -> None:
        body = build_modify_request(changes, apply_immediately=apply_immediately)
        await self._call(
            "PATCH",
            f"replication-groups/{_segment(topology_id)}",
            resource_id=topology_id,
            json=body.to_wire(),
        )

    async def modify_shard_configuration(
        self,
        topology_id: str,
        target_count: int,
        removals: tuple[str, ...] = (),
    ) -> None:
        body = ModifyShardConfigurationRequest(
            node_group_count=target_count,
            node_groups_to_remove=list(removals) or None,
        )
        await self._call(
            "POST",
            f"replication-groups/{_segment(topology_id)}/shard-configuration",
            resource_id=topology_id,
            json=body.to_wire(),
        )

    async def create_topology(self, request: TopologyRequest) -> Topology:
        body = build_create_request(request)
        response = await self._call(
            "POST",
            "replication-groups",
            resource_id=request.topology_id,
            json=body.to_wire(),
        )
        return parse_topology(self._validate(ReplicationGroupPayload, response, request.topology_id))

    async def delete_topology(self, topology_id: str, final_snapshot_id: str | None = None) -> None:
        params = {"FinalSnapshotIdentifier": final_snapshot_id} if final_snapshot_id else None
        await self._call(
            "DELETE",
            f"replication-groups/{_segment(topology_id)}",
            resource_id=topology_id,
            params=params,
        )

    async def _read_replication_group(self, topology_id: str) -> ReplicationGroupPayload:
        response = await self._call(
            "GET",
            f"replication-groups/{_segment(topology_id)}",
            resource_id=topology_id,
        )
        return self._validate(ReplicationGroupPayload, response, topology_id)

    async def _read_cache_cluster(self, member_id: str) -> CacheClusterPayload:
        response = await self._call(
            "GET",
            f"cache-clusters/{_segment(member_id)}",
            resource_id=member_id,
        )
        return self._validate(CacheClusterPayload, response, member_id)

    async def _call(
        self,
        method: str,
        path: str,
        *,
        resource_id: str,
        json: dict[str, object] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        log.debug("%s %s %s", method, path, json or params or "")
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            raise NonRetryableError(
                f"{method} {path} failed: {exc}",
                resource_id=resource_id,
            ) from exc
        if response.is_error:
            error = error_from_response(response)
            log.debug("%s %s -> %s %s", method, path, response.status_code, error.code)
            raise error.attach(resource_id=resource_id)
        return response

    @staticmethod
    def _validate[M: (ReplicationGroupPayload, CacheClusterPayload)](
        model: type[M],
        response: httpx.Response,
        resource_id: str,
    ) -> M:
        try:
            return model.model_validate(response.json())
        except ValueError as exc:
            raise NonRetryableError(
                f"unexpected control-plane response payload: {exc}",
                resource_id=resource_id,
            ) from exc


def _segment(value: str) -> str:
    return quote(value, safe="")
