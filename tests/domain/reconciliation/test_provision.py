from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from cacheplane.config import ConfigurationError
from cacheplane.domain.model import (
    MemberStatus,
    NodeGroupConfiguration,
    NonRetryableError,
    PartialProvisioningError,
    Phase,
    TopologyRequest,
    TopologyStatus,
)
from cacheplane.domain.reconciliation import Provisioner
from tests.support.control_plane import FakeControlPlane

if TYPE_CHECKING:
    from collections.abc import Callable

    from cacheplane.domain.ports import ControlPlane
    from cacheplane.domain.reconciliation import ReconcileSession

    SessionFactory = Callable[[ControlPlane], ReconcileSession]


def test_provision_submits_every_create_before_polling(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("cache", member_count=2)
    provisioner = Provisioner(make_session(control_plane))

    members = asyncio.run(
        provisioner.provision("cache", ("cache-003", "cache-004", "cache-005"))
    )

    methods = [call[0] for call in control_plane.calls]
    assert methods[:3] == ["create_member"] * 3
    assert [call[1] for call in control_plane.calls[:3]] == ["cache-003", "cache-004", "cache-005"]
    assert "create_member" not in methods[3:]
    assert [member.member_id for member in members] == ["cache-003", "cache-004", "cache-005"]
    assert all(member.status is MemberStatus.AVAILABLE for member in members)


def test_provision_reports_accepted_creates_on_rejection(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("cache", member_count=2)
    control_plane.fail(
        "create_member",
        None,
        NonRetryableError("Cluster quota exceeded", code="ClusterQuotaForCustomerExceeded"),
    )
    provisioner = Provisioner(make_session(control_plane))

    with pytest.raises(PartialProvisioningError) as excinfo:
        asyncio.run(provisioner.provision("cache", ("cache-003", "cache-004", "cache-005")))

    error = excinfo.value
    assert error.submitted == ("cache-003",)
    assert error.resource_id == "cache-004"
    assert error.phase is Phase.SUBMIT
    assert "Cluster quota exceeded" in str(error)
    # No wait is started and nothing is rolled back.
    assert not any(call[0] == "describe_member" for call in control_plane.calls)
    assert control_plane.members["cache-003"] is MemberStatus.CREATING


def test_create_topology_waits_until_available(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("sessions", exists=False)
    request = TopologyRequest(
        topology_id="Sessions",
        description="session cache",
        node_type="cache.m5.large",
        member_count=2,
    )

    topology = asyncio.run(Provisioner(make_session(control_plane)).create_topology(request))

    assert topology is not None
    assert topology.topology_id == "sessions"
    assert topology.status is TopologyStatus.AVAILABLE
    assert control_plane.created == [request]


def test_restore_from_snapshot_requires_slots(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("sessions", exists=False)
    request = TopologyRequest(
        topology_id="sessions",
        description="restored",
        node_type="cache.m5.large",
        shard_count=2,
        snapshot_arns=("arn:aws:s3:::bucket/snapshot.rdb",),
    )

    with pytest.raises(ConfigurationError, match="slots"):
        asyncio.run(Provisioner(make_session(control_plane)).create_topology(request))

    assert control_plane.calls == []


def test_restore_from_snapshot_with_slot_layout(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("sessions", exists=False)
    request = TopologyRequest(
        topology_id="sessions",
        description="restored",
        node_type="cache.m5.large",
        shard_count=2,
        snapshot_arns=("arn:aws:s3:::bucket/snapshot.rdb",),
        node_group_configuration=NodeGroupConfiguration(slots=("0-8191", "8192-16383")),
    )

    topology = asyncio.run(Provisioner(make_session(control_plane)).create_topology(request))

    assert topology is not None
    assert [call[0] for call in control_plane.mutations()] == ["create_topology"]
