from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING

from cacheplane.domain.model import Topology, TopologyAttributes, TopologyChanges
from cacheplane.domain.reconciliation import apply_changes, diff_attributes
from tests.support.control_plane import FakeControlPlane

if TYPE_CHECKING:
    from collections.abc import Callable

    from cacheplane.domain.ports import ControlPlane
    from cacheplane.domain.reconciliation import ReconcileSession

    SessionFactory = Callable[[ControlPlane], ReconcileSession]


def _topology(**attributes: object) -> Topology:
    return Topology(
        topology_id="cache",
        member_count=2,
        attributes=TopologyAttributes(**attributes),  # type: ignore[arg-type]
    )


def test_identical_topologies_produce_empty_change_set() -> None:
    changes = diff_attributes(_topology(description="a"), _topology(description="a"))

    assert changes.is_empty
    assert changes.as_fields() == {}


def test_only_changed_fields_are_set() -> None:
    old = _topology(description="old", engine_version="6.2", node_type="cache.t3.small")
    new = _topology(description="new", engine_version="7.0", node_type="cache.t3.small")

    changes = diff_attributes(old, new)

    assert changes.as_fields() == {"description": "new", "engine_version": "7.0"}


def test_failover_change_is_included() -> None:
    old = _topology()
    new = replace(old, automatic_failover_enabled=True)

    assert diff_attributes(old, new) == TopologyChanges.failover(enabled=True)


def test_enabling_snapshots_names_first_member() -> None:
    changes = diff_attributes(_topology(), _topology(snapshot_retention_limit=5))

    assert changes.snapshot_retention_limit == 5
    assert changes.snapshotting_member_id == "cache-001"


def test_changing_existing_retention_keeps_snapshotting_member() -> None:
    changes = diff_attributes(
        _topology(snapshot_retention_limit=3), _topology(snapshot_retention_limit=7)
    )

    assert changes.snapshot_retention_limit == 7
    assert changes.snapshotting_member_id is None


def test_maintenance_window_compared_case_insensitively() -> None:
    unchanged = diff_attributes(
        _topology(maintenance_window="sun:05:00-sun:09:00"),
        _topology(maintenance_window="SUN:05:00-SUN:09:00"),
    )
    changed = diff_attributes(
        _topology(maintenance_window="sun:05:00-sun:09:00"),
        _topology(maintenance_window="MON:05:00-MON:09:00"),
    )

    assert unchanged.is_empty
    assert changed.maintenance_window == "mon:05:00-mon:09:00"


def test_empty_security_groups_are_not_detached() -> None:
    changes = diff_attributes(
        _topology(security_group_ids=frozenset({"sg-1"})),
        _topology(security_group_ids=frozenset()),
    )

    assert changes.is_empty


def test_apply_changes_skips_empty_change_set(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("cache")

    applied = asyncio.run(apply_changes(make_session(control_plane), "cache", TopologyChanges()))

    assert applied is False
    assert control_plane.calls == []


def test_apply_changes_submits_once_and_waits(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("cache")
    changes = TopologyChanges(description="sessions")

    applied = asyncio.run(
        apply_changes(make_session(control_plane), "cache", changes, apply_immediately=False)
    )

    assert applied is True
    assert control_plane.mutations() == [("modify_topology", "cache", changes, False)]
    assert control_plane.attributes.description == "sessions"
    assert [call[0] for call in control_plane.calls].count("describe_topology") == 2
