from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from cacheplane.domain.model import Phase, TopologyStatus, TransientConflictError, WaitTimeoutError
from cacheplane.domain.reconciliation import ShardResizer
from tests.support.control_plane import FakeControlPlane

if TYPE_CHECKING:
    from collections.abc import Callable

    from cacheplane.domain.ports import ControlPlane
    from cacheplane.domain.reconciliation import ReconcileSession

    SessionFactory = Callable[[ControlPlane], ReconcileSession]


def test_shrinking_names_highest_shards(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("cache", shard_count=4)
    resizer = ShardResizer(make_session(control_plane))

    removed = asyncio.run(resizer.resize_shards("cache", 4, 2))

    assert removed == ("0004", "0003")
    assert control_plane.mutations() == [
        ("modify_shard_configuration", "cache", 2, ("0004", "0003")),
    ]
    assert control_plane.status is TopologyStatus.AVAILABLE


def test_growing_sends_only_target_count(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("cache", shard_count=2)
    resizer = ShardResizer(make_session(control_plane))

    removed = asyncio.run(resizer.resize_shards("cache", 2, 3))

    assert removed == ()
    assert control_plane.mutations() == [("modify_shard_configuration", "cache", 3, ())]
    assert control_plane.shard_count == 3


def test_unchanged_count_makes_no_call(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("cache", shard_count=2)

    assert asyncio.run(ShardResizer(make_session(control_plane)).resize_shards("cache", 2, 2)) == ()
    assert control_plane.calls == []


def test_zero_shards_rejected(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("cache", shard_count=2)

    with pytest.raises(ValueError, match="at least 1"):
        asyncio.run(ShardResizer(make_session(control_plane)).resize_shards("cache", 2, 0))


def test_resize_conflict_retried_then_times_out(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("cache", shard_count=2)
    session = make_session(control_plane)
    conflicts = [TransientConflictError("Replication group is modifying")] * 20
    control_plane.fail("modify_shard_configuration", *conflicts)

    with pytest.raises(TransientConflictError) as excinfo:
        asyncio.run(ShardResizer(session).resize_shards("cache", 2, 3))

    assert excinfo.value.resource_id == "cache"
    assert excinfo.value.phase is Phase.RESIZE
    # 0..300s every 30s, then the unguarded attempt.
    assert len(control_plane.mutations()) == 12


def test_resize_wait_failure_propagates(make_session: SessionFactory) -> None:
    control_plane = FakeControlPlane("cache", shard_count=2)
    control_plane.fail("describe_topology", WaitTimeoutError("still modifying"))

    with pytest.raises(WaitTimeoutError):
        asyncio.run(ShardResizer(make_session(control_plane)).resize_shards("cache", 2, 1))
