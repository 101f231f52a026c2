from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from cacheplane.domain.model import (
    MemberStatus,
    NotFoundError,
    Phase,
    TerminalStateError,
    TopologyStatus,
    TransientConflictError,
    WaitTimeoutError,
)
from cacheplane.domain.ports import Deadline
from cacheplane.domain.reconciliation import StatusWatch, await_status, member_watch
from tests.support.control_plane import FakeControlPlane

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tests.support.clock import FakeClock


class ScriptedResource:
    """Returns the scripted statuses in order; ``None`` means not found."""

    def __init__(self, script: Sequence[str | Exception | None]) -> None:
        self.script = list(script)
        self.reads = 0

    async def describe(self, resource_id: str) -> str:
        self.reads += 1
        step = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if step is None:
            raise NotFoundError("not found", code="CacheClusterNotFound")
        if isinstance(step, Exception):
            raise step
        return step


def _watch(resource: ScriptedResource) -> StatusWatch[str]:
    return StatusWatch(
        kind="cache cluster",
        describe=resource.describe,
        status_of=lambda status: status,
        deleted_status=MemberStatus.DELETED,
        failure_statuses=frozenset({MemberStatus.RESTORE_FAILED, MemberStatus.DELETING}),
    )


def test_await_deletion_treats_not_found_as_success(clock: FakeClock) -> None:
    resource = ScriptedResource([MemberStatus.DELETING, MemberStatus.DELETING, None])

    result = asyncio.run(
        await_status(
            _watch(resource),
            "cache-003",
            MemberStatus.DELETED,
            timeout=600,
            interval=30,
            clock=clock,
        )
    )

    assert result is None
    assert resource.reads == 3
    assert clock.now == 60


def test_await_available_returns_observed_state(clock: FakeClock) -> None:
    resource = ScriptedResource([MemberStatus.CREATING, MemberStatus.AVAILABLE])

    result = asyncio.run(
        await_status(
            _watch(resource),
            "cache-002",
            MemberStatus.AVAILABLE,
            timeout=600,
            interval=30,
            clock=clock,
        )
    )

    assert result == MemberStatus.AVAILABLE


def test_not_found_while_awaiting_available_is_raised_with_context(clock: FakeClock) -> None:
    resource = ScriptedResource([MemberStatus.CREATING, None])

    with pytest.raises(NotFoundError) as excinfo:
        asyncio.run(
            await_status(
                _watch(resource),
                "cache-002",
                MemberStatus.AVAILABLE,
                timeout=600,
                interval=30,
                clock=clock,
            )
        )

    assert excinfo.value.resource_id == "cache-002"
    assert excinfo.value.phase is Phase.POLL


def test_failure_status_aborts_wait(clock: FakeClock) -> None:
    resource = ScriptedResource([MemberStatus.CREATING, MemberStatus.RESTORE_FAILED])

    with pytest.raises(TerminalStateError) as excinfo:
        asyncio.run(
            await_status(
                _watch(resource),
                "cache-002",
                MemberStatus.AVAILABLE,
                timeout=600,
                interval=30,
                clock=clock,
            )
        )

    assert excinfo.value.status == MemberStatus.RESTORE_FAILED
    assert excinfo.value.resource_id == "cache-002"


def test_failure_statuses_ignored_while_awaiting_deletion(clock: FakeClock) -> None:
    resource = ScriptedResource([MemberStatus.DELETING, MemberStatus.DELETED])

    result = asyncio.run(
        await_status(
            _watch(resource),
            "cache-002",
            MemberStatus.DELETED,
            timeout=600,
            interval=30,
            clock=clock,
        )
    )

    assert result == MemberStatus.DELETED


def test_transient_read_errors_are_polled_through(clock: FakeClock) -> None:
    resource = ScriptedResource(
        [TransientConflictError("throttled"), MemberStatus.MODIFYING, MemberStatus.AVAILABLE]
    )

    result = asyncio.run(
        await_status(
            _watch(resource),
            "cache-001",
            MemberStatus.AVAILABLE,
            timeout=600,
            interval=30,
            clock=clock,
        )
    )

    assert result == MemberStatus.AVAILABLE
    assert resource.reads == 3


def test_wait_times_out_with_last_status(clock: FakeClock) -> None:
    resource = ScriptedResource([MemberStatus.MODIFYING])

    with pytest.raises(WaitTimeoutError) as excinfo:
        asyncio.run(
            await_status(
                _watch(resource),
                "cache-001",
                MemberStatus.AVAILABLE,
                timeout=90,
                interval=30,
                clock=clock,
            )
        )

    assert excinfo.value.last_status == MemberStatus.MODIFYING
    assert clock.now == 90
    assert resource.reads == 4


def test_wait_is_capped_by_deadline(clock: FakeClock) -> None:
    resource = ScriptedResource([TopologyStatus.MODIFYING])
    deadline = Deadline.after(clock, 45)

    with pytest.raises(WaitTimeoutError):
        asyncio.run(
            await_status(
                _watch(resource),
                "cache",
                TopologyStatus.AVAILABLE,
                timeout=600,
                interval=30,
                clock=clock,
                deadline=deadline,
            )
        )

    assert clock.now == 45


def test_member_watch_reads_from_control_plane(clock: FakeClock) -> None:
    control_plane = FakeControlPlane("cache", member_count=2)

    async def scenario() -> None:
        await control_plane.create_member("cache-003", "cache")
        await await_status(
            member_watch(control_plane),
            "cache-003",
            MemberStatus.AVAILABLE,
            timeout=600,
            interval=30,
            clock=clock,
        )

    asyncio.run(scenario())

    assert control_plane.members["cache-003"] is MemberStatus.AVAILABLE
    assert [call for call in control_plane.calls if call[0] == "describe_member"] == [
        ("describe_member", "cache-003"),
        ("describe_member", "cache-003"),
    ]
