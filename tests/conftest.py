from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cacheplane.config import TimeoutConfig
from cacheplane.domain.ports import Deadline
from cacheplane.domain.reconciliation import ReconcileSession
from tests.support.clock import FakeClock

if TYPE_CHECKING:
    from collections.abc import Callable

    from cacheplane.domain.ports import ControlPlane


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def timeouts() -> TimeoutConfig:
    return TimeoutConfig()


@pytest.fixture
def make_session(
    clock: FakeClock,
    timeouts: TimeoutConfig,
) -> Callable[[ControlPlane], ReconcileSession]:
    def factory(control_plane: ControlPlane) -> ReconcileSession:
        return ReconcileSession(
            control_plane=control_plane,
            clock=clock,
            timeouts=timeouts,
            deadline=Deadline.after(clock, timeouts.update_seconds),
            wait_timeout=timeouts.update_seconds,
        )

    return factory
