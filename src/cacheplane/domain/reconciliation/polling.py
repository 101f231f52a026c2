"""Blocking waits for a remote resource to reach a status.

One loop serves replication groups and member clusters alike: the resource
kind, how to read it, and its status vocabulary are supplied by a
:class:`StatusWatch`.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from cacheplane.domain.model import (
    MemberStatus,
    NotFoundError,
    Phase,
    TerminalStateError,
    TopologyStatus,
    TransientConflictError,
    WaitTimeoutError,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from cacheplane.domain.model import Member, Topology
    from cacheplane.domain.ports import Clock, ControlPlane, Deadline

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StatusWatch[S]:
    kind: str
    describe: Callable[[str], Awaitable[S]]
    status_of: Callable[[S], str]
    deleted_status: str
    failure_statuses: frozenset[str] = frozenset()


def topology_watch(control_plane: ControlPlane) -> StatusWatch[Topology]:
    return StatusWatch(
        kind="replication group",
        describe=control_plane.describe_topology,
        status_of=lambda topology: topology.status,
        deleted_status=TopologyStatus.DELETED,
        failure_statuses=frozenset({TopologyStatus.CREATE_FAILED, TopologyStatus.DELETING}),
    )


def member_watch(control_plane: ControlPlane) -> StatusWatch[Member]:
    return StatusWatch(
        kind="cache cluster",
        describe=control_plane.describe_member,
        status_of=lambda member: member.status,
        deleted_status=MemberStatus.DELETED,
        failure_statuses=frozenset(
            {
                MemberStatus.INCOMPATIBLE_NETWORK,
                MemberStatus.RESTORE_FAILED,
                MemberStatus.DELETING,
            }
        ),
    )


async def await_status[S](
    watch: StatusWatch[S],
    resource_id: str,
    target: str,
    *,
    timeout: float,
    interval: float,
    clock: Clock,
    deadline: Deadline | None = None,
    phase: Phase = Phase.POLL,
) -> S | None:
    """Poll ``resource_id`` until it reports ``target``.

    Returns the last observed state, or ``None`` when waiting for deletion and
    the resource is gone. Failure statuses only apply to non-deletion targets:
    a member on its way out passes through states that would be alarming
    anywhere else. Transient read conflicts are polled through.
    """

    awaiting_deletion = target == watch.deleted_status
    budget = deadline.cap(timeout) if deadline is not None else timeout
    expires_at = clock.monotonic() + budget
    last_status: str | None = None

    while True:
        try:
            observed = await watch.describe(resource_id)
        except NotFoundError as exc:
            if awaiting_deletion:
                log.debug("%s %s no longer exists", watch.kind, resource_id)
                return None
            raise NotFoundError(
                f"{watch.kind} disappeared while waiting for {target}",
                resource_id=resource_id,
                phase=phase,
                code=exc.code,
            ) from exc
        except TransientConflictError as exc:
            log.debug("Transient error reading %s %s: %s", watch.kind, resource_id, exc)
        else:
            status = watch.status_of(observed)
            if status == target:
                return observed
            if not awaiting_deletion and status in watch.failure_statuses:
                raise TerminalStateError(
                    f"{watch.kind} entered {status} while waiting for {target}",
                    status=status,
                    resource_id=resource_id,
                    phase=phase,
                )
            if status != last_status:
                log.debug("%s %s is %s, waiting for %s", watch.kind, resource_id, status, target)
            last_status = status

        remaining = expires_at - clock.monotonic()
        if remaining <= 0:
            raise WaitTimeoutError(
                f"timed out after {budget:.0f}s waiting for {watch.kind} to be {target}"
                f" (last status: {last_status or 'unknown'})",
                last_status=last_status,
                resource_id=resource_id,
                phase=phase,
            )
        await clock.sleep(min(interval, remaining))
