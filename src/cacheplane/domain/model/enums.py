"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class TopologyStatus(StrEnum):
    CREATING = "creating"
    AVAILABLE = "available"
    MODIFYING = "modifying"
    SNAPSHOTTING = "snapshotting"
    CREATE_FAILED = "create-failed"
    DELETING = "deleting"
    DELETED = "deleted"


class MemberStatus(StrEnum):
    CREATING = "creating"
    AVAILABLE = "available"
    MODIFYING = "modifying"
    SNAPSHOTTING = "snapshotting"
    REBOOTING = "rebooting cluster nodes"
    INCOMPATIBLE_NETWORK = "incompatible-network"
    RESTORE_FAILED = "restore-failed"
    DELETING = "deleting"
    DELETED = "deleted"


class MemberRole(StrEnum):
    PRIMARY = "primary"
    REPLICA = "replica"
    UNKNOWN = "unknown"


class AutomaticFailoverStatus(StrEnum):
    ENABLED = "enabled"
    ENABLING = "enabling"
    DISABLED = "disabled"
    DISABLING = "disabling"

    @property
    def is_enabled(self) -> bool:
        return self in {AutomaticFailoverStatus.ENABLED, AutomaticFailoverStatus.ENABLING}


class Phase(StrEnum):
    """Which step of a reconciliation an error surfaced in."""

    SUBMIT = "submit"
    POLL = "poll"
    REASSIGN = "reassign"
    MODIFY = "modify"
    RESIZE = "resize"
    DELETE = "delete"
