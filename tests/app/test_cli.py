from __future__ import annotations

import pytest

from cacheplane.domain.model import NonRetryableError
from cacheplane.domain.reconciliation import ReconcileResult
from cacheplane.ui import cli as cli_module


def test_reconcile_command_passes_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_reconcile(topology_id: str, **kwargs: object) -> ReconcileResult:
        captured["topology_id"] = topology_id
        captured.update(kwargs)
        return ReconcileResult(topology_id=topology_id)

    monkeypatch.setattr(cli_module, "reconcile_topology", fake_reconcile)

    cli_module.main(
        [
            "reconcile",
            "Sessions",
            "--members",
            "3",
            "--failover",
            "enabled",
            "--final-snapshot-id",
            "sessions-final",
            "--defer",
            "--timeout-minutes",
            "10",
        ]
    )

    assert captured == {
        "topology_id": "sessions",
        "member_count": 3,
        "shard_count": None,
        "automatic_failover_enabled": True,
        "final_snapshot_id": "sessions-final",
        "apply_immediately": False,
        "timeout_seconds": 600,
    }


def test_reconcile_command_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_reconcile(topology_id: str, **kwargs: object) -> ReconcileResult:
        captured.update(kwargs)
        return ReconcileResult(topology_id=topology_id)

    monkeypatch.setattr(cli_module, "reconcile_topology", fake_reconcile)

    cli_module.main(["reconcile", "sessions", "--shards", "4"])

    assert captured["shard_count"] == 4
    assert captured["automatic_failover_enabled"] is None
    assert captured["apply_immediately"] is True
    assert captured["timeout_seconds"] is None


@pytest.mark.parametrize(
    "argv",
    [
        ["reconcile", "sessions", "--members", "2", "--shards", "2"],
        ["reconcile", "sessions", "--members", "0"],
        ["reconcile", "bad_id", "--members", "2"],
        ["delete", "sessions", "--timeout-minutes", "-1"],
    ],
)
def test_validation_errors_exit_with_2(monkeypatch: pytest.MonkeyPatch, argv: list[str]) -> None:
    def fail(*_: object, **__: object) -> None:
        raise AssertionError("should not be called")

    monkeypatch.setattr(cli_module, "reconcile_topology", fail)
    monkeypatch.setattr(cli_module, "delete_replication_group", fail)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(argv)

    assert excinfo.value.code == 2


def test_failures_exit_with_1(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_delete(*_: object, **__: object) -> None:
        raise NonRetryableError("Invalid snapshot name", resource_id="sessions")

    monkeypatch.setattr(cli_module, "delete_replication_group", fake_delete)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["delete", "sessions"])

    assert excinfo.value.code == 1


def test_describe_missing_group(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    def fake_describe(topology_id: str) -> None:
        calls.append(topology_id)

    monkeypatch.setattr(cli_module, "describe_topology", fake_describe)

    cli_module.main(["describe", "sessions"])

    assert calls == ["sessions"]
