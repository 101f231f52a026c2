from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from cacheplane.app import delete_replication_group, describe_topology, reconcile_topology
from cacheplane.config import configure_logging
from cacheplane.domain.model import normalize_topology_id

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile cache replication groups")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log reconciliation steps at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    describe = subparsers.add_parser("describe", help="Show a replication group")
    describe.add_argument("topology_id", type=str, help="Replication group id")

    reconcile = subparsers.add_parser(
        "reconcile",
        help="Converge a replication group to the requested member or shard count",
    )
    reconcile.add_argument("topology_id", type=str, help="Replication group id")
    reconcile.add_argument(
        "--members",
        type=int,
        help="Desired number of cache clusters (non-clustered groups)",
    )
    reconcile.add_argument(
        "--shards",
        type=int,
        help="Desired number of node groups (cluster-mode groups)",
    )
    reconcile.add_argument(
        "--failover",
        choices=("enabled", "disabled"),
        help="Desired automatic failover setting",
    )
    reconcile.add_argument(
        "--final-snapshot-id",
        type=str,
        help="Snapshot name to take before deleting removed cache clusters",
    )
    reconcile.add_argument(
        "--defer",
        action="store_true",
        help="Apply attribute changes in the next maintenance window",
    )
    reconcile.add_argument(
        "--timeout-minutes",
        type=float,
        help="Overall deadline for the reconciliation (defaults to config)",
    )

    delete = subparsers.add_parser("delete", help="Delete a replication group")
    delete.add_argument("topology_id", type=str, help="Replication group id")
    delete.add_argument(
        "--final-snapshot-id",
        type=str,
        help="Snapshot name to take before deleting the group",
    )
    delete.add_argument(
        "--timeout-minutes",
        type=float,
        help="Overall deadline for the deletion (defaults to config)",
    )

    return parser.parse_args(list(argv))


def _validate(args: argparse.Namespace) -> None:
    args.topology_id = normalize_topology_id(args.topology_id)
    if args.command == "reconcile":
        if args.members is not None and args.shards is not None:
            raise ValueError("--members and --shards cannot be changed together")
        for flag, value in (("--members", args.members), ("--shards", args.shards)):
            if value is not None and value < 1:
                raise ValueError(f"{flag} must be at least 1")
    timeout_minutes = getattr(args, "timeout_minutes", None)
    if timeout_minutes is not None and timeout_minutes <= 0:
        raise ValueError("--timeout-minutes must be positive")


def _timeout_seconds(args: argparse.Namespace) -> float | None:
    return args.timeout_minutes * 60 if args.timeout_minutes is not None else None


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        _validate(parsed_args)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "describe":
            topology = describe_topology(parsed_args.topology_id)
            if topology is None:
                log.info("Replication group %s does not exist", parsed_args.topology_id)
            else:
                log.info(
                    "%s: status=%s members=%s shards=%s primary=%s failover=%s",
                    topology.topology_id,
                    topology.status,
                    ",".join(topology.member_ids) or "-",
                    topology.shard_count,
                    topology.primary_id or "-",
                    "enabled" if topology.automatic_failover_enabled else "disabled",
                )
        elif parsed_args.command == "reconcile":
            failover = None if parsed_args.failover is None else parsed_args.failover == "enabled"
            result = reconcile_topology(
                parsed_args.topology_id,
                member_count=parsed_args.members,
                shard_count=parsed_args.shards,
                automatic_failover_enabled=failover,
                final_snapshot_id=parsed_args.final_snapshot_id,
                apply_immediately=not parsed_args.defer,
                timeout_seconds=_timeout_seconds(parsed_args),
            )
            log.info(
                "Reconciliation finished: added=%s removed=%s shards_removed=%s changed=%s",
                [member.member_id for member in result.added],
                list(result.decommission.removed) if result.decommission else [],
                list(result.shards_removed),
                result.changed,
            )
        elif parsed_args.command == "delete":
            delete_replication_group(
                parsed_args.topology_id,
                final_snapshot_id=parsed_args.final_snapshot_id,
                timeout_seconds=_timeout_seconds(parsed_args),
            )
            log.info("Deleted replication group %s", parsed_args.topology_id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
