from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from rosterkeep.app import create_member, publish_announcement, run_reconciliation, run_watch
from rosterkeep.config import ConfigurationError, ReconcileConfig, configure_logging
from rosterkeep.domain.model import NotificationKind, RoleTag
from rosterkeep.domain.roster import RegistrationRequest

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep the band roster consistent")
    parser.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy URI of the document store (defaults to config)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Repair duplicate and legacy records")
    reconcile.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and reconcile after every change",
    )
    reconcile.add_argument(
        "--load-timeout",
        type=float,
        help="Seconds to wait for accounts before the first pass (defaults to config)",
    )

    register = subparsers.add_parser("register", help="Register an account and roster entry")
    register.add_argument("--name", type=str, required=True, help="Display name")
    register.add_argument(
        "--handle", type=str, required=True, help="Login handle, with or without @"
    )
    register.add_argument("--password", type=str, required=True, help="Account password")
    register.add_argument(
        "--role",
        type=str,
        choices=[role.value for role in RoleTag],
        default=RoleTag.MUSICIAN.value,
        help="Account role",
    )
    register.add_argument("--instrument", type=str, help="Optional instrument")

    announce = subparsers.add_parser("announce", help="Notify the band about new content")
    announce.add_argument(
        "--leader", type=str, required=True, help="Name of the announcing leader"
    )
    announce.add_argument(
        "--kind",
        type=str,
        choices=[kind.value for kind in NotificationKind],
        required=True,
        help="Kind of content being announced",
    )
    announce.add_argument("--title", type=str, required=True, help="Title of the new content")
    announce.add_argument(
        "--recipient",
        dest="recipients",
        action="append",
        help="External user id to target; repeat for several (defaults to everyone)",
    )
    announce.add_argument(
        "--dry-run",
        action="store_true",
        help="Log the push message instead of sending it",
    )

    return parser.parse_args(list(argv))


def _reconcile_config(load_timeout: float | None) -> ReconcileConfig | None:
    if load_timeout is None:
        return None
    if load_timeout < 0:
        raise ValueError("Load timeout must be non-negative")
    return ReconcileConfig(initial_load_timeout_seconds=load_timeout)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    try:
        configure_logging()
    except ConfigurationError:
        configure_logging(level=logging.INFO)
        log.exception("Invalid logging configuration")
        sys.exit(2)

    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        reconcile_config = (
            _reconcile_config(parsed_args.load_timeout)
            if parsed_args.command == "reconcile"
            else None
        )
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "reconcile":
            if parsed_args.watch:
                run_watch(database_uri=parsed_args.database_uri, config=reconcile_config)
            else:
                run_reconciliation(database_uri=parsed_args.database_uri)
        elif parsed_args.command == "register":
            create_member(
                RegistrationRequest(
                    display_name=parsed_args.name,
                    handle=parsed_args.handle,
                    password=parsed_args.password,
                    role=RoleTag(parsed_args.role),
                    instrument=parsed_args.instrument,
                ),
                database_uri=parsed_args.database_uri,
            )
        elif parsed_args.command == "announce":
            result = publish_announcement(
                leader_name=parsed_args.leader,
                kind=NotificationKind(parsed_args.kind),
                content_title=parsed_args.title,
                recipients=parsed_args.recipients,
                dry_run=parsed_args.dry_run,
                database_uri=parsed_args.database_uri,
            )
            if result.errors:
                raise RuntimeError("; ".join(result.errors))  # noqa: TRY301
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error")
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
