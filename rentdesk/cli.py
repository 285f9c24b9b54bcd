"""Command-line access to the console views, printed as JSON."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

from rentdesk.clock import SystemClock
from rentdesk.config import RentDeskConfig
from rentdesk.exceptions import RentDeskError
from rentdesk.generators import SeedDataGenerator
from rentdesk.logging import setup_logging
from rentdesk.manager import RentalManager
from rentdesk.reports import build_income_report
from rentdesk.store import EntityStore, JsonFileBackend, MemoryBackend
from rentdesk.store.serialization import serialize_value

logger = logging.getLogger(__name__)


def build_manager(config: RentDeskConfig) -> RentalManager:
    """Wire backend, store and manager from configuration."""
    if config.storage.backend == "json":
        backend = JsonFileBackend(config.storage.data_dir)
    else:
        backend = MemoryBackend()

    seeder = SeedDataGenerator(seed=config.seed) if config.seed_on_first_use else None
    store = EntityStore(backend, SystemClock(), seeder=seeder, key_prefix=config.storage.key_prefix)
    return RentalManager(store, config)


def _emit(data: Any) -> None:
    print(json.dumps(serialize_value(data), indent=2, ensure_ascii=False))


def _dashboard(manager: RentalManager, args: argparse.Namespace) -> None:
    windows = manager.config.windows
    _emit(
        {
            "stats": manager.dashboard_stats(),
            "upcoming": manager.upcoming_items(limit=windows.upcoming_items_limit),
            "recent_payments": manager.aggregator.recent_payments(
                manager.payments, windows.recent_payments_limit
            ),
        }
    )


def _upcoming(manager: RentalManager, args: argparse.Namespace) -> None:
    _emit(manager.upcoming_items(limit=args.limit))


def _notifications(manager: RentalManager, args: argparse.Namespace) -> None:
    notifications = manager.list_notifications()
    if args.unread:
        notifications = [n for n in notifications if not n.is_read]
    _emit(notifications)


def _report(manager: RentalManager, args: argparse.Namespace) -> None:
    _emit(
        build_income_report(
            manager.clock.now(),
            manager.properties,
            manager.tenants,
            manager.payments,
            months=args.months,
            config=manager.config.report,
            aggregator=manager.aggregator,
        )
    )


def _check(manager: RentalManager, args: argparse.Namespace) -> None:
    if args.fix:
        problems = manager.repair_occupancy()
    else:
        problems = manager.reconciler.find_violations(manager.properties, manager.tenants)
    _emit({"problems": problems, "fixed": bool(args.fix and problems)})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rentdesk", description="Property management console views")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory of the JSON collections (default: $RENTDESK_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: $LOG_LEVEL or INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("dashboard", help="Headline stats, upcoming dates and recent payments").set_defaults(
        handler=_dashboard
    )

    upcoming = sub.add_parser("upcoming", help="Rent due dates and lease expiries")
    upcoming.add_argument("--limit", type=int, default=None, help="Show at most this many items")
    upcoming.set_defaults(handler=_upcoming)

    notifications = sub.add_parser("notifications", help="Stored and system notifications")
    notifications.add_argument("--unread", action="store_true", help="Only unread notifications")
    notifications.set_defaults(handler=_notifications)

    report = sub.add_parser("report", help="Income and occupancy report")
    report.add_argument("--months", type=int, choices=(6, 12, 24), default=None, help="Trailing months")
    report.set_defaults(handler=_report)

    check = sub.add_parser("check", help="Verify property occupancy against active tenants")
    check.add_argument("--fix", action="store_true", help="Rebuild bindings from active tenants")
    check.set_defaults(handler=_check)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = RentDeskConfig.from_env()
        if args.data_dir is not None:
            config.storage = replace(config.storage, backend="json", data_dir=args.data_dir)
        if args.log_level:
            config.log_level = args.log_level
        setup_logging(config.log_level, config.log_format)

        args.handler(build_manager(config), args)
    except RentDeskError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
