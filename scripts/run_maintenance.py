#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from dairy_app.core.config import ORDER_GENERATION_HORIZON_DAYS  # noqa: E402
from dairy_app.core.database import SessionLocal  # noqa: E402
from dairy_app.core.logging_setup import configure_logging  # noqa: E402
from dairy_app.services.backup import BackupError, get_database_backup  # noqa: E402
from dairy_app.services.subscription_orders import generate_subscription_orders  # noqa: E402


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the daily maintenance jobs by hand.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("backup", help="Copy the database file into BACKUP_DIR")
    subparsers.add_parser("backup-info", help="Show the current backup set")

    generate = subparsers.add_parser("generate-orders", help="Create orders from active subscriptions")
    generate.add_argument(
        "--days",
        type=int,
        default=ORDER_GENERATION_HORIZON_DAYS,
        help="Horizon in days, starting today",
    )
    return parser.parse_args(argv)


def _backup() -> int:
    try:
        path = get_database_backup().create_backup()
    except BackupError as exc:
        print(f"Backup failed: {exc}")
        return 1
    print(f"Backup created: {path}")
    return 0


def _backup_info() -> int:
    info = get_database_backup().get_backup_info()
    for key, value in info.items():
        print(f"{key}: {value}")
    return 0


def _generate_orders(days: int) -> int:
    db = SessionLocal()
    try:
        result = generate_subscription_orders(db, horizon_days=days)
    except ValueError as exc:
        print(str(exc))
        return 1
    finally:
        db.close()
    print(f"{result.created_count} new orders created (skipped={result.skipped}, failed={result.failed})")
    return 1 if result.failed else 0


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging()

    if args.command == "backup":
        return _backup()
    if args.command == "backup-info":
        return _backup_info()
    return _generate_orders(args.days)


if __name__ == "__main__":
    raise SystemExit(main())
