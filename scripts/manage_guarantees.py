#!/usr/bin/env python3
"""Manage bank guarantees stored in PostgreSQL.

Commands:
- import: create guarantees from a CSV file (--dry-run prints a preview)
- export: write all guarantees to a CSV file
- template: write the fill-in CSV template
- stats: print aggregate statistics
- watch: follow live changes for a while
- seed: insert generated sample guarantees
- init-db: create the table and its change trigger

Connection settings come from the environment (DATABASE_URL, CHANGE_FEED,
KAFKA_BOOTSTRAP_SERVERS, ...).
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from guarantee_tracker.codec.csv_codec import csv_template, export_csv
from guarantee_tracker.codec.serialization import record_to_dict
from guarantee_tracker.config import TrackerConfig
from guarantee_tracker.exceptions import TrackerError
from guarantee_tracker.generators import GuaranteeGenerator
from guarantee_tracker.logging import setup_logging
from guarantee_tracker.services import GuaranteeBoard, preview_csv
from guarantee_tracker.store import PostgresGuaranteeStore, open_store

logger = logging.getLogger(__name__)


def cmd_import(args: argparse.Namespace, config: TrackerConfig) -> int:
    text = Path(args.file).read_text(encoding="utf-8-sig")
    if args.dry_run:
        return _preview(text, config)

    store = open_store(config)
    try:
        board = GuaranteeBoard(store, config.board)
        result = board.import_csv(text)
    finally:
        store.close()

    if result.imported is None:
        logger.error("%s", result.message)
        return 1
    print(f"Imported: {result.imported.success}, errors: {result.imported.errors}")
    return 0 if result.ok else 1


def _preview(text: str, config: TrackerConfig) -> int:
    rows = preview_csv(text, home_currency=config.board.home_currency)
    for row in rows:
        print(json.dumps(record_to_dict(row), ensure_ascii=False))
    return 0


def cmd_export(args: argparse.Namespace, config: TrackerConfig) -> int:
    store = open_store(config)
    try:
        records = store.list_all()
    finally:
        store.close()

    if not records:
        logger.warning("No guarantees to export")
        return 0
    Path(args.file).write_text(export_csv(records), encoding="utf-8")
    print(f"Exported {len(records)} guarantees to {args.file}")
    return 0


def cmd_template(args: argparse.Namespace, config: TrackerConfig) -> int:
    Path(args.file).write_text(csv_template(), encoding="utf-8")
    print(f"Template written to {args.file}")
    return 0


def cmd_stats(args: argparse.Namespace, config: TrackerConfig) -> int:
    store = open_store(config)
    try:
        stats = store.aggregate_statistics()
    finally:
        store.close()

    print("=" * 60)
    print(f"  Total guarantees: {stats.total}")
    print(f"  Total value:      {stats.total_value:,.2f}")
    print(f"  Active:           {stats.active_count}")
    print(f"  Pending:          {stats.pending_count}")
    print(f"  Expired:          {stats.expired_count}")
    print("  By type:")
    for guarantee_type, count in sorted(stats.type_distribution.items()):
        print(f"    {guarantee_type}: {count}")
    print("=" * 60)
    return 0


def cmd_watch(args: argparse.Namespace, config: TrackerConfig) -> int:
    store = open_store(config)
    board = GuaranteeBoard(store, config.board)
    deadline = time.monotonic() + args.duration
    try:
        with board:
            logger.info("Watching %d guarantees for %.0fs", len(board.guarantees), args.duration)
            while time.monotonic() < deadline:
                applied = board.tick()
                if applied:
                    logger.info("Applied %d change(s); %d guarantees", applied, len(board.guarantees))
                if board.error:
                    logger.error("%s", board.error)
                    return 1
                time.sleep(args.interval)
    finally:
        store.close()
    return 0


def cmd_seed(args: argparse.Namespace, config: TrackerConfig) -> int:
    store = open_store(config)
    generator = GuaranteeGenerator(seed=args.seed)
    created = 0
    try:
        for guarantee in generator.generate_batch(args.count):
            store.create(guarantee)
            created += 1
    finally:
        store.close()
    print(f"Inserted {created} sample guarantees")
    return 0


def cmd_init_db(args: argparse.Namespace, config: TrackerConfig) -> int:
    store = PostgresGuaranteeStore(config.postgres)
    try:
        store.ensure_table()
    finally:
        store.close()
    return 0


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Manage bank guarantees")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import guarantees from CSV")
    import_parser.add_argument("file", help="CSV file to import")
    import_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the first 5 parsed rows without connecting",
    )
    import_parser.set_defaults(handler=cmd_import)

    export_parser = subparsers.add_parser("export", help="Export guarantees to CSV")
    export_parser.add_argument(
        "file",
        nargs="?",
        default="bank_guarantees.csv",
        help="Output file (default: bank_guarantees.csv)",
    )
    export_parser.set_defaults(handler=cmd_export)

    template_parser = subparsers.add_parser("template", help="Write the CSV template")
    template_parser.add_argument(
        "file",
        nargs="?",
        default="bank_guarantees_template.csv",
        help="Output file (default: bank_guarantees_template.csv)",
    )
    template_parser.set_defaults(handler=cmd_template)

    stats_parser = subparsers.add_parser("stats", help="Print statistics")
    stats_parser.set_defaults(handler=cmd_stats)

    watch_parser = subparsers.add_parser("watch", help="Follow live changes")
    watch_parser.add_argument(
        "--duration",
        type=float,
        default=60.0,
        help="Seconds to watch (default: 60)",
    )
    watch_parser.add_argument(
        "--interval",
        type=float,
        default=0.5,
        help="Seconds between polls (default: 0.5)",
    )
    watch_parser.set_defaults(handler=cmd_watch)

    seed_parser = subparsers.add_parser("seed", help="Insert sample guarantees")
    seed_parser.add_argument(
        "--count",
        type=int,
        default=20,
        help="Number of guarantees (default: 20)",
    )
    seed_parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    seed_parser.set_defaults(handler=cmd_seed)

    init_parser = subparsers.add_parser("init-db", help="Create table and change trigger")
    init_parser.set_defaults(handler=cmd_init_db)

    args = parser.parse_args()
    config = TrackerConfig.from_env()
    setup_logging(level=args.log_level or config.log_level, format_type=config.log_format)

    try:
        sys.exit(args.handler(args, config))
    except TrackerError as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
