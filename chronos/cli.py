#!/usr/bin/env python3
"""
Command-line utility for the chronology store: CSV export/import, stats, listing and reset.
"""

import argparse
import logging
import sys
from pathlib import Path

from .core import config
from .core.csv_codec import read_import_file
from .core.errors import ChronologyError
from .core.query import SortConfig
from .core.statuses import status_label
from .core.storage import SQLiteStorage
from .core.store import RecordStore
from .util.logging import logger


def build_store(db_path: str = None) -> RecordStore:
    storage = SQLiteStorage(db_path) if db_path else config.get_storage()
    return RecordStore(storage)


def cmd_export(store: RecordStore, args) -> int:
    filename, text = store.export_csv()
    out_dir = Path(args.out or config.EXPORT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / filename
    target.write_text(text, encoding="utf-8", newline="")
    print(f"Exported {len(store)} records to {target}")
    return 0


def cmd_import(store: RecordStore, args) -> int:
    text = read_import_file(args.file)
    report = store.import_csv(text)
    print(f"Imported {report.added} records "
          f"(skipped: {report.malformed} malformed, {report.duplicates} duplicates)")
    if report.meta_applied:
        print("Case metadata updated from file")
    return 0


def cmd_stats(store: RecordStore, args) -> int:
    stats = store.stats()
    meta = store.meta
    if meta.title or meta.case_id:
        print(f"Case: {meta.title} {meta.case_id}".rstrip())
    print(f"Total:      {stats.total}")
    print(f"Satisfied:  {stats.final_success}")
    print(f"Failed:     {stats.fail}")
    print(f"Closed:     {stats.closed}")
    print(f"Efficiency: {stats.efficiency}%")
    return 0


def cmd_list(store: RecordStore, args) -> int:
    sort = SortConfig(args.sort, args.direction)
    for record in store.query(args.search or '', sort):
        print("\t".join([
            record.id,
            record.date,
            record.reg_no,
            record.name,
            record.correspondent,
            status_label(record.status),
            record.note,
        ]))
    return 0


def cmd_reset(store: RecordStore, args) -> int:
    if not args.yes:
        print("Refusing to reset without --yes", file=sys.stderr)
        return 1
    store.reset()
    print("All records and case metadata removed")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chronos",
        description="Case chronology tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s export --out backups/      # Write Chronology_<case>_<date>.csv
  %(prog)s import backup.csv          # Merge a CSV backup, skipping known ids
  %(prog)s list --search иванов       # Filter records
  %(prog)s stats                      # Show case statistics

Environment variables:
- CHRONOS_DB_PATH=./data/chronos.db
- CHRONOS_STORAGE=sqlite|memory
- CHRONOS_EXPORT_DIR=.
        """
    )
    parser.add_argument("--db", help="SQLite database path (overrides CHRONOS_DB_PATH)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show operation log output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export records to CSV")
    export_parser.add_argument("--out", "-o", help="Output directory (default: CHRONOS_EXPORT_DIR)")
    export_parser.set_defaults(func=cmd_export)

    import_parser = subparsers.add_parser("import", help="Import records from CSV")
    import_parser.add_argument("file", help="CSV file to import")
    import_parser.set_defaults(func=cmd_import)

    stats_parser = subparsers.add_parser("stats", help="Show statistics")
    stats_parser.set_defaults(func=cmd_stats)

    list_parser = subparsers.add_parser("list", help="List records")
    list_parser.add_argument("--search", "-s", default="", help="Case-insensitive filter text")
    list_parser.add_argument("--sort", default="date", help="Sort field (default: date)")
    list_parser.add_argument("--direction", choices=["asc", "desc"], default="desc")
    list_parser.set_defaults(func=cmd_list)

    reset_parser = subparsers.add_parser("reset", help="Delete all records and case metadata")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm the reset")
    reset_parser.set_defaults(func=cmd_reset)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger.set_level(logging.INFO if args.verbose else logging.WARNING)

    try:
        store = build_store(args.db)
        return args.func(store, args)
    except ChronologyError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"❌ Invalid argument: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
