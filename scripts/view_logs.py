#!/usr/bin/env python3
"""
View Logs from SQLite Database
==============================

Query persisted logs from the signal monitor database.

Usage:
    # View last 24 hours of logs
    python scripts/view_logs.py

    # View last 6 hours, errors only
    python scripts/view_logs.py --hours 6 --level ERROR

    # Delete logs older than 3 days
    python scripts/view_logs.py --prune 3
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from signal_monitor.config import config
from signal_monitor.db.service_logs import ServiceLogDB


def format_log(log: dict) -> str:
    """Format a log entry for display."""
    timestamp = log['timestamp'][:19].replace('T', ' ')  # Truncate microseconds
    level = log['level'].ljust(8)
    name = log['logger_name']

    # Truncate long logger names
    if len(name) > 30:
        name = '...' + name[-27:]

    output = f"{timestamp} {level} {name}: {log['message']}"
    if log.get('exc_info'):
        output += f"\n{log['exc_info']}"
    return output


def main():
    parser = argparse.ArgumentParser(
        description='View logs from the signal monitor database',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '--hours', '-t',
        type=int,
        default=24,
        help='Hours of logs to show (default: 24)'
    )
    parser.add_argument(
        '--level', '-l',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Filter by log level'
    )
    parser.add_argument(
        '--limit', '-n',
        type=int,
        default=100,
        help='Maximum logs to show (default: 100)'
    )
    parser.add_argument(
        '--prune',
        type=int,
        metavar='DAYS',
        help='Delete logs older than DAYS and exit'
    )
    parser.add_argument(
        '--db',
        type=str,
        default=str(config.db_path),
        help='Path to database file'
    )
    args = parser.parse_args()

    db_path = Path(args.db)
    if not db_path.exists():
        print(f"Database not found: {db_path}")
        print("The monitor service needs to run first to create the database.")
        sys.exit(1)

    db = ServiceLogDB(db_path)

    if args.prune is not None:
        deleted = db.prune_logs(days=args.prune)
        print(f"Deleted {deleted:,} log entries older than {args.prune} days")
        return

    logs = db.get_logs(hours=args.hours, level=args.level, limit=args.limit)

    if not logs:
        print(f"No logs found in the last {args.hours} hours")
        if args.level:
            print(f"(filtered by level: {args.level})")
        return

    print(f"\n=== Last {len(logs)} logs ===\n")

    # Oldest first reads more naturally
    for log in reversed(logs):
        print(format_log(log))

    print(f"\n=== Showing {len(logs)} logs from last {args.hours} hours ===")
    if args.level:
        print(f"(filtered by level: {args.level})")


if __name__ == "__main__":
    main()
