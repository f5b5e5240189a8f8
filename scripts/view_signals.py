#!/usr/bin/env python3
"""
View Signals
============

Print the most recent signals from the signal log.

Usage:
    python scripts/view_signals.py
    python scripts/view_signals.py --limit 50
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from signal_monitor.config import config
from signal_monitor.db.signal_db import SignalDB
from signal_monitor.models import SignalRecord


def format_signal(record: SignalRecord) -> str:
    created = record.created_at.strftime('%Y-%m-%d %H:%M:%S')
    text = record.text.replace("\n", " ")
    if len(text) > 100:
        text = text[:97] + "..."
    return (
        f"[{record.id}] {created} {record.source:<10} {record.matched_value!r} "
        f"score {record.score:.2f} ({record.action_taken})\n"
        f"      @{record.author_handle}: {text}\n"
        f"      {record.rationale}"
    )


def main():
    parser = argparse.ArgumentParser(description='View recent signals')
    parser.add_argument(
        '--limit', '-n',
        type=int,
        default=10,
        help='Number of signals to show (default: 10)'
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
        sys.exit(1)

    db = SignalDB(db_path)
    records = db.get_recent(args.limit)

    if not records:
        print("No signals recorded yet")
        return

    print(f"\n=== {len(records)} most recent signals (of {db.count():,}) ===\n")
    for record in records:
        print(format_signal(record))
        print()


if __name__ == "__main__":
    main()
