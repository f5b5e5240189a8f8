#!/usr/bin/env python3
"""
Manage Watchlist
================

Add, remove and tune the keywords and accounts the monitor scans.

Usage:
    python scripts/manage_watchlist.py list
    python scripts/manage_watchlist.py add keyword '$PENGU' 1.0
    python scripts/manage_watchlist.py add influencer @someone 2.0
    python scripts/manage_watchlist.py remove 3
    python scripts/manage_watchlist.py disable 2
    python scripts/manage_watchlist.py weight 2 1.5
    python scripts/manage_watchlist.py seed
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from signal_monitor.config import config
from signal_monitor.core.decision import adjusted_threshold
from signal_monitor.db.watchlist_db import WatchlistDB
from signal_monitor.errors import MonitorError


def cmd_list(db: WatchlistDB, args):
    entries = db.list_all()
    if not entries:
        print("Watchlist is empty (run 'seed' to add the default keywords)")
        return

    print(f"\n{'ID':>4}  {'KIND':<10}  {'VALUE':<24}  {'WEIGHT':>6}  {'TRIGGERS AT':>11}  STATUS")
    print("-" * 76)
    for entry in entries:
        status = "active" if entry.active else "disabled"
        trigger = adjusted_threshold(entry.weight, config.base_threshold)
        print(
            f"{entry.id:>4}  {entry.kind.value:<10}  {entry.display_value:<24}  "
            f"{entry.weight:>6.2f}  {trigger:>11.2f}  {status}"
        )
    print()


def cmd_add(db: WatchlistDB, args):
    entry = db.add(args.kind, args.value, args.weight)
    print(f"Added [{entry.id}] {entry.kind.value} {entry.display_value} (weight {entry.weight})")


def cmd_remove(db: WatchlistDB, args):
    if db.remove(args.id):
        print(f"Removed entry {args.id}")
    else:
        print(f"No entry with id {args.id}")


def cmd_enable(db: WatchlistDB, args):
    if db.set_active(args.id, True):
        print(f"Enabled entry {args.id}")
    else:
        print(f"No entry with id {args.id}")


def cmd_disable(db: WatchlistDB, args):
    if db.set_active(args.id, False):
        print(f"Disabled entry {args.id}")
    else:
        print(f"No entry with id {args.id}")


def cmd_weight(db: WatchlistDB, args):
    if db.set_weight(args.id, args.weight):
        print(f"Entry {args.id} weight set to {args.weight}")
    else:
        print(f"No entry with id {args.id}")


def cmd_seed(db: WatchlistDB, args):
    inserted = db.seed_defaults()
    if inserted:
        print(f"Seeded {inserted} default keywords")
    else:
        print("Watchlist already has entries, nothing seeded")


def main():
    parser = argparse.ArgumentParser(
        description='Manage the signal monitor watchlist',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        '--db',
        type=str,
        default=str(config.db_path),
        help='Path to database file'
    )
    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('list', help='Show all entries').set_defaults(func=cmd_list)

    add = sub.add_parser('add', help='Add a keyword or influencer')
    add.add_argument('kind', choices=['keyword', 'influencer'])
    add.add_argument('value')
    add.add_argument('weight', type=float, nargs='?', default=1.0)
    add.set_defaults(func=cmd_add)

    remove = sub.add_parser('remove', help='Delete an entry')
    remove.add_argument('id', type=int)
    remove.set_defaults(func=cmd_remove)

    enable = sub.add_parser('enable', help='Include an entry in cycles')
    enable.add_argument('id', type=int)
    enable.set_defaults(func=cmd_enable)

    disable = sub.add_parser('disable', help='Exclude an entry from cycles (kept for audit)')
    disable.add_argument('id', type=int)
    disable.set_defaults(func=cmd_disable)

    weight = sub.add_parser('weight', help='Change an entry weight')
    weight.add_argument('id', type=int)
    weight.add_argument('weight', type=float)
    weight.set_defaults(func=cmd_weight)

    sub.add_parser('seed', help='Insert default keywords into an empty watchlist').set_defaults(
        func=cmd_seed
    )

    args = parser.parse_args()

    try:
        db = WatchlistDB(Path(args.db))
        args.func(db, args)
    except MonitorError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
