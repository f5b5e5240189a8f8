#!/usr/bin/env python3
"""
Social Signal Monitor - CLI Entry Point
=======================================

Runs the watchlist scan loop: every cycle the active keywords and accounts
are searched on X, new posts are scored for bullish sentiment, and posts
over the weighted threshold are logged and sent to Telegram.

Usage:
    # Start monitor
    python scripts/run_monitor.py

    # Dry run (signals logged only, no Telegram)
    python scripts/run_monitor.py --dry-run

    # Single scan, then exit
    python scripts/run_monitor.py --once

    # Test Telegram configuration
    python scripts/run_monitor.py --test-telegram
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from signal_monitor.alerts import send_test_alert
from signal_monitor.config import config
from signal_monitor.db import SQLiteLoggingHandler, WatchlistDB
from signal_monitor.errors import MonitorError, SourceUnavailable
from signal_monitor.service import MonitorService


def setup_logging(log_level: str = config.log_level, log_file: str = config.log_file):
    """Configure logging for the monitor service."""
    log_path = Path(log_file)
    if not log_path.is_absolute():
        log_path = project_root / log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Create date-stamped log file (e.g., logs/monitor_2026-01-18.log)
    date_str = datetime.now().strftime("%Y-%m-%d")
    dated_log_file = log_path.parent / f"{log_path.stem}_{date_str}{log_path.suffix}"

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    level = getattr(logging, log_level.upper())
    root_logger.setLevel(level)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    file_handler = logging.FileHandler(dated_log_file)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # SQLite handler (persists logs to database, survives container restarts)
    sqlite_handler = SQLiteLoggingHandler(db_path=config.db_path, level=level)
    root_logger.addHandler(sqlite_handler)

    # Reduce noise from HTTP libraries
    for name in ("urllib3", "requests", "openai", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(f"Logging to: {dated_log_file}")
    root_logger.info("Logs also persisted to SQLite database")


async def run_once(service: MonitorService) -> int:
    try:
        signals = await service.manual_scan()
    finally:
        await service.close()

    print(f"\nScan complete: {len(signals)} signal(s)")
    for s in signals:
        print(f"  [{s.source_tag.value}] {s.matched_value} - @{s.item.author_handle} "
              f"score {s.score:.2f}: {s.item.url}")
    return 0


def main():
    parser = argparse.ArgumentParser(
        description='Social Signal Monitor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_monitor.py                  # Start monitor
  python scripts/run_monitor.py --dry-run        # Log signals, no Telegram
  python scripts/run_monitor.py --once           # Single scan and exit
  python scripts/run_monitor.py --test-telegram  # Test Telegram setup
  python scripts/run_monitor.py --seed           # Seed default keywords first
        """
    )
    parser.add_argument(
        '--interval-ms',
        type=int,
        default=config.cycle_interval_ms,
        help=f'Milliseconds between cycles (default: {config.cycle_interval_ms})'
    )
    parser.add_argument(
        '--threshold',
        type=float,
        default=config.base_threshold,
        help=f'Base score threshold for weight 1.0 (default: {config.base_threshold})'
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Log signals instead of sending them to Telegram'
    )
    parser.add_argument(
        '--once',
        action='store_true',
        help='Run a single scan and exit'
    )
    parser.add_argument(
        '--test-telegram',
        action='store_true',
        help='Send a test alert to verify Telegram configuration'
    )
    parser.add_argument(
        '--seed',
        action='store_true',
        help='Insert the default keywords if the watchlist is empty'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=config.log_level.upper(),
        help=f'Log level (default: {config.log_level})'
    )
    args = parser.parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    if args.test_telegram:
        print("Testing Telegram configuration...")
        if send_test_alert():
            print("Test alert sent successfully!")
            sys.exit(0)
        print("Failed to send test alert. Check your TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID.")
        sys.exit(1)

    if args.seed:
        inserted = WatchlistDB(config.db_path).seed_defaults()
        logger.info(f"Seeded {inserted} default watchlist entries")

    print("\n" + "=" * 60)
    print("SOCIAL SIGNAL MONITOR")
    print("=" * 60)
    print(f"Cycle interval: {args.interval_ms / 1000:.0f} seconds")
    print(f"Base threshold: {args.threshold}")
    print(f"Dry run:        {args.dry_run}")
    print(f"Log level:      {args.log_level}")
    print(f"Database:       {config.db_path}")
    print("=" * 60)

    if not config.twitter_bearer_token:
        print("\nWARNING: TWITTER_BEARER_TOKEN not set!")
        print("The monitor cannot read from X without it.")
        sys.exit(1)

    try:
        service = MonitorService.from_config(
            dry_run=args.dry_run,
            interval_ms=args.interval_ms,
            threshold=args.threshold,
        )

        if args.once:
            sys.exit(asyncio.run(run_once(service)))

        print("\nStarting signal monitor...")
        print("Press Ctrl+C to stop\n")

        if not asyncio.run(service.run_forever()):
            sys.exit(1)

    except SourceUnavailable as e:
        logger.error(f"Monitor disabled: {e}")
        sys.exit(1)
    except MonitorError as e:
        logger.error(f"Monitor error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Monitor service error: {e}")
        sys.exit(1)
    finally:
        logging.shutdown()


if __name__ == "__main__":
    main()
