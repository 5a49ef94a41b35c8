#!/usr/bin/env python3
"""
Seed the transaction store from the remote JSON feed.

Deletes every stored transaction and inserts a freshly fetched batch, in one
database transaction.  If the fetch fails nothing is touched; if the write
fails the previous data set is kept.

Usage:
    python seed_transactions.py                          # default DB and feed
    python seed_transactions.py --db data/tx.sqlite
    python seed_transactions.py --url https://example.com/feed.json -v
"""

import argparse
import logging
import sys
from pathlib import Path

from api.database import ensure_database
from utils.config import AppConfig
from utils.database import connect
from utils.errors import TransactionError
from utils.seeding import initialize_transactions

logger = logging.getLogger("seed_transactions")


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments, run the replace-all seed and report the count."""
    cfg = AppConfig.from_env()
    parser = argparse.ArgumentParser(
        description="Replace all stored transactions with the seed feed",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python seed_transactions.py
  python seed_transactions.py --db data/tx.sqlite --timeout 10
        """,
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=cfg.db_path,
        help=f"SQLite database path (default: {cfg.db_path})",
    )
    parser.add_argument(
        "--url",
        default=cfg.seed_source_url,
        help="Seed feed URL (default: SEED_SOURCE_URL or the public feed)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=cfg.seed_timeout,
        help=f"Seconds to wait for the feed (default: {cfg.seed_timeout:g})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.debug("Settings: %s", cfg.to_dict())

    ensure_database(args.db)
    conn = connect(args.db)
    try:
        result = initialize_transactions(conn, source_url=args.url, timeout=args.timeout)
    except TransactionError as exc:
        logger.error("Seeding failed (%s): %s", exc.kind, exc.detail)
        return 1
    finally:
        conn.close()

    print(f"Initialized {result.initialized_count} transactions "
          f"({result.deleted_count} replaced) in {args.db}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
