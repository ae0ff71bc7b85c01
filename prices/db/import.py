#!/usr/bin/env python3
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from prices.config import settings
from prices.db.transfer import import_archive
from prices.errors import PricesError

db = settings.get_db()


async def main() -> int:
    """
    Import price data from zip archives.

    Each archive should contain a CSV file with a header row followed by
    rows with columns `id,product_name,category,price,created_at`. Archives
    are imported in the order given, each in its own transaction. Import
    stops at the first archive that fails.

    Database connection settings are loaded from the service configuration, see
    `prices/config.py` for details.
    """
    parser = argparse.ArgumentParser(
        description=main.__doc__,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "paths",
        type=Path,
        help="One or more zip archives containing price data",
        nargs="+",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s:%(name)s:%(levelname)s:%(message)s",
    )

    await db.connect()

    try:
        await db.create_tables()

        for path in args.paths:
            if path.suffix.lower() != ".zip" or not path.is_file():
                logging.error(f"Path `{path}` is not a zip archive.")
                return 1

            try:
                stats = await import_archive(path.read_bytes(), db)
            except PricesError as e:
                logging.error(f"Failed to import {path}: {e.message}")
                return 1

            print(
                f"{path}: total_items={stats.total_items} "
                f"total_categories={stats.total_categories} "
                f"total_price={stats.total_price}"
            )
    finally:
        await db.close()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
