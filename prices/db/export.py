#!/usr/bin/env python3
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from prices.config import settings
from prices.db.transfer import export_archive
from prices.errors import PricesError

db = settings.get_db()


async def main() -> int:
    """
    Export all prices from the database to a zip archive.

    The archive contains a single `data.csv` file with columns
    `id,created_at,product_name,category,price`, ordered by id.
    """
    parser = argparse.ArgumentParser(
        description=main.__doc__,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("data.zip"),
        help="Output archive path (default: data.zip)",
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
        data = await export_archive(db)
    except PricesError as e:
        logging.error(f"Failed to export prices: {e.message}")
        return 1
    finally:
        await db.close()

    args.output.write_bytes(data)
    logging.info(f"Wrote {len(data)} bytes to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
