import logging
from time import time

from prices.db.base import Database
from prices.db.models import ImportStatistics
from .archive_handler import extract, package
from .csv_reader import read_csv
from .csv_writer import write_csv

logger = logging.getLogger("transfer.processors")

EXPORT_ENTRY_NAME = "data.csv"


async def import_archive(data: bytes, db: Database) -> ImportStatistics:
    """
    Import prices from a zip archive into the database.

    The CSV file is extracted from the archive and its rows are validated
    while they are being inserted, all in one transaction. The first bad
    row aborts the import and nothing is committed.

    Args:
        data: Raw bytes of the zip archive.
        db: Database to import into.

    Returns:
        Totals over all prices in the database after the import.
    """
    t0 = time()

    text = extract(data)
    stats = await db.import_prices(read_csv(text))

    dt = time() - t0
    logger.info(
        f"Imported prices in {dt:.2f} seconds: {stats.total_items} items, "
        f"{stats.total_categories} categories, total price {stats.total_price}"
    )
    return stats


async def export_archive(db: Database) -> bytes:
    """
    Export all prices from the database as a zip archive.

    Args:
        db: Database to export from.

    Returns:
        Raw bytes of a zip archive containing a single `data.csv` file.
    """
    t0 = time()

    records = await db.export_prices()
    data = package(write_csv(records), EXPORT_ENTRY_NAME)

    dt = time() - t0
    logger.info(f"Exported {len(records)} prices in {dt:.2f} seconds")
    return data
