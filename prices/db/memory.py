import asyncio
import logging
from decimal import Decimal
from typing import Iterable

from .base import Database
from .models import ImportStatistics, PriceRecord


class MemoryDatabase(Database):
    """
    In-process implementation of the database interface.

    Holds the price table in a dict keyed by id. Imports are staged on a
    copy of the table and swapped in only when the whole batch succeeds,
    so a failing import leaves the table exactly as it was. A lock
    serializes imports the way a transaction would.
    """

    def __init__(self):
        self.prices: dict[int, PriceRecord] = {}
        self.lock = asyncio.Lock()
        self.logger = logging.getLogger(__name__)

    async def connect(self) -> None:
        pass

    async def create_tables(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def import_prices(self, records: Iterable[PriceRecord]) -> ImportStatistics:
        async with self.lock:
            staged = dict(self.prices)

            n_total = 0
            n_inserted = 0
            for record in records:
                n_total += 1
                if record.id not in staged:
                    staged[record.id] = record
                    n_inserted += 1

            stats = ImportStatistics(
                total_items=len(staged),
                total_categories=len({p.category for p in staged.values()}),
                total_price=sum((p.price for p in staged.values()), Decimal("0")),
            )
            self.prices = staged

        self.logger.debug(
            f"Inserted {n_inserted} new prices out of {n_total} records"
        )
        return stats

    async def export_prices(self) -> list[PriceRecord]:
        return [self.prices[id] for id in sorted(self.prices)]
