from csv import writer
from io import StringIO
from typing import Iterable

from prices.db.models import PriceRecord

# Export column order differs from import order
PRICE_COLUMNS = [
    "id",
    "created_at",
    "product_name",
    "category",
    "price",
]


def format_row(record: PriceRecord) -> list[str]:
    return [
        str(record.id),
        record.created_at.strftime("%Y-%m-%d"),
        record.product_name,
        record.category,
        f"{record.price:.2f}",
    ]


def write_csv(records: Iterable[PriceRecord]) -> str:
    """
    Serialize price records to CSV text.

    Args:
        records: Records to serialize, in output order.

    Returns:
        CSV text with a header row followed by one row per record.
    """
    buffer = StringIO()
    csv_writer = writer(buffer, lineterminator="\n")
    csv_writer.writerow(PRICE_COLUMNS)
    for record in records:
        csv_writer.writerow(format_row(record))
    return buffer.getvalue()
