import logging
import re
from csv import Error as CsvError, reader
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from io import StringIO
from typing import Iterable, Iterator

from prices.db.models import PriceRecord
from prices.errors import (
    CorruptArchive,
    EmptyField,
    FieldTooLong,
    InvalidDate,
    InvalidId,
    InvalidPrice,
    MalformedRow,
    MissingHeader,
)

logger = logging.getLogger("transfer.csv_reader")

# Import column order: id, product_name, category, price, created_at
N_FIELDS = 5

# ASCII digits only; int() and Decimal() also accept underscores and other scripts
ID_PATTERN = re.compile(r"[+-]?[0-9]+")
PRICE_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)")
DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

# Column limits: BIGINT id, DECIMAL(12, 2) price, VARCHAR(255) text
MAX_ID = 2**63 - 1
MAX_PRICE = Decimal("9999999999.99")
MAX_TEXT_LENGTH = 255


def parse_id(value: str, line: int) -> int:
    if not ID_PATTERN.fullmatch(value.strip()):
        raise InvalidId(f"Invalid id on line {line}: {value!r}")

    id = int(value.strip())

    if not -MAX_ID <= id <= MAX_ID:
        raise InvalidId(f"Id out of range on line {line}: {value!r}")
    return id


def parse_price(value: str, line: int) -> Decimal:
    """
    Parse a price as a non-negative Decimal with 2 decimal places.

    Args:
        value: Price string using `.` as decimal separator.
        line: Line number, for the error message.

    Returns:
        Parsed price rounded half-up to 2 decimal places.

    Raises:
        InvalidPrice: If the value is not a finite, non-negative number.
    """
    if not PRICE_PATTERN.fullmatch(value.strip()):
        raise InvalidPrice(f"Invalid price format on line {line}: {value!r}")

    price = Decimal(value.strip())

    # TODO: negative prices are rejected until product confirms whether
    # credits/refunds should be importable
    if price < 0:
        raise InvalidPrice(f"Negative price on line {line}: {value!r}")

    if price > MAX_PRICE:
        raise InvalidPrice(f"Price too large on line {line}: {value!r}")

    # copy_abs turns "-0" into 0
    return price.copy_abs().quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_date(value: str, line: int) -> date:
    """Parse a date in strict YYYY-MM-DD format."""
    value = value.strip()
    # strptime alone would also accept single-digit months and days
    if not DATE_PATTERN.fullmatch(value):
        raise InvalidDate(f"Invalid date format on line {line}: {value!r}")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDate(f"Invalid date on line {line}: {value!r}")


def parse_text(value: str, name: str, line: int) -> str:
    if not value.strip():
        raise EmptyField(f"Empty {name} on line {line}")
    if len(value) > MAX_TEXT_LENGTH:
        raise FieldTooLong(
            f"{name.capitalize()} longer than {MAX_TEXT_LENGTH} characters on line {line}"
        )
    return value


def parse_row(row: list[str], line: int) -> PriceRecord:
    """
    Validate a single CSV row and convert it to a PriceRecord.

    Args:
        row: Row fields in import order.
        line: Line number of the row (1-based, header is line 1).

    Returns:
        The parsed record.

    Raises:
        InputError: A subclass describing the first problem found.
    """
    if len(row) != N_FIELDS:
        raise MalformedRow(expected=N_FIELDS, actual=len(row), line=line)

    id, product_name, category, price, created_at = row

    return PriceRecord(
        id=parse_id(id, line),
        product_name=parse_text(product_name, "product name", line),
        category=parse_text(category, "category", line),
        price=parse_price(price, line),
        created_at=parse_date(created_at, line),
    )


def parse_rows(rows: Iterable[tuple[int, list[str]]]) -> Iterator[PriceRecord]:
    """
    Lazily convert CSV rows to price records.

    The first row is a header and is skipped without validation. Empty
    lines are ignored. Validation stops at the first bad row: the error
    is raised to whoever is consuming the records.

    Args:
        rows: (line number, fields) pairs, see `number_rows`. Consumed once.

    Yields:
        Parsed price records, in file order.

    Raises:
        MissingHeader: If there are no rows at all.
        InputError: If any data row is invalid.
    """
    it = iter(rows)
    try:
        next(it)
    except StopIteration:
        raise MissingHeader("CSV file is empty, expected a header row")

    n_rows = 0
    for line, row in it:
        if not row:
            continue
        yield parse_row(row, line)
        n_rows += 1

    logger.debug(f"Parsed {n_rows} price records")


def number_rows(csv_reader) -> Iterator[tuple[int, list[str]]]:
    """Pair each CSV row with the physical line it starts on."""
    line = 1
    for row in csv_reader:
        yield line, row
        # quoted fields may span several lines
        line = csv_reader.line_num + 1


def read_csv(text: str) -> Iterator[PriceRecord]:
    """
    Parse the text of a price CSV file into price records.

    Args:
        text: Content of the CSV file.

    Yields:
        Parsed price records, in file order.
    """
    try:
        yield from parse_rows(number_rows(reader(StringIO(text, newline=""))))
    except CsvError as e:
        raise CorruptArchive(f"error reading CSV: {e}") from e
