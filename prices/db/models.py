from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class PriceRecord:
    id: int
    product_name: str
    category: str
    price: Decimal
    created_at: date


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportStatistics:
    """Store-wide totals computed after an import."""

    total_items: int
    total_categories: int
    total_price: Decimal
