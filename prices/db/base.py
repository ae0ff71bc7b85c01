from abc import ABC, abstractmethod
from typing import Iterable, TYPE_CHECKING

from .models import ImportStatistics, PriceRecord

if TYPE_CHECKING:
    from prices.config import DatabaseConfig


class Database(ABC):
    """Base abstract class for database implementations."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the database connection."""
        pass

    @abstractmethod
    async def create_tables(self) -> None:
        """Create all necessary tables and indices if they don't exist."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close all database connections."""
        pass

    @abstractmethod
    async def import_prices(self, records: Iterable[PriceRecord]) -> ImportStatistics:
        """
        Insert price records in a single transaction and compute totals.

        Records whose id already exists are skipped without update, so
        the stored row always wins over the incoming one. The iterable
        is consumed inside the transaction: if it raises, nothing from
        this call is committed and the exception propagates.

        Args:
            records: Price records to insert, consumed once.

        Returns:
            Item count, distinct category count and price sum over the
            whole table after the import.

        Raises:
            PersistenceError: If the database fails; the transaction is
                rolled back.
        """
        pass

    @abstractmethod
    async def export_prices(self) -> list[PriceRecord]:
        """
        Get all stored price records, ordered by id.

        Returns:
            A list of PriceRecord objects.

        Raises:
            PersistenceError: If the query fails.
        """
        pass

    @staticmethod
    def from_config(config: "DatabaseConfig") -> "Database":
        """
        Get the database instance for the given configuration.

        Returns:
            An instance of the Database subclass for `config.backend`.

        Raises:
            ValueError: If the database type is not supported.
        """

        if config.backend == "postgresql":
            from prices.db.psql import PostgresDatabase

            return PostgresDatabase(config)
        elif config.backend == "memory":
            from prices.db.memory import MemoryDatabase

            return MemoryDatabase()
        else:
            raise ValueError(f"Unsupported database: {config.backend}")
