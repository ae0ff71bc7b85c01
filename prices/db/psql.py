from contextlib import asynccontextmanager
import asyncpg
from typing import AsyncIterator, Iterable
import logging
import os

from prices.config import DatabaseConfig
from prices.errors import PersistenceError
from .base import Database
from .models import ImportStatistics, PriceRecord

# Exceptions raised by asyncpg or the network layer underneath it
DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


class PostgresDatabase(Database):
    """PostgreSQL implementation of the database interface using asyncpg."""

    def __init__(self, config: DatabaseConfig):
        """Initialize the PostgreSQL database connection pool.

        Args:
            config: Connection settings, including pool size limits
        """
        self.config = config
        self.pool = None
        self.logger = logging.getLogger(__name__)

    async def connect(self) -> None:
        try:
            self.pool = await asyncpg.create_pool(
                dsn=self.config.dsn,
                min_size=self.config.min_connections,
                max_size=self.config.max_connections,
            )
        except DB_ERRORS as e:
            raise PersistenceError(f"connection error: {e}") from e

    @asynccontextmanager
    async def _get_conn(self) -> AsyncIterator[asyncpg.Connection]:
        """Context manager to acquire a connection from the pool."""
        if not self.pool:
            raise RuntimeError("Database pool is not initialized")
        async with self.pool.acquire() as conn:
            yield conn

    @asynccontextmanager
    async def _atomic(self) -> AsyncIterator[asyncpg.Connection]:
        """Context manager for atomic transactions."""
        async with self._get_conn() as conn:
            async with conn.transaction():
                yield conn

    async def close(self) -> None:
        """Close all database connections."""
        if self.pool:
            await self.pool.close()

    async def create_tables(self) -> None:
        schema_path = os.path.join(os.path.dirname(__file__), "psql.sql")

        try:
            with open(schema_path, "r") as f:
                schema_sql = f.read()

            async with self._get_conn() as conn:
                await conn.execute(schema_sql)
                self.logger.info("Database tables created successfully")
        except Exception as e:
            self.logger.error(f"Error creating tables: {e}")
            raise

    async def import_prices(self, records: Iterable[PriceRecord]) -> ImportStatistics:
        try:
            async with self._atomic() as conn:
                stmt = await conn.prepare(
                    """
                    INSERT INTO prices (id, product_name, category, price, created_at)
                    VALUES ($1, $2, $3, $4, $5)
                    ON CONFLICT (id) DO NOTHING
                    RETURNING id
                    """
                )

                n_total = 0
                n_inserted = 0
                for record in records:
                    inserted_id = await stmt.fetchval(
                        record.id,
                        record.product_name,
                        record.category,
                        record.price,
                        record.created_at,
                    )
                    n_total += 1
                    if inserted_id is not None:
                        n_inserted += 1

                row = await conn.fetchrow(
                    """
                    SELECT
                        COUNT(*) AS total_items,
                        COUNT(DISTINCT category) AS total_categories,
                        COALESCE(SUM(price), 0) AS total_price
                    FROM prices
                    """
                )
        except DB_ERRORS as e:
            raise PersistenceError(f"import failed: {e}") from e

        self.logger.debug(
            f"Inserted {n_inserted} new prices out of {n_total} records"
        )
        return ImportStatistics(**row)  # type: ignore

    async def export_prices(self) -> list[PriceRecord]:
        try:
            async with self._get_conn() as conn:
                rows = await conn.fetch(
                    """
                    SELECT id, product_name, category, price, created_at
                    FROM prices
                    ORDER BY id
                    """
                )
        except DB_ERRORS as e:
            raise PersistenceError(f"query failed: {e}") from e

        return [PriceRecord(**row) for row in rows]  # type: ignore
