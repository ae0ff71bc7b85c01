"""
Tests for the PostgreSQL database, using a fake asyncpg pool.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal

import pytest

from prices.config import DatabaseConfig
from prices.db.models import ImportStatistics, PriceRecord
from prices.db.psql import PostgresDatabase
from prices.errors import InvalidDate, PersistenceError


class FakeTransaction:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.conn.committed.update(self.conn.pending)
        else:
            self.conn.rolled_back = True
        self.conn.pending = {}
        return False


class FakeStatement:
    def __init__(self, conn, query):
        self.conn = conn
        self.query = query

    async def fetchval(self, id, product_name, category, price, created_at):
        if self.conn.fail_on == id:
            raise OSError("connection reset by peer")
        if id in self.conn.committed or id in self.conn.pending:
            return None
        self.conn.pending[id] = (product_name, category, price, created_at)
        return id


class FakeConnection:
    def __init__(self):
        self.committed = {}
        self.pending = {}
        self.rolled_back = False
        self.fail_on = None
        self.queries = []

    def transaction(self):
        return FakeTransaction(self)

    async def prepare(self, query):
        self.queries.append(query)
        return FakeStatement(self, query)

    async def fetchrow(self, query):
        rows = {**self.committed, **self.pending}
        return {
            "total_items": len(rows),
            "total_categories": len({r[1] for r in rows.values()}),
            "total_price": sum((r[2] for r in rows.values()), Decimal("0")),
        }

    async def fetch(self, query):
        if self.fail_on is not None:
            raise OSError("connection reset by peer")
        return [
            {
                "id": id,
                "product_name": name,
                "category": category,
                "price": price,
                "created_at": created_at,
            }
            for id, (name, category, price, created_at) in sorted(self.committed.items())
        ]


class FakePool:
    def __init__(self, conn):
        self.conn = conn

    @asynccontextmanager
    async def acquire(self):
        yield self.conn


@pytest.fixture
def conn():
    return FakeConnection()


@pytest.fixture
def pg(conn):
    db = PostgresDatabase(DatabaseConfig())
    db.pool = FakePool(conn)
    return db


def make_record(id: int, category: str = "Tools") -> PriceRecord:
    return PriceRecord(
        id=id,
        product_name="Widget",
        category=category,
        price=Decimal("2.50"),
        created_at=date(2024, 1, 1),
    )


def test_import_commits_and_returns_totals(pg, conn):
    stats = asyncio.run(pg.import_prices([make_record(1), make_record(2, "Food")]))

    assert stats == ImportStatistics(
        total_items=2, total_categories=2, total_price=Decimal("5.00")
    )
    assert set(conn.committed) == {1, 2}
    assert not conn.rolled_back
    assert "ON CONFLICT (id) DO NOTHING" in conn.queries[0]


def test_import_skips_existing_ids(pg, conn):
    asyncio.run(pg.import_prices([make_record(1)]))
    stats = asyncio.run(pg.import_prices([make_record(1, "Food"), make_record(2)]))

    assert stats.total_items == 2
    assert stats.total_categories == 1
    assert conn.committed[1][1] == "Tools"


def test_database_error_rolls_back(pg, conn):
    conn.fail_on = 2
    with pytest.raises(PersistenceError, match="connection reset"):
        asyncio.run(pg.import_prices([make_record(1), make_record(2)]))

    assert conn.rolled_back
    assert conn.committed == {}


def test_input_error_rolls_back_and_propagates(pg, conn):
    def records():
        yield make_record(1)
        raise InvalidDate("Invalid date format on line 3: 'x'")

    with pytest.raises(InvalidDate):
        asyncio.run(pg.import_prices(records()))

    assert conn.rolled_back
    assert conn.committed == {}


def test_export_returns_records(pg, conn):
    asyncio.run(pg.import_prices([make_record(3), make_record(1)]))
    records = asyncio.run(pg.export_prices())
    assert [r.id for r in records] == [1, 3]
    assert records[0] == make_record(1)


def test_export_error(pg, conn):
    conn.fail_on = 1
    with pytest.raises(PersistenceError):
        asyncio.run(pg.export_prices())


def test_pool_must_be_initialized():
    db = PostgresDatabase(DatabaseConfig())
    with pytest.raises(RuntimeError):
        asyncio.run(db.export_prices())
