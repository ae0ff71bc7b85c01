"""
Pytest configuration and fixtures for the prices API tests.
"""

import io
import os
import zipfile

# Must be set before the application (and its database singleton) is imported
os.environ["DB_BACKEND"] = "memory"

import pytest
from hypothesis import settings, Verbosity

from prices.db.memory import MemoryDatabase

settings.register_profile("fast", max_examples=25, deadline=None, verbosity=Verbosity.quiet)
settings.register_profile("thorough", max_examples=200, deadline=None, verbosity=Verbosity.normal)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fast"))

HEADER = "id,product_name,category,price,created_at\n"

EXAMPLE_CSV = (
    HEADER
    + "1,Widget,Tools,9.5,2024-01-01\n"
    + "2,Gadget,Tools,19.99,2024-01-02\n"
)


def build_zip(entries: list[tuple[str, str]]) -> bytes:
    """Build a zip archive from (name, text) pairs, in the given order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, text in entries:
            zf.writestr(name, text)
    return buffer.getvalue()


@pytest.fixture
def make_zip():
    """Factory for zip archives holding a single CSV (or custom entries)."""

    def _make_zip(text: str = EXAMPLE_CSV, name: str = "data.csv") -> bytes:
        return build_zip([(name, text)])

    return _make_zip


@pytest.fixture
def db():
    """Fresh in-memory database for each test."""
    return MemoryDatabase()


@pytest.fixture
def client(db, monkeypatch):
    """Test client for the API, backed by the per-test in-memory database."""
    from fastapi.testclient import TestClient

    from prices.main import app
    from prices.routers import v0

    monkeypatch.setattr(v0, "db", db)
    return TestClient(app)
