# tests/conftest.py
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.pool import NullPool

# ============================================================
# Before importing the app: no log files, and a throwaway SQLite
# database for anything that reaches the global engine (/health)
# ============================================================
_TMP_ROOT = Path(tempfile.mkdtemp(prefix="lab-inventory-tests-"))
os.environ["LOG_TO_FILE"] = "0"
os.environ["LAB_DATA_ROOT"] = str(_TMP_ROOT)
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_ROOT / 'global.db'}"

from lab_inventory import db_models  # noqa: E402,F401
from lab_inventory.database import Base, build_engine, get_session, make_session_factory  # noqa: E402
from lab_inventory.db_models import Item, ItemType  # noqa: E402
from lab_inventory.main import app  # noqa: E402


# =========================================
# One SQLite file per test (NullPool: every session gets its own connection)
# =========================================
@pytest_asyncio.fixture(scope="function")
async def async_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine(f"sqlite:///{tmp_path / 'lab.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
def async_session_maker(async_engine: AsyncEngine):
    return make_session_factory(async_engine)


@pytest_asyncio.fixture(scope="function")
async def session(async_session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Standard session; rolled back if a test leaves it mid-transaction."""
    async with async_session_maker() as sess:
        try:
            yield sess
        finally:
            if sess.in_transaction():
                await sess.rollback()


@pytest.fixture
def make_item(async_session_maker):
    """Insert an item in its own committed session and return its id."""

    async def _make(**overrides) -> int:
        values = dict(
            sku="SKU-001",
            name="Oscilloscope",
            category="Electronics",
            type=ItemType.ASSET,
            location="Shelf A1",
            quantity_total=10,
            quantity_available=10,
            min_stock_threshold=2,
            unit_price=100,
        )
        values.update(overrides)
        async with async_session_maker() as s:
            item = Item(**values)
            s.add(item)
            await s.commit()
            return item.id

    return _make


# =========================================
# HTTP client; each request gets a fresh session on the test engine
# =========================================
@pytest_asyncio.fixture
async def client(async_session_maker) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def _dep():
        async with async_session_maker() as s:
            try:
                yield s
                await s.commit()
            except Exception:
                await s.rollback()
                raise

    app.dependency_overrides[get_session] = _dep
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_session, None)
