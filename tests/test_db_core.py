# tests/test_db_core.py
import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from lab_inventory.database import normalize_async_url, transaction


@pytest.mark.parametrize(
    "url, expected",
    [
        ("sqlite:///./lab.db", "sqlite+aiosqlite:///./lab.db"),
        ("postgres://u:p@db/lab", "postgresql+asyncpg://u:p@db/lab"),
        ("postgresql://u:p@db/lab", "postgresql+asyncpg://u:p@db/lab"),
        ("postgresql+asyncpg://u:p@db/lab", "postgresql+asyncpg://u:p@db/lab"),
        ('"sqlite:///x.db"', "sqlite+aiosqlite:///x.db"),
    ],
)
def test_normalize_async_url(url, expected):
    assert normalize_async_url(url) == expected


@pytest.mark.asyncio
async def test_check_constraints_guard_stock(session, make_item):
    item_id = await make_item(quantity_total=2, quantity_available=2)
    with pytest.raises(IntegrityError):
        async with transaction(session):
            await session.execute(
                text("UPDATE items SET quantity_available = 3 WHERE id = :id"), {"id": item_id}
            )


@pytest.mark.asyncio
async def test_foreign_keys_are_enforced(session):
    with pytest.raises(IntegrityError):
        async with transaction(session):
            await session.execute(
                text(
                    "INSERT INTO transactions (item_id, transaction_type, quantity, user_name, "
                    "project_name, status, timestamp) "
                    "VALUES (42, 'RETURN', 1, 'a', 'p', 'CLOSED', CURRENT_TIMESTAMP)"
                )
            )


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error(session, make_item):
    item_id = await make_item(name="Before")
    with pytest.raises(RuntimeError):
        async with transaction(session):
            await session.execute(
                text("UPDATE items SET name = 'After' WHERE id = :id"), {"id": item_id}
            )
            raise RuntimeError("boom")

    name = (
        await session.execute(text("SELECT name FROM items WHERE id = :id"), {"id": item_id})
    ).scalar_one()
    assert name == "Before"
