# lab_inventory/services/catalog.py
"""
Catalog Service - item CRUD and read models.

Handles:
- Item listing / lookup (by id, by scanned code)
- Manual create and edit with the quantity invariant enforced
- Bulk delete (transactions cascade in the store)
- Low-stock list and the stock summary
"""
from __future__ import annotations
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lab_inventory.database import transaction
from lab_inventory.db_models import Item, Transaction, TransactionType, TransactionStatus
from lab_inventory.errors import InvariantViolationError, ItemNotFoundError
from lab_inventory.models import ItemIn, ItemUpdate

logger = logging.getLogger(__name__)


def check_quantities(quantity_total: int, quantity_available: int) -> None:
    """Raise InvariantViolationError unless 0 <= available <= total."""
    if quantity_total < 0:
        raise InvariantViolationError("quantity_total cannot be negative")
    if quantity_available < 0:
        raise InvariantViolationError("quantity_available cannot be negative")
    if quantity_available > quantity_total:
        raise InvariantViolationError(
            f"quantity_available ({quantity_available}) cannot exceed quantity_total ({quantity_total})"
        )


class CatalogService:
    """Service for the item catalog."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Lookup
    # =========================================================================

    async def list_items(self) -> List[Item]:
        result = await self.db.execute(
            select(Item).order_by(Item.name, Item.id).execution_options(populate_existing=True)
        )
        return list(result.scalars())

    async def get_item(self, item_id: int) -> Item:
        item = await self.db.get(Item, item_id, populate_existing=True)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    async def find_by_code(self, code: str) -> Optional[Item]:
        """
        Resolve a scanned/typed code to an item.

        Exact SKU match (case-insensitive) first, then the first SKU that
        contains the code.
        """
        code = (code or "").strip().upper()
        if not code:
            return None

        stmt = select(Item).where(func.upper(Item.sku) == code).limit(1).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        item = result.scalar_one_or_none()
        if item is not None:
            return item

        stmt = (
            select(Item)
            .where(Item.sku.icontains(code, autoescape=True))
            .order_by(Item.sku)
            .execution_options(populate_existing=True)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def low_stock_items(self) -> List[Item]:
        """Items whose available quantity is below their threshold."""
        stmt = (
            select(Item)
            .where(Item.quantity_available < Item.min_stock_threshold)
            .order_by(Item.quantity_available, Item.name)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def stock_summary(self) -> Dict[str, Any]:
        item_count, total_value = (
            await self.db.execute(
                select(
                    func.count(Item.id),
                    func.coalesce(func.sum(Item.quantity_total * Item.unit_price), 0),
                )
            )
        ).one()

        active_loans, units_on_loan = (
            await self.db.execute(
                select(
                    func.count(Transaction.id),
                    func.coalesce(func.sum(Transaction.quantity), 0),
                ).where(
                    Transaction.transaction_type == TransactionType.CHECKOUT,
                    Transaction.status == TransactionStatus.OPEN,
                )
            )
        ).one()

        low_stock_count = (
            await self.db.execute(
                select(func.count(Item.id)).where(Item.quantity_available < Item.min_stock_threshold)
            )
        ).scalar_one()

        return {
            "item_count": int(item_count),
            "total_value": Decimal(str(total_value)),
            "units_on_loan": int(units_on_loan),
            "active_loans": int(active_loans),
            "low_stock_count": int(low_stock_count),
        }

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create_item(self, data: ItemIn) -> Item:
        check_quantities(data.quantity_total, data.quantity_available)
        item = Item(**data.model_dump())
        async with transaction(self.db):
            self.db.add(item)
            await self.db.flush()
            await self.db.refresh(item)
        logger.info("Created item %s (%s)", item.id, item.sku)
        return item

    async def update_item(self, item_id: int, data: ItemUpdate) -> Item:
        """
        Apply a partial edit.

        Quantities are checked against the merged row, so lowering
        quantity_total below what is on the shelf is refused rather than
        silently clamped.
        """
        changes = data.model_dump(exclude_unset=True)
        async with transaction(self.db):
            item = await self.get_item(item_id)
            check_quantities(
                changes.get("quantity_total", item.quantity_total),
                changes.get("quantity_available", item.quantity_available),
            )
            for key, value in changes.items():
                setattr(item, key, value)
            await self.db.flush()
            await self.db.refresh(item)
        logger.info("Updated item %s: %s", item_id, sorted(changes))
        return item

    async def delete_items(self, item_ids: Sequence[int]) -> int:
        """Delete items by id; returns how many existed."""
        ids = list(dict.fromkeys(item_ids))
        if not ids:
            return 0
        async with transaction(self.db):
            result = await self.db.execute(
                delete(Item)
                .where(Item.id.in_(ids))
                .execution_options(synchronize_session=False)
            )
        logger.info("Deleted %d items", result.rowcount)
        return result.rowcount
