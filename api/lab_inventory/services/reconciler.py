# lab_inventory/services/reconciler.py
"""
Import Reconciler - applies reviewed import rows to the catalog.

A batch is written with INSERT ... ON CONFLICT (sku) DO UPDATE inside one
transaction: either every row lands or none does.
"""
from __future__ import annotations
import logging
from typing import Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lab_inventory.database import transaction
from lab_inventory.db_models import Item
from lab_inventory.errors import ImportFailedError
from lab_inventory.models import ImportRow

logger = logging.getLogger(__name__)

# Fields an import may overwrite on an existing item
UPSERT_FIELDS = (
    "name",
    "category",
    "type",
    "location",
    "quantity_total",
    "quantity_available",
    "min_stock_threshold",
    "unit_price",
    "notes",
)

# Rows per statement; keeps SQLite under its bound-parameter limit
UPSERT_CHUNK_SIZE = 500

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dedupe_by_sku(rows: Iterable[ImportRow]) -> List[ImportRow]:
    """Keep only the last row per SKU."""
    by_sku: Dict[str, ImportRow] = {}
    for row in rows:
        by_sku[row.sku] = row
    return list(by_sku.values())


class ImportReconciler:
    """Upserts validated import rows into the items table, keyed by SKU."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise ImportFailedError(f"Upsert is not supported on '{dialect}' databases") from None

    async def apply(self, rows: Iterable[ImportRow]) -> int:
        """
        Upsert rows by SKU (last duplicate wins).

        The caller is expected to pass only rows with is_valid=True.

        Returns:
            Number of rows written after deduplication.

        Raises:
            ImportFailedError: the store rejected the batch; nothing was written.
        """
        rows = list(rows)
        batch = dedupe_by_sku(rows)
        if not batch:
            return 0

        insert = self._insert()
        try:
            async with transaction(self.db):
                for start in range(0, len(batch), UPSERT_CHUNK_SIZE):
                    chunk = batch[start:start + UPSERT_CHUNK_SIZE]
                    await self.db.execute(self._upsert_statement(insert, chunk))
        except SQLAlchemyError as e:
            logger.error("Import of %d rows failed: %s", len(batch), e)
            raise ImportFailedError(f"Import failed: {e}") from e

        logger.info("Imported %d items (%d duplicate rows dropped)", len(batch), len(rows) - len(batch))
        return len(batch)

    @staticmethod
    def _upsert_statement(insert, chunk: List[ImportRow]):
        stmt = insert(Item).values([row.item_values() for row in chunk])
        return stmt.on_conflict_do_update(
            index_elements=[Item.sku],
            set_={
                **{name: stmt.excluded[name] for name in UPSERT_FIELDS},
                "updated_at": func.now(),
            },
        )
