# lab_inventory/routers/transactions.py
"""
Transactions Router - ledger history with type/status/item filters.
"""
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lab_inventory.database import get_session
from lab_inventory.db_models import TransactionStatus, TransactionType
from lab_inventory.models import TransactionOut
from lab_inventory.services.ledger import StockLedger

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=List[TransactionOut])
async def list_transactions(
    transaction_type: Optional[TransactionType] = None,
    status: Optional[TransactionStatus] = None,
    item_id: Optional[int] = None,
    limit: int = Query(default=200, ge=1, le=1000),
    db: AsyncSession = Depends(get_session),
):
    return await StockLedger(db).list_transactions(
        transaction_type=transaction_type,
        status=status,
        item_id=item_id,
        limit=limit,
    )
