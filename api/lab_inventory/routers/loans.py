# lab_inventory/routers/loans.py
"""
Loans Router - checkout, return and the active-loan view.
"""
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from lab_inventory.database import get_session
from lab_inventory.errors import (
    InsufficientStockError,
    ItemNotFoundError,
    LoanAlreadyClosedError,
    LoanNotFoundError,
    ReturnMismatchError,
)
from lab_inventory.models import CheckoutIn, ReturnIn, TransactionOut
from lab_inventory.services.ledger import StockLedger

router = APIRouter(prefix="/loans", tags=["Loans"])


@router.get("/active", response_model=List[TransactionOut])
async def active_loans(item_id: Optional[int] = None, db: AsyncSession = Depends(get_session)):
    """CHECKOUT transactions still OPEN, newest first."""
    return await StockLedger(db).active_loans(item_id=item_id)


@router.post("/checkout", response_model=TransactionOut, status_code=201)
async def checkout(request: CheckoutIn, db: AsyncSession = Depends(get_session)):
    try:
        return await StockLedger(db).checkout(
            item_id=request.item_id,
            quantity=request.quantity,
            user_name=request.user_name,
            project_name=request.project_name,
            notes=request.notes,
        )
    except ItemNotFoundError as e:
        raise HTTPException(404, detail=str(e))
    except InsufficientStockError as e:
        raise HTTPException(409, detail=str(e))


@router.post("/{loan_id}/return", response_model=TransactionOut)
async def return_loan(
    loan_id: int,
    request: Optional[ReturnIn] = Body(default=None),
    db: AsyncSession = Depends(get_session),
):
    """Close the loan and restore its quantity (capped at quantity_total)."""
    request = request or ReturnIn()
    try:
        return await StockLedger(db).return_loan(
            loan_id,
            item_id=request.item_id,
            quantity=request.quantity,
        )
    except (LoanNotFoundError, ItemNotFoundError) as e:
        raise HTTPException(404, detail=str(e))
    except (LoanAlreadyClosedError, ReturnMismatchError) as e:
        raise HTTPException(409, detail=str(e))
