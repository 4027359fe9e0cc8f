# lab_inventory/services/ledger.py
"""
Stock Ledger - checkout / return state machine.

Handles:
- Checkout: conditional decrement of quantity_available + OPEN loan record
- Return: OPEN -> CLOSED compare-and-set, capped restore, RETURN audit record
- Active loans (CHECKOUT + OPEN) and ledger history queries

Each operation is a single store transaction built from conditional UPDATEs,
so the guard and the write cannot be split by a concurrent request. Two
checkouts racing for the last unit end with one success and one
InsufficientStockError; the quantity never goes negative.
"""
from __future__ import annotations
import logging
from typing import List, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lab_inventory.database import transaction
from lab_inventory.db_models import (
    Item, Transaction, TransactionType, TransactionStatus
)
from lab_inventory.errors import (
    InsufficientStockError,
    ItemNotFoundError,
    LoanAlreadyClosedError,
    LoanNotFoundError,
    ReturnMismatchError,
)

logger = logging.getLogger(__name__)


class StockLedger:
    """Service for quantity movements on items, recorded as transactions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Checkout
    # =========================================================================

    async def checkout(
        self,
        item_id: int,
        quantity: int,
        user_name: str,
        project_name: str,
        notes: Optional[str] = None,
    ) -> Transaction:
        """
        Lend `quantity` units of an item.

        Returns:
            The new OPEN CHECKOUT transaction.

        Raises:
            ValueError: quantity is not positive.
            ItemNotFoundError: no such item.
            InsufficientStockError: fewer than `quantity` units available.
                Nothing is written in that case.
        """
        if quantity <= 0:
            raise ValueError("Checkout quantity must be positive")

        async with transaction(self.db):
            # Guard and decrement in one statement
            result = await self.db.execute(
                update(Item)
                .where(Item.id == item_id, Item.quantity_available >= quantity)
                .values(
                    quantity_available=Item.quantity_available - quantity,
                    updated_at=func.now(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                available = await self._available(item_id)
                logger.warning(
                    "Checkout rejected: item=%s requested=%s available=%s", item_id, quantity, available
                )
                raise InsufficientStockError(item_id, quantity, available)

            loan = Transaction(
                item_id=item_id,
                transaction_type=TransactionType.CHECKOUT,
                status=TransactionStatus.OPEN,
                quantity=quantity,
                user_name=user_name,
                project_name=project_name,
                notes=notes,
            )
            self.db.add(loan)
            await self.db.flush()
            await self.db.refresh(loan)

        logger.info("Checkout: loan=%s item=%s qty=%s user=%s", loan.id, item_id, quantity, user_name)
        return loan

    # =========================================================================
    # Return
    # =========================================================================

    async def return_loan(
        self,
        loan_id: int,
        item_id: Optional[int] = None,
        quantity: Optional[int] = None,
    ) -> Transaction:
        """
        Close an OPEN loan and put its quantity back on the shelf.

        The stored loan quantity is what gets restored. `item_id` and
        `quantity` are optional cross-checks from the caller; when given they
        must match the loan. Restored stock is capped at quantity_total.

        Returns:
            The closed loan transaction.

        Raises:
            LoanNotFoundError: no CHECKOUT with this id.
            LoanAlreadyClosedError: loan was already returned.
            ReturnMismatchError: item_id / quantity disagree with the loan.
            ItemNotFoundError: the loan's item is gone.
        """
        async with transaction(self.db):
            loan = await self.db.get(Transaction, loan_id)
            if loan is None or loan.transaction_type != TransactionType.CHECKOUT:
                raise LoanNotFoundError(loan_id)
            if item_id is not None and item_id != loan.item_id:
                raise ReturnMismatchError(
                    f"Loan {loan_id} belongs to item {loan.item_id}, not {item_id}"
                )
            if quantity is not None and quantity != loan.quantity:
                raise ReturnMismatchError(
                    f"Loan {loan_id} was for {loan.quantity} units, cannot return {quantity}; "
                    f"partial returns are not supported"
                )

            # OPEN -> CLOSED exactly once
            closed = await self.db.execute(
                update(Transaction)
                .where(
                    Transaction.id == loan_id,
                    Transaction.transaction_type == TransactionType.CHECKOUT,
                    Transaction.status == TransactionStatus.OPEN,
                )
                .values(status=TransactionStatus.CLOSED)
                .execution_options(synchronize_session=False)
            )
            if closed.rowcount != 1:
                raise LoanAlreadyClosedError(loan_id)

            restored = Item.quantity_available + loan.quantity
            result = await self.db.execute(
                update(Item)
                .where(Item.id == loan.item_id)
                .values(
                    quantity_available=case(
                        (restored > Item.quantity_total, Item.quantity_total),
                        else_=restored,
                    ),
                    updated_at=func.now(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ItemNotFoundError(loan.item_id)

            self.db.add(Transaction(
                item_id=loan.item_id,
                transaction_type=TransactionType.RETURN,
                status=TransactionStatus.CLOSED,
                quantity=loan.quantity,
                user_name=loan.user_name,
                project_name=loan.project_name,
                notes=f"Returned from loan {loan_id}",
            ))
            await self.db.flush()
            await self.db.refresh(loan)

        logger.info("Return: loan=%s item=%s qty=%s", loan_id, loan.item_id, loan.quantity)
        return loan

    # =========================================================================
    # Lookup
    # =========================================================================

    async def active_loans(self, item_id: Optional[int] = None) -> List[Transaction]:
        """Open checkouts, newest first."""
        stmt = select(Transaction).where(
            Transaction.transaction_type == TransactionType.CHECKOUT,
            Transaction.status == TransactionStatus.OPEN,
        )
        if item_id is not None:
            stmt = stmt.where(Transaction.item_id == item_id)
        stmt = (
            stmt.order_by(Transaction.timestamp.desc(), Transaction.id.desc())
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def list_transactions(
        self,
        transaction_type: Optional[TransactionType] = None,
        status: Optional[TransactionStatus] = None,
        item_id: Optional[int] = None,
        limit: int = 200,
    ) -> List[Transaction]:
        stmt = select(Transaction)
        if transaction_type is not None:
            stmt = stmt.where(Transaction.transaction_type == transaction_type)
        if status is not None:
            stmt = stmt.where(Transaction.status == status)
        if item_id is not None:
            stmt = stmt.where(Transaction.item_id == item_id)
        stmt = (
            stmt.order_by(Transaction.timestamp.desc(), Transaction.id.desc())
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def _available(self, item_id: int) -> int:
        result = await self.db.execute(
            select(Item.quantity_available).where(Item.id == item_id)
        )
        available = result.scalar_one_or_none()
        if available is None:
            raise ItemNotFoundError(item_id)
        return available
