# lab_inventory/errors.py
"""
Domain errors raised by the catalog, ledger and import services.

Row validation defects are never raised; they travel as data on ImportRow.
"""
from __future__ import annotations


class InventoryError(Exception):
    """Base class for all domain errors."""


class ItemNotFoundError(InventoryError):
    """Item does not exist."""

    def __init__(self, item_id: int):
        super().__init__(f"Item {item_id} not found")
        self.item_id = item_id


class InsufficientStockError(InventoryError):
    """Checkout asks for more than is available."""

    def __init__(self, item_id: int, requested: int, available: int):
        super().__init__(
            f"Not enough quantity available for item {item_id}: "
            f"requested {requested}, available {available}"
        )
        self.item_id = item_id
        self.requested = requested
        self.available = available


class LoanNotFoundError(InventoryError):
    """No CHECKOUT transaction with this id."""

    def __init__(self, loan_id: int):
        super().__init__(f"Loan {loan_id} not found")
        self.loan_id = loan_id


class LoanAlreadyClosedError(InventoryError):
    """The loan was returned already."""

    def __init__(self, loan_id: int):
        super().__init__(f"Loan {loan_id} is already closed")
        self.loan_id = loan_id


class ReturnMismatchError(InventoryError):
    """Return request disagrees with the stored loan."""


class InvariantViolationError(InventoryError, ValueError):
    """Edit would break 0 <= quantity_available <= quantity_total."""


class ImportParseError(InventoryError):
    """Uploaded file is not a readable spreadsheet."""


class ImportFailedError(InventoryError):
    """Store rejected the import batch; nothing was written."""
