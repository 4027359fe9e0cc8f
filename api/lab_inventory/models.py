from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Literal
from pydantic import BaseModel, ConfigDict, Field, model_validator

from lab_inventory.db_models import (
    ItemType, TransactionType, TransactionStatus, MAX_QUANTITY, MAX_UNIT_PRICE
)

# ---------- items ----------

class ItemFields(BaseModel):
    name: str = Field(min_length=1)
    sku: str = Field(min_length=1)
    category: str = "Uncategorized"
    type: ItemType = ItemType.CONSUMABLE
    location: str = "Unassigned"
    quantity_total: int = Field(default=0, ge=0, le=MAX_QUANTITY)
    quantity_available: int = Field(default=0, ge=0, le=MAX_QUANTITY)
    min_stock_threshold: int = Field(default=0, ge=0, le=MAX_QUANTITY)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0, le=MAX_UNIT_PRICE)
    notes: Optional[str] = None

class ItemIn(ItemFields):
    @model_validator(mode="after")
    def _available_within_total(self) -> "ItemIn":
        if self.quantity_available > self.quantity_total:
            raise ValueError("quantity_available cannot exceed quantity_total")
        return self

class ItemUpdate(BaseModel):
    """Partial edit; the invariant is checked against the stored row."""
    name: Optional[str] = Field(default=None, min_length=1)
    sku: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    type: Optional[ItemType] = None
    location: Optional[str] = None
    quantity_total: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    quantity_available: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    min_stock_threshold: Optional[int] = Field(default=None, ge=0, le=MAX_QUANTITY)
    unit_price: Optional[Decimal] = Field(default=None, ge=0, le=MAX_UNIT_PRICE)
    notes: Optional[str] = None

class ItemOut(ItemFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ItemIdsIn(BaseModel):
    ids: List[int] = Field(default_factory=list)

class StockSummaryOut(BaseModel):
    item_count: int
    total_value: Decimal
    units_on_loan: int
    active_loans: int
    low_stock_count: int

# ---------- ledger ----------

class CheckoutIn(BaseModel):
    item_id: int
    quantity: int = Field(gt=0, le=MAX_QUANTITY)
    user_name: str = Field(min_length=1)
    project_name: str = Field(min_length=1)
    notes: Optional[str] = None

class ReturnIn(BaseModel):
    item_id: Optional[int] = None
    quantity: Optional[int] = Field(default=None, gt=0)

class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    transaction_type: TransactionType
    quantity: int
    user_name: str
    project_name: str
    notes: Optional[str] = None
    status: TransactionStatus
    timestamp: Optional[datetime] = None

# ---------- imports ----------

class ImportRow(BaseModel):
    """One normalized + validated spreadsheet line. Never persisted as-is."""
    row_index: int = 0
    name: str = ""
    sku: str = ""
    category: str = "Uncategorized"
    type: ItemType = ItemType.CONSUMABLE
    location: str = "Unassigned"
    quantity_total: int = 0
    quantity_available: int = 0
    min_stock_threshold: int = 0
    unit_price: Decimal = Decimal("0")
    notes: Optional[str] = None
    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)

    def item_values(self) -> dict:
        """Column values for the items table."""
        return self.model_dump(exclude={"row_index", "is_valid", "errors"})

class ImportPreviewOut(BaseModel):
    filename: str
    total_rows: int
    valid_rows: int
    invalid_rows: int
    rows: List[ImportRow]

class ImportApplyIn(BaseModel):
    rows: List[ImportRow] = Field(default_factory=list)

class ImportApplyOut(BaseModel):
    imported: int
    skipped_invalid: int

TemplateFormat = Literal["xlsx", "csv"]
