# lab_inventory/db_models.py
"""
SQLAlchemy ORM Models for Lab Inventory.

Two tables: the item catalog and the append-only transaction ledger.
"""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
import enum

from sqlalchemy import (
    String, Integer, BigInteger, Text, DateTime,
    Numeric, ForeignKey, Index, CheckConstraint,
    Enum as SQLEnum, func
)
from sqlalchemy.orm import (
    Mapped, mapped_column, relationship
)

from lab_inventory.database import Base

# SQLite only auto-increments INTEGER PRIMARY KEY columns
Id = BigInteger().with_variant(Integer(), "sqlite")

# Largest values the quantity (Integer) and unit_price (Numeric(12, 2)) columns hold
MAX_QUANTITY = 2**31 - 1
MAX_UNIT_PRICE = Decimal("9999999999.99")

# ============================================================================
# ENUMS
# ============================================================================

class ItemType(str, enum.Enum):
    ASSET = "ASSET"
    CONSUMABLE = "CONSUMABLE"


class TransactionType(str, enum.Enum):
    CHECKOUT = "CHECKOUT"
    RETURN = "RETURN"
    ADJUSTMENT = "ADJUSTMENT"
    RESTOCK = "RESTOCK"


class TransactionStatus(str, enum.Enum):
    OPEN = "OPEN"
    CLOSED = "CLOSED"


# ============================================================================
# MIXIN for updated_at
# ============================================================================

class TimestampMixin:
    """Mixin for created_at and updated_at columns."""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


# ============================================================================
# 1. ITEMS
# ============================================================================

class Item(TimestampMixin, Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Id, primary_key=True)
    sku: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    category: Mapped[str] = mapped_column(String(255), default="Uncategorized", nullable=False)
    type: Mapped[ItemType] = mapped_column(
        SQLEnum(ItemType, name="item_type"),
        default=ItemType.CONSUMABLE,
        nullable=False
    )
    location: Mapped[str] = mapped_column(String(255), default="Unassigned", nullable=False)
    quantity_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    quantity_available: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    min_stock_threshold: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    transactions: Mapped[List["Transaction"]] = relationship(
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("quantity_total >= 0", name="chk_items_total_non_negative"),
        CheckConstraint("quantity_available >= 0", name="chk_items_available_non_negative"),
        CheckConstraint("quantity_available <= quantity_total", name="chk_items_available_within_total"),
        CheckConstraint("min_stock_threshold >= 0", name="chk_items_threshold_non_negative"),
        CheckConstraint("unit_price >= 0", name="chk_items_price_non_negative"),
        Index("idx_items_name", "name"),
        Index("idx_items_category", "category"),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_available < self.min_stock_threshold


# ============================================================================
# 2. TRANSACTIONS (append-only ledger)
# ============================================================================

class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Id, primary_key=True)
    item_id: Mapped[int] = mapped_column(Id, ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(
        SQLEnum(TransactionType, name="transaction_type"),
        nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[TransactionStatus] = mapped_column(
        SQLEnum(TransactionStatus, name="transaction_status"),
        default=TransactionStatus.CLOSED,
        nullable=False
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=func.now(), nullable=False)

    # Relationships
    item: Mapped["Item"] = relationship(back_populates="transactions")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_transactions_quantity_positive"),
        # Only checkouts are ever OPEN
        CheckConstraint(
            "status = 'CLOSED' OR transaction_type = 'CHECKOUT'",
            name="chk_transactions_open_only_checkout"
        ),
        Index("idx_transactions_item", "item_id"),
        Index("idx_transactions_type_status", "transaction_type", "status"),
        Index("idx_transactions_timestamp", "timestamp"),
    )
