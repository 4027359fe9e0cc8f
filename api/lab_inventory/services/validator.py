# lab_inventory/services/validator.py
"""
Business rules for one normalized import row.

validate_row() is total: every input, including an empty dict, yields an
ImportRow. Problems are collected on ImportRow.errors instead of raised, so a
whole sheet can be reviewed at once.
"""
from __future__ import annotations
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional

from lab_inventory.db_models import ItemType, MAX_QUANTITY, MAX_UNIT_PRICE
from lab_inventory.models import ImportRow

DEFAULT_CATEGORY = "Uncategorized"
DEFAULT_LOCATION = "Unassigned"
VALID_TYPES = {t.value for t in ItemType}

_PLACEHOLDER = re.compile(r"^[-–—]+$")
_SLUG_BREAK = re.compile(r"[^A-Z0-9]+")
_THOUSANDS_COMMA = re.compile(r",\d{3}(?!\d)")


def sanitize_text(value: Any) -> str:
    """Trim; spreadsheet blanks like '-' or '—' become ''."""
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            # Excel hands numeric SKUs back as floats
            value = int(value)
    text = str(value).strip()
    if not text or _PLACEHOLDER.match(text):
        return ""
    return text


def _comma_is_ambiguous(s: str) -> bool:
    # "1,000" and "1.234,5" read as thousands grouping, not a decimal comma
    return "," in s and ("." in s or _THOUSANDS_COMMA.search(s) is not None)


def is_ambiguous_number(value: Any) -> bool:
    """True for text like '1,000' whose meaning depends on the sheet's locale."""
    if not isinstance(value, str):
        return False
    return _comma_is_ambiguous(value.strip().replace(" ", ""))


def parse_number(value: Any, fallback: Decimal) -> Decimal:
    """Permissive numeric parse; anything unusable or ambiguous yields the fallback."""
    if value is None:
        return fallback
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, (int, Decimal)):
        num = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            return fallback
        num = Decimal(str(value))
    else:
        s = str(value).strip().replace(" ", "")
        if not s or _comma_is_ambiguous(s):
            return fallback
        s = s.replace(",", ".")
        try:
            num = Decimal(s)
        except InvalidOperation:
            return fallback
    return num if num.is_finite() else fallback


def make_auto_sku(name: str, index: int) -> str:
    base = _SLUG_BREAK.sub("-", (name or "ITEM").upper()).strip("-") or "ITEM"
    return f"AUTO-{base}-{index + 1:04d}"


def _number(raw: Mapping[str, Any], field: str, label: str, fallback: Decimal, errors: List[str]) -> Decimal:
    value = raw.get(field)
    if is_ambiguous_number(value):
        errors.append(f"{label} is ambiguous, use plain digits")
    return parse_number(value, fallback)


def _count(num: Decimal, label: str, errors: List[str]) -> int:
    if abs(num) > MAX_QUANTITY:
        errors.append(f"{label} is out of range")
        return 0
    if num != num.to_integral_value():
        errors.append(f"{label} must be a whole number")
    return int(num)


def validate_row(raw: Mapping[str, Any], index: int) -> ImportRow:
    """Turn a normalized row at 0-based position `index` into an ImportRow."""
    errors: List[str] = []

    name = sanitize_text(raw.get("name"))
    category = sanitize_text(raw.get("category")) or DEFAULT_CATEGORY
    location = sanitize_text(raw.get("location")) or DEFAULT_LOCATION
    sku = sanitize_text(raw.get("sku")) or make_auto_sku(name, index)

    # Required fields
    if not name:
        errors.append("Name required")
    if not sku:
        errors.append("SKU required")

    # Type validation
    raw_type = sanitize_text(raw.get("type")).upper()
    item_type = ItemType.CONSUMABLE
    if raw_type in VALID_TYPES:
        item_type = ItemType(raw_type)
    elif raw_type:
        errors.append("Type must be ASSET or CONSUMABLE")

    # Numeric validations
    quantity_total = _count(_number(raw, "quantity_total", "Qty total", Decimal(0), errors), "Qty total", errors)
    quantity_available = _count(
        _number(raw, "quantity_available", "Qty available", Decimal(quantity_total), errors), "Qty available", errors
    )
    min_stock_threshold = _count(
        _number(raw, "min_stock_threshold", "Min stock", Decimal(0), errors), "Min stock", errors
    )
    unit_price = _number(raw, "unit_price", "Price", Decimal(0), errors)

    if quantity_total < 0:
        errors.append("Qty total cannot be negative")
    if quantity_available < 0:
        errors.append("Qty available cannot be negative")
    if quantity_available > quantity_total:
        errors.append("Qty available exceeds total")
    if min_stock_threshold < 0:
        errors.append("Min stock cannot be negative")
    if unit_price < 0:
        errors.append("Price cannot be negative")
    elif unit_price > MAX_UNIT_PRICE:
        errors.append("Price is out of range")

    notes: Optional[str] = sanitize_text(raw.get("notes")) or None

    return ImportRow(
        row_index=index,
        name=name,
        sku=sku,
        category=category,
        type=item_type,
        location=location,
        quantity_total=quantity_total,
        quantity_available=min(quantity_available, quantity_total),
        min_stock_threshold=min_stock_threshold,
        unit_price=unit_price,
        notes=notes,
        is_valid=not errors,
        errors=errors,
    )


def revalidate(row: ImportRow) -> ImportRow:
    """Run a row that came back from review through the rules again."""
    raw = row.model_dump(mode="json", exclude={"row_index", "is_valid", "errors"})
    return validate_row(raw, row.row_index)
