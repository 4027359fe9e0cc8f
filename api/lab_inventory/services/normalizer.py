# lab_inventory/services/normalizer.py
"""
Spreadsheet header normalization.

Maps whatever column headers a user's sheet carries onto the canonical item
field names. Unknown columns are dropped, never reported.
"""
from __future__ import annotations
import re
import unicodedata
from typing import Any, Dict, Mapping

CANONICAL_FIELDS = (
    "name",
    "sku",
    "category",
    "type",
    "location",
    "quantity_total",
    "quantity_available",
    "min_stock_threshold",
    "unit_price",
    "notes",
)

# normalized header -> canonical field
COLUMN_ALIASES: Dict[str, str] = {
    "name": "name",
    "item_name": "name",
    "item": "name",
    "nazov": "name",
    "sku": "sku",
    "sku_code": "sku",
    "item_sku": "sku",
    "category": "category",
    "kategoria": "category",
    "type": "type",
    "item_type": "type",
    "location": "location",
    "umiestnenie": "location",
    # common typos / variations
    "quantitiy_total": "quantity_total",
    "quantitiy_available": "quantity_available",
    "quantity_total": "quantity_total",
    "qty_total": "quantity_total",
    "total_qty": "quantity_total",
    "total": "quantity_total",
    "quantity": "quantity_total",
    "qty": "quantity_total",
    "mnozstvo": "quantity_total",
    "quantity_available": "quantity_available",
    "qty_available": "quantity_available",
    "available_qty": "quantity_available",
    "available": "quantity_available",
    "min_stock_threshold": "min_stock_threshold",
    "min_stock": "min_stock_threshold",
    "threshold": "min_stock_threshold",
    "reorder_level": "min_stock_threshold",
    "unit_price": "unit_price",
    "price": "unit_price",
    "cost": "unit_price",
    "cena": "unit_price",
    "notes": "notes",
    "description": "notes",
    "poznamka": "notes",
}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _fold_ascii(s: str) -> str:
    return unicodedata.normalize("NFKD", s).encode("ascii", "ignore").decode("ascii")


def normalize_header(header: Any) -> str:
    """'  Qty. Available ' -> 'qty_available', 'Množstvo' -> 'mnozstvo'."""
    s = _fold_ascii(str(header if header is not None else "")).lower().strip()
    return _NON_ALNUM.sub("_", s).strip("_")


def canonical_field(header: Any) -> str | None:
    return COLUMN_ALIASES.get(normalize_header(header))


def normalize_row(raw: Mapping[Any, Any]) -> Dict[str, Any]:
    """Re-key one raw row by canonical field; right-most duplicate column wins."""
    mapped: Dict[str, Any] = {}
    for key, value in raw.items():
        field = canonical_field(key)
        if field:
            mapped[field] = value
    return mapped
