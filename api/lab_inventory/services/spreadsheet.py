# -*- coding: utf-8 -*-
"""
Spreadsheet decoding for item imports.

Reads CSV / XLSX / XLS uploads (first sheet, first row = headers) into plain
header -> cell dicts, and runs them through the normalizer and validator.
Also builds the downloadable import template.

Supported input:
  .csv            utf-8 (BOM ok), cp1250 fallback; ';' ',' or TAB delimited
  .xlsx / .xlsm   via openpyxl
  .xls            via xlrd
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from lab_inventory.errors import ImportParseError
from lab_inventory.models import ImportRow
from lab_inventory.services.normalizer import CANONICAL_FIELDS, normalize_row
from lab_inventory.services.validator import validate_row

logger = logging.getLogger(__name__)

CSV_SUFFIXES = {".csv", ".txt"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}

TEMPLATE_ROW: Dict[str, Any] = {
    "name": "Example Item",
    "sku": "SKU-001",
    "category": "Electronics",
    "type": "ASSET",
    "location": "Shelf A1",
    "quantity_total": 10,
    "quantity_available": 8,
    "min_stock_threshold": 2,
    "unit_price": 99.99,
    "notes": "Optional notes",
}

TEMPLATE_MEDIA_TYPES = {
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv",
}


def _decode_bytes_auto(b: bytes) -> str:
    try:
        return b.decode("utf-8-sig")
    except UnicodeDecodeError:
        try:
            return b.decode("cp1250")
        except UnicodeDecodeError:
            return b.decode("utf-8", errors="ignore")


def _detect_delimiter(line: str) -> str:
    counts = {';': line.count(';'), '\t': line.count('\t'), ',': line.count(',')}
    delim = max(counts, key=lambda k: counts[k])
    return delim if counts[delim] > 0 else ','


def _read_frame(filename: str, content: bytes) -> pd.DataFrame:
    suffix = Path(filename or "").suffix.lower()

    if suffix in CSV_SUFFIXES:
        text = _decode_bytes_auto(content)
        first_line = next((ln for ln in text.splitlines() if ln.strip()), "")
        if not first_line:
            raise ImportParseError("File is empty")
        return pd.read_csv(
            io.StringIO(text),
            sep=_detect_delimiter(first_line),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )

    if suffix in EXCEL_SUFFIXES:
        # sheet_name=0 -> first sheet only
        return pd.read_excel(io.BytesIO(content), sheet_name=0, header=None)

    raise ImportParseError(f"Unsupported file type '{suffix or filename}'. Use CSV, XLSX or XLS.")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    # First row holds the headers; a repeated header keeps its right-most cell
    values = df.astype(object).where(pd.notna(df), None).values.tolist()
    if not values:
        return []
    headers, body = values[0], values[1:]
    records = []
    for cells in body:
        record: Dict[str, Any] = {}
        for header, cell in zip(headers, cells):
            record.pop(header, None)
            record[header] = cell
        records.append(record)
    return records


def read_rows(filename: str, content: bytes, max_bytes: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Decode an uploaded file into header -> cell dicts (blank lines dropped).

    Raises:
        ImportParseError: the file cannot be read as a spreadsheet at all.
    """
    if max_bytes is not None and len(content) > max_bytes:
        raise ImportParseError(f"File too large ({len(content)} bytes, limit {max_bytes})")

    try:
        df = _read_frame(filename, content)
    except ImportParseError:
        raise
    except Exception as e:
        logger.warning("Cannot parse upload %s: %s", filename, e)
        raise ImportParseError("Failed to parse file. Please check the format.") from e

    records = _records(df)
    rows = [r for r in records if not all(_is_blank(v) for v in r.values())]
    headers = records[0].keys() if records else []
    logger.info(f"Loaded {filename}: {len(rows)} rows, columns: {list(headers)}")
    return rows


def parse_import_file(filename: str, content: bytes, max_bytes: Optional[int] = None) -> List[ImportRow]:
    """Spreadsheet bytes -> validated ImportRows, one per data line."""
    raw_rows = read_rows(filename, content, max_bytes=max_bytes)
    return [validate_row(normalize_row(raw), index) for index, raw in enumerate(raw_rows)]


def build_template(fmt: str = "xlsx") -> Tuple[bytes, str, str]:
    """
    Build the import template.

    Returns:
        (content, media_type, filename)
    """
    df = pd.DataFrame([TEMPLATE_ROW], columns=list(CANONICAL_FIELDS))

    if fmt == "csv":
        content = df.to_csv(index=False).encode("utf-8-sig")
    elif fmt == "xlsx":
        buf = io.BytesIO()
        with pd.ExcelWriter(buf, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Template")
        content = buf.getvalue()
    else:
        raise ValueError(f"Unknown template format '{fmt}'")

    return content, TEMPLATE_MEDIA_TYPES[fmt], f"inventory_import_template.{fmt}"


def summarize(rows: List[ImportRow]) -> Dict[str, int]:
    valid = sum(1 for r in rows if r.is_valid)
    return {"total_rows": len(rows), "valid_rows": valid, "invalid_rows": len(rows) - valid}
