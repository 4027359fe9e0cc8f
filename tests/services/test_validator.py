# tests/services/test_validator.py
from decimal import Decimal

import pytest

from lab_inventory.db_models import ItemType, MAX_QUANTITY
from lab_inventory.services.validator import (
    is_ambiguous_number,
    make_auto_sku,
    parse_number,
    revalidate,
    sanitize_text,
    validate_row,
)


def test_empty_row_still_yields_a_row():
    row = validate_row({}, 0)
    assert row.is_valid is False
    assert row.errors == ["Name required"]
    assert row.category == "Uncategorized"
    assert row.location == "Unassigned"
    assert row.type == ItemType.CONSUMABLE
    assert row.sku == "AUTO-ITEM-0001"
    assert (row.quantity_total, row.quantity_available, row.min_stock_threshold) == (0, 0, 0)
    assert row.unit_price == Decimal("0")


def test_full_valid_row():
    row = validate_row(
        {
            "name": " Oscilloscope ",
            "sku": "OSC-1",
            "category": "Electronics",
            "type": "asset",
            "location": "Shelf A1",
            "quantity_total": "10",
            "quantity_available": "8",
            "min_stock_threshold": "2",
            "unit_price": "99.99",
            "notes": "Calibrated",
        },
        3,
    )
    assert row.is_valid, row.errors
    assert row.row_index == 3
    assert row.name == "Oscilloscope"
    assert row.type == ItemType.ASSET
    assert row.quantity_available == 8
    assert row.unit_price == Decimal("99.99")
    assert row.notes == "Calibrated"


def test_auto_sku_is_deterministic_and_uses_row_position():
    first = validate_row({"name": "Nitrile Gloves (M)"}, 4)
    again = validate_row({"name": "Nitrile Gloves (M)"}, 4)
    assert first.sku == again.sku == "AUTO-NITRILE-GLOVES-M-0005"
    assert first.is_valid


def test_make_auto_sku_without_name():
    assert make_auto_sku("", 11) == "AUTO-ITEM-0012"


def test_available_defaults_to_total():
    row = validate_row({"name": "Beaker", "quantity_total": 12}, 0)
    assert row.quantity_available == 12
    assert row.is_valid


def test_unknown_type_is_a_defect():
    row = validate_row({"name": "Beaker", "type": "TOOL"}, 0)
    assert "Type must be ASSET or CONSUMABLE" in row.errors
    assert row.type == ItemType.CONSUMABLE


def test_available_exceeding_total_is_flagged_and_clamped():
    row = validate_row({"name": "Beaker", "quantity_total": 5, "quantity_available": 9}, 0)
    assert row.is_valid is False
    assert "Qty available exceeds total" in row.errors
    assert row.quantity_available == 5


@pytest.mark.parametrize(
    "field, message",
    [
        ("quantity_total", "Qty total cannot be negative"),
        ("min_stock_threshold", "Min stock cannot be negative"),
        ("unit_price", "Price cannot be negative"),
    ],
)
def test_negative_numbers_are_defects(field, message):
    row = validate_row({"name": "Beaker", field: "-1"}, 0)
    assert message in row.errors
    assert row.is_valid is False


def test_negative_available_is_a_defect():
    row = validate_row({"name": "Beaker", "quantity_total": 3, "quantity_available": -2}, 0)
    assert "Qty available cannot be negative" in row.errors


def test_fractional_counts_are_flagged():
    row = validate_row({"name": "Beaker", "quantity_total": "2.5"}, 0)
    assert "Qty total must be a whole number" in row.errors
    assert row.quantity_total == 2


def test_unparseable_numbers_fall_back():
    row = validate_row({"name": "Beaker", "quantity_total": "lots", "unit_price": "n/a"}, 0)
    assert row.quantity_total == 0
    assert row.unit_price == Decimal("0")
    assert row.is_valid


def test_placeholder_cells_count_as_blank():
    row = validate_row({"name": "Beaker", "category": "-", "location": "—", "notes": "  "}, 0)
    assert row.category == "Uncategorized"
    assert row.location == "Unassigned"
    assert row.notes is None


def test_numeric_sku_from_excel():
    row = validate_row({"name": "Beaker", "sku": 1234.0}, 0)
    assert row.sku == "1234"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12,5", Decimal("12.5")),
        ("3,50", Decimal("3.50")),
        ("1,000", Decimal("-1")),
        ("1.234,5", Decimal("-1")),
        (" 3 ", Decimal("3")),
        (7, Decimal("7")),
        (2.25, Decimal("2.25")),
        ("", Decimal("-1")),
        ("abc", Decimal("-1")),
        (float("nan"), Decimal("-1")),
        (None, Decimal("-1")),
    ],
)
def test_parse_number(value, expected):
    assert parse_number(value, Decimal("-1")) == expected


def test_sanitize_text():
    assert sanitize_text(None) == ""
    assert sanitize_text("  a  ") == "a"
    assert sanitize_text("---") == ""
    assert sanitize_text(3.0) == "3"


def test_revalidate_catches_tampered_rows():
    row = validate_row({"name": "Beaker", "quantity_total": 5, "quantity_available": 5}, 2)
    tampered = row.model_copy(update={"quantity_available": 50})
    checked = revalidate(tampered)
    assert checked.is_valid is False
    assert "Qty available exceeds total" in checked.errors
    assert checked.row_index == 2


def test_thousands_separator_is_a_defect_not_a_decimal():
    row = validate_row({"name": "Beaker", "quantity_total": "1,000"}, 0)
    assert row.is_valid is False
    assert "Qty total is ambiguous, use plain digits" in row.errors
    assert row.quantity_total == 0


def test_mixed_separators_in_price_are_a_defect():
    row = validate_row({"name": "Beaker", "unit_price": "1.234,5"}, 0)
    assert row.is_valid is False
    assert "Price is ambiguous, use plain digits" in row.errors
    assert row.unit_price == Decimal("0")


def test_decimal_comma_still_parses():
    row = validate_row({"name": "Beaker", "quantity_total": "4", "unit_price": "12,5"}, 0)
    assert row.is_valid, row.errors
    assert row.unit_price == Decimal("12.5")


@pytest.mark.parametrize(
    "value, expected",
    [("1,000", True), ("1.234,5", True), ("12,5", False), ("1000", False), (1000, False)],
)
def test_is_ambiguous_number(value, expected):
    assert is_ambiguous_number(value) is expected


def test_counts_beyond_the_column_range_are_defects():
    row = validate_row({"name": "Beaker", "quantity_total": str(MAX_QUANTITY + 1)}, 0)
    assert row.is_valid is False
    assert "Qty total is out of range" in row.errors
    assert row.quantity_total == 0

    row = validate_row({"name": "Beaker", "quantity_total": MAX_QUANTITY}, 0)
    assert row.is_valid, row.errors


def test_price_beyond_the_column_range_is_a_defect():
    row = validate_row({"name": "Beaker", "unit_price": "1e20"}, 0)
    assert row.is_valid is False
    assert "Price is out of range" in row.errors

    row = validate_row({"name": "Beaker", "unit_price": "9999999999.99"}, 0)
    assert row.is_valid, row.errors
