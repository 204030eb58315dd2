"""Tests for mapping CSV rows into transaction drafts."""

from datetime import date
from decimal import Decimal

import pytest

from bank_transactions.core.exceptions import RowMappingError
from bank_transactions.ingest.mapper import TransactionRowMapper
from conftest import IBAN

mapper = TransactionRowMapper()


def row(**overrides: str | None) -> dict[str, str | None]:
    """A well-formed row with optional field overrides."""
    values = {"IBAN": IBAN, "date": "2026-01-02", "currency": "PLN", "category": "Salary", "amount": "12500.00"}
    values.update(overrides)
    return values


def test_maps_all_fields() -> None:
    """Test that a well-formed row becomes a fully typed draft."""
    draft = mapper.map(row())
    if draft.iban != IBAN or draft.currency != "PLN" or draft.category != "Salary":
        msg = f"Unexpected text fields in {draft}"
        raise AssertionError(msg)
    if draft.transaction_date != date(2026, 1, 2):
        msg = f"Expected date 2026-01-02, got {draft.transaction_date}"
        raise AssertionError(msg)
    if draft.amount != Decimal("12500.00") or str(draft.amount) != "12500.00":
        msg = f"Expected exact amount 12500.00, got {draft.amount}"
        raise AssertionError(msg)


def test_column_lookup_falls_back_to_lower_and_upper_case() -> None:
    """Test that fields are found under their lower-case or upper-case names."""
    record = {"iban": IBAN, "DATE": "2026-01-02", "CURRENCY": "PLN", "CATEGORY": "Rent", "AMOUNT": "-3200"}
    draft = mapper.map(record)
    if draft.iban != IBAN or draft.amount != Decimal(-3200):
        msg = f"Unexpected draft {draft}"
        raise AssertionError(msg)


def test_missing_column_is_a_row_error() -> None:
    """Test that a row without a required field cannot be mapped."""
    record = row()
    del record["category"]
    with pytest.raises(RowMappingError, match="Missing column: category"):
        mapper.map(record)


def test_absent_cell_is_a_row_error() -> None:
    """Test that a cell missing from a short row cannot be mapped."""
    with pytest.raises(RowMappingError, match="Missing column: amount"):
        mapper.map(row(amount=None))


@pytest.mark.parametrize("value", ["02.01.2026", "2026-1-2", "20260102", "2026-02-30", ""])
def test_malformed_date_is_a_row_error(value: str) -> None:
    """Test that only real yyyy-MM-dd dates are accepted."""
    with pytest.raises(RowMappingError):
        mapper.map(row(date=value))


@pytest.mark.parametrize("value", ["abc", "", "12,50", "1_000", "1_0_0", "1 000", "NaN", "Infinity", "0x10", "+-1"])
def test_malformed_amount_is_a_row_error(value: str) -> None:
    """Test that amounts must be finite decimal numbers."""
    with pytest.raises(RowMappingError):
        mapper.map(row(amount=value))


def test_zero_and_high_precision_amounts_are_kept_exactly() -> None:
    """Test that any sign and precision survive mapping."""
    for value in ("0", "-0.000000001", "123456789012345678901234567890.123456789"):
        draft = mapper.map(row(amount=value))
        if draft.amount != Decimal(value):
            msg = f"Expected {value}, got {draft.amount}"
            raise AssertionError(msg)


def test_signed_and_scientific_amounts_are_accepted() -> None:
    """Test the accepted decimal notations."""
    for value, expected in (("+12.50", "12.50"), ("-.5", "-0.5"), ("7.", "7"), ("1.5E3", "1500"), ("2e-2", "0.02")):
        draft = mapper.map(row(amount=value))
        if draft.amount != Decimal(expected):
            msg = f"Expected {value} to map to {expected}, got {draft.amount}"
            raise AssertionError(msg)
