"""Mapping of CSV rows into transaction drafts."""

import re
from collections.abc import Mapping
from datetime import date
from decimal import Decimal

from bank_transactions.core.exceptions import RowMappingError
from bank_transactions.core.models import TransactionDraft
from bank_transactions.ingest.reader import AMOUNT, CATEGORY, CURRENCY, DATE, IBAN, accepted_spellings

ISO_DATE_PATTERN = r"\d{4}-\d{2}-\d{2}"
# Plain or scientific decimal notation; no digit grouping, NaN or Infinity.
DECIMAL_PATTERN = r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?"


class TransactionRowMapper:
    """Turns one column-keyed CSV row into a ``TransactionDraft``."""

    def map(self, record: Mapping[str, str | None]) -> TransactionDraft:
        """Map a row, raising ``RowMappingError`` on a missing column or an unparsable value."""
        iban = self._get(record, IBAN)
        date_str = self._get(record, DATE)
        currency = self._get(record, CURRENCY)
        category = self._get(record, CATEGORY)
        amount = self._get(record, AMOUNT)

        return TransactionDraft(
            iban=iban,
            transaction_date=self._parse_date(date_str),
            currency=currency,
            category=category,
            amount=self._parse_amount(amount),
        )

    def _get(self, record: Mapping[str, str | None], key: str) -> str:
        for spelling in accepted_spellings(key):
            if spelling in record and record[spelling] is not None:
                return record[spelling]
        msg = f"Missing column: {key}"
        raise RowMappingError(msg)

    def _parse_date(self, value: str) -> date:
        if not re.fullmatch(ISO_DATE_PATTERN, value):
            msg = f"Invalid date: {value!r}"
            raise RowMappingError(msg)
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            msg = f"Invalid date: {value!r}"
            raise RowMappingError(msg) from exc

    def _parse_amount(self, value: str) -> Decimal:
        if not re.fullmatch(DECIMAL_PATTERN, value):
            msg = f"Invalid amount: {value!r}"
            raise RowMappingError(msg)
        return Decimal(value)
