"""Domain rules applied to transaction drafts before they are persisted."""

import re

from bank_transactions.core.exceptions import RowValidationError
from bank_transactions.core.models import TransactionDraft, YearMonth

IBAN_PATTERN = r"[A-Z]{2}[0-9A-Z]{13,32}"
CURRENCY_PATTERN = r"[A-Z]{3}"


class TransactionRowValidator:
    """Checks a draft against the job's target month, reporting the first rule it breaks."""

    def validate(self, tx: TransactionDraft, expected_month: YearMonth) -> None:
        """Raise ``RowValidationError`` unless ``tx`` may be imported for ``expected_month``."""
        self._require_not_blank(tx.iban, "IBAN blank")
        if not re.fullmatch(IBAN_PATTERN, tx.iban):
            msg = "IBAN invalid"
            raise RowValidationError(msg)

        if tx.transaction_date is None:
            msg = "date missing"
            raise RowValidationError(msg)
        if YearMonth.of(tx.transaction_date) != expected_month:
            msg = "date not in yearMonth"
            raise RowValidationError(msg)

        self._require_matches(tx.currency, CURRENCY_PATTERN, "currency invalid")
        self._require_not_blank(tx.category, "category blank")

        if tx.amount is None:
            msg = "amount missing"
            raise RowValidationError(msg)

    def _require_not_blank(self, value: str | None, msg: str) -> None:
        if value is None or not value.strip():
            raise RowValidationError(msg)

    def _require_matches(self, value: str | None, pattern: str, msg: str) -> None:
        if value is None or not re.fullmatch(pattern, value):
            raise RowValidationError(msg)
