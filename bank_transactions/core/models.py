"""Pydantic models for the bank transactions importer.

This module defines the domain models shared by the import pipeline, the stores and the statistics
services: the import job and its lifecycle, the transient transaction draft, the persisted
transaction record and the materialized grouped statistics row.
"""

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import NamedTuple

from pydantic import BaseModel

from bank_transactions.core.exceptions import IllegalJobTransitionError

YEAR_MONTH_PATTERN = r"^\d{4}-\d{2}$"
MONTH_TOTAL_KEY = "TOTAL"
MONTHS_PER_YEAR = 12


class YearMonth(NamedTuple):
    """A calendar year and month, rendered as ``yyyy-MM``."""

    year: int
    month: int

    @classmethod
    def parse(cls, value: str) -> "YearMonth":
        """Parse a ``yyyy-MM`` string, raising ``ValueError`` for anything else."""
        if value is None or not re.fullmatch(YEAR_MONTH_PATTERN, value):
            msg = f"yearMonth must be yyyy-MM: {value!r}"
            raise ValueError(msg)
        year, month = (int(part) for part in value.split("-"))
        if not 1 <= month <= MONTHS_PER_YEAR:
            msg = f"month out of range: {value!r}"
            raise ValueError(msg)
        return cls(year, month)

    @classmethod
    def of(cls, day: date) -> "YearMonth":
        """Return the year-month a calendar date falls in."""
        return cls(day.year, day.month)

    def __str__(self) -> str:
        """Render as ``yyyy-MM``."""
        return f"{self.year:04d}-{self.month:02d}"


class ImportStatus(StrEnum):
    """Lifecycle states of an import job."""

    RECEIVED = "RECEIVED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is allowed out of this state."""
        return self in (ImportStatus.COMPLETED, ImportStatus.FAILED)


ALLOWED_TRANSITIONS: dict[ImportStatus, frozenset[ImportStatus]] = {
    ImportStatus.RECEIVED: frozenset({ImportStatus.PROCESSING}),
    ImportStatus.PROCESSING: frozenset({ImportStatus.COMPLETED, ImportStatus.FAILED}),
    ImportStatus.COMPLETED: frozenset(),
    ImportStatus.FAILED: frozenset(),
}


class StatsGroupBy(StrEnum):
    """Grouping dimension of a materialized statistics row."""

    CATEGORY = "CATEGORY"
    IBAN = "IBAN"
    MONTH = "MONTH"


class StatsSort(StrEnum):
    """Ordering of statistics rows by their total amount."""

    TOTAL_DESC = "TOTAL_DESC"
    TOTAL_ASC = "TOTAL_ASC"


class ImportJob(BaseModel):
    """One import attempt for exactly one target month."""

    id: str | None = None
    year_month: str
    file_name: str | None = None
    status: ImportStatus = ImportStatus.RECEIVED
    total_rows: int = 0
    imported_rows: int = 0
    invalid_rows: int = 0
    created_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    error_message: str | None = None

    def transition_to(self, status: ImportStatus) -> None:
        """Move the job to ``status``, refusing moves the lifecycle does not allow."""
        if status not in ALLOWED_TRANSITIONS[self.status]:
            msg = f"Import job {self.id} cannot move from {self.status} to {status}"
            raise IllegalJobTransitionError(msg)
        self.status = status


@dataclass
class ImportReport:
    """Running row counters for an import in progress."""

    total_rows: int = 0
    imported_rows: int = 0
    invalid_rows: int = 0

    def inc_total(self) -> None:
        self.total_rows += 1

    def inc_imported(self) -> None:
        self.imported_rows += 1

    def inc_invalid(self) -> None:
        self.invalid_rows += 1


class TransactionDraft(BaseModel):
    """A parsed, not yet validated transaction row."""

    iban: str | None = None
    transaction_date: date | None = None
    currency: str | None = None
    category: str | None = None
    amount: Decimal | None = None


class TransactionRecord(BaseModel):
    """A validated transaction tied to the job that imported it."""

    id: str | None = None
    import_job_id: str
    iban: str
    transaction_date: date
    currency: str
    category: str
    amount: Decimal
    year_month: str


class GroupedStat(BaseModel):
    """One materialized aggregate row: count and signed sum for a group key and currency."""

    year_month: str
    group_by: StatsGroupBy
    key: str
    currency: str
    count: int
    total_amount: Decimal
