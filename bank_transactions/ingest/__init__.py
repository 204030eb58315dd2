"""Ingest package: reads uploaded CSV files and turns their rows into validated transaction drafts."""

from .mapper import TransactionRowMapper  # noqa: F401
from .reader import CsvRows, CsvTransactionReader  # noqa: F401
from .validator import TransactionRowValidator  # noqa: F401
