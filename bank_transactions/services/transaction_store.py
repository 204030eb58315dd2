"""Persistence of imported transactions and the batch writer used by the import loop."""

from collections.abc import Iterator
from decimal import Decimal

from sqlalchemy import func, insert, select
from sqlalchemy.orm import sessionmaker

from bank_transactions.core.db import TransactionRow, new_id
from bank_transactions.core.models import TransactionRecord

READ_CHUNK_SIZE = 1000


def _record_to_values(record: TransactionRecord) -> dict:
    return {
        "id": record.id or new_id(),
        "import_job_id": record.import_job_id,
        "iban": record.iban,
        "transaction_date": record.transaction_date,
        "currency": record.currency,
        "category": record.category,
        "amount": str(record.amount),
        "year_month": record.year_month,
    }


def _row_to_record(row: TransactionRow) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,
        import_job_id=row.import_job_id,
        iban=row.iban,
        transaction_date=row.transaction_date,
        currency=row.currency,
        category=row.category,
        amount=Decimal(row.amount),
        year_month=row.year_month,
    )


class TransactionStore:
    """Append-only store of transaction records."""

    def __init__(self, session_factory: sessionmaker) -> None:
        """Initialize the store with a SQLAlchemy session factory."""
        self.session_factory = session_factory

    def insert_all(self, records: list[TransactionRecord]) -> None:
        """Insert ``records`` with a single bulk statement in one transaction."""
        with self.session_factory() as session, session.begin():
            session.execute(insert(TransactionRow), [_record_to_values(record) for record in records])

    def iter_month(self, year_month: str) -> Iterator[TransactionRecord]:
        """Yield every record of ``year_month``, fetching rows from the database in chunks."""
        stmt = (
            select(TransactionRow)
            .where(TransactionRow.year_month == year_month)
            .execution_options(yield_per=READ_CHUNK_SIZE)
        )
        with self.session_factory() as session:
            for row in session.scalars(stmt):
                yield _row_to_record(row)

    def count_for_month(self, year_month: str) -> int:
        """Number of records stored for ``year_month``."""
        stmt = select(func.count()).select_from(TransactionRow).where(TransactionRow.year_month == year_month)
        with self.session_factory() as session:
            return session.scalar(stmt)


class TransactionBatchWriter:
    """Writes buffered records to the transaction store in one bulk call per batch."""

    def __init__(self, store: TransactionStore) -> None:
        """Initialize the writer with the store it flushes into."""
        self.store = store

    def save_batch(self, batch: list[TransactionRecord] | None) -> None:
        """Persist ``batch``; an empty or missing batch is a no-op. Storage errors propagate."""
        if not batch:
            return
        self.store.insert_all(batch)
