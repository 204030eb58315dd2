"""Persistence of import jobs."""

from sqlalchemy import exists, select
from sqlalchemy.orm import sessionmaker

from bank_transactions.core.db import ImportJobRow, new_id
from bank_transactions.core.models import ImportJob, ImportStatus


def _job_to_row(job: ImportJob) -> ImportJobRow:
    return ImportJobRow(
        id=job.id,
        year_month=job.year_month,
        file_name=job.file_name,
        status=job.status.value,
        total_rows=job.total_rows,
        imported_rows=job.imported_rows,
        invalid_rows=job.invalid_rows,
        created_at=job.created_at,
        started_at=job.started_at,
        finished_at=job.finished_at,
        error_message=job.error_message,
    )


def _row_to_job(row: ImportJobRow) -> ImportJob:
    return ImportJob(
        id=row.id,
        year_month=row.year_month,
        file_name=row.file_name,
        status=ImportStatus(row.status),
        total_rows=row.total_rows,
        imported_rows=row.imported_rows,
        invalid_rows=row.invalid_rows,
        created_at=row.created_at,
        started_at=row.started_at,
        finished_at=row.finished_at,
        error_message=row.error_message,
    )


class JobStore:
    """Durable record of import jobs: identity, status, counters, timestamps and error message."""

    def __init__(self, session_factory: sessionmaker) -> None:
        """Initialize the store with a SQLAlchemy session factory."""
        self.session_factory = session_factory

    def create(self, job: ImportJob) -> ImportJob:
        """Insert a new job, assigning its id, and return the stored snapshot."""
        stored = job.model_copy(update={"id": job.id or new_id()})
        with self.session_factory() as session, session.begin():
            session.add(_job_to_row(stored))
        return stored

    def find_by_id(self, job_id: str) -> ImportJob | None:
        """Return the job with ``job_id``, or None if there is none."""
        with self.session_factory() as session:
            row = session.get(ImportJobRow, job_id)
            return _row_to_job(row) if row is not None else None

    def exists_for_month(self, year_month: str) -> bool:
        """Whether any job, in any status, targets ``year_month``."""
        stmt = select(exists().where(ImportJobRow.year_month == year_month))
        with self.session_factory() as session:
            return bool(session.scalar(stmt))

    def save(self, job: ImportJob) -> ImportJob:
        """Insert or update ``job`` by id."""
        with self.session_factory() as session, session.begin():
            session.merge(_job_to_row(job))
        return job
