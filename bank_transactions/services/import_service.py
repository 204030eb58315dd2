"""Creation and lookup of import jobs."""

from bank_transactions.core.exceptions import (
    BadRequestError,
    ImportAlreadyExistsError,
    ImportFileReadError,
    ImportNotFoundError,
)
from bank_transactions.core.models import ImportJob, ImportStatus, YearMonth
from bank_transactions.core.utils import get_logger, utcnow_iso
from bank_transactions.services.job_store import JobStore

logger = get_logger("bank-transactions.imports")


class ImportService:
    """Synchronous half of the import workflow: registers jobs and reports their state."""

    def __init__(self, jobs: JobStore) -> None:
        """Initialize the service with the job store."""
        self.jobs = jobs

    def create_import(self, year_month: str, file_name: str | None, file_bytes: bytes | None) -> ImportJob:
        """Register a RECEIVED job for ``year_month`` and return its snapshot.

        Raises ``BadRequestError`` for a malformed month, ``ImportFileReadError`` when the upload
        has no readable content and ``ImportAlreadyExistsError`` when the month already has a job.
        The existence check and the insert are not atomic.
        """
        try:
            YearMonth.parse(year_month)
        except ValueError as exc:
            msg = "yearMonth must be yyyy-MM"
            raise BadRequestError(msg) from exc
        if file_bytes is None:
            msg = "Cannot read uploaded file"
            raise ImportFileReadError(msg)
        if self.jobs.exists_for_month(year_month):
            logger.warning(f"Rejected import for {year_month}: a job already exists")
            raise ImportAlreadyExistsError(year_month)

        job = self.jobs.create(
            ImportJob(
                year_month=year_month,
                file_name=file_name,
                status=ImportStatus.RECEIVED,
                created_at=utcnow_iso(),
            )
        )
        logger.info(f"Created import job {job.id} for {year_month} ({file_name}, {len(file_bytes)} bytes)")
        return job

    def get_import(self, job_id: str) -> ImportJob:
        """Return the current snapshot of a job, or raise ``ImportNotFoundError``."""
        job = self.jobs.find_by_id(job_id)
        if job is None:
            raise ImportNotFoundError(job_id)
        return job
