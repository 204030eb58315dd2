"""Background processing of import jobs.

``ImportProcessor.process`` drives one job through its lifecycle::

    RECEIVED -> PROCESSING -> COMPLETED | FAILED

Rows are streamed one at a time through the reader, mapper, validator and record factory. A row
that cannot be mapped or validated is counted as invalid and skipped; it never fails the job.
Anything else that goes wrong once the job is PROCESSING (an unreadable file, a storage error, a
bug) moves the job to FAILED with a bounded error message. The job is saved on entering
PROCESSING and on entering a terminal state, so a poller always sees PROCESSING first.
"""

from bank_transactions.core.exceptions import ImportNotFoundError, RowError
from bank_transactions.core.models import ImportJob, ImportReport, ImportStatus, TransactionRecord, YearMonth
from bank_transactions.core.settings import Settings, get_settings
from bank_transactions.core.utils import get_logger, safe_error_message, utcnow_iso
from bank_transactions.ingest.mapper import TransactionRowMapper
from bank_transactions.ingest.reader import CsvTransactionReader
from bank_transactions.ingest.validator import TransactionRowValidator
from bank_transactions.services.job_store import JobStore
from bank_transactions.services.record_factory import TransactionRecordFactory
from bank_transactions.services.stats_materializer import TransactionStatsMaterializer
from bank_transactions.services.transaction_store import TransactionBatchWriter

logger = get_logger("bank-transactions.worker")


class ImportProcessor:
    """Runs the import pipeline for a job created by ``ImportService``."""

    def __init__(
        self,
        jobs: JobStore,
        batch_writer: TransactionBatchWriter,
        stats_materializer: TransactionStatsMaterializer,
        csv_reader: CsvTransactionReader | None = None,
        row_mapper: TransactionRowMapper | None = None,
        row_validator: TransactionRowValidator | None = None,
        record_factory: TransactionRecordFactory | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the processor with its stores and pipeline stages.

        Batch size and error message length come from ``settings``, the environment by default.
        """
        settings = settings or get_settings()
        self.jobs = jobs
        self.batch_writer = batch_writer
        self.stats_materializer = stats_materializer
        self.csv_reader = csv_reader or CsvTransactionReader(chunk_size=settings.import_batch_size)
        self.row_mapper = row_mapper or TransactionRowMapper()
        self.row_validator = row_validator or TransactionRowValidator()
        self.record_factory = record_factory or TransactionRecordFactory()
        self.batch_size = settings.import_batch_size
        self.max_error_message_len = settings.error_message_max_length

    def process(self, job_id: str, file_bytes: bytes | None) -> ImportJob:
        """Import ``file_bytes`` for the job ``job_id`` and return the job in its terminal state."""
        job = self.jobs.find_by_id(job_id)
        if job is None:
            # The job is created right before dispatch, so this is an internal inconsistency.
            raise ImportNotFoundError(job_id)

        self._start(job)
        try:
            expected_month = YearMonth.parse(job.year_month)
            report = self._import_transactions(job.id, expected_month, file_bytes)
            return self._complete(job, report)
        except Exception as exc:
            return self._fail(job, exc)

    def _import_transactions(self, job_id: str, expected_month: YearMonth, file_bytes: bytes | None) -> ImportReport:
        report = ImportReport()
        batch: list[TransactionRecord] = []

        for row_number, record in enumerate(self.csv_reader.open(file_bytes), start=1):
            report.inc_total()
            try:
                draft = self.row_mapper.map(record)
                self.row_validator.validate(draft, expected_month)
                batch.append(self.record_factory.create(draft, job_id, expected_month))
            except RowError as exc:
                report.inc_invalid()
                logger.debug(f"[JOB {job_id}] Row {row_number} rejected: {exc}")
                continue
            report.inc_imported()

            if len(batch) >= self.batch_size:
                self._flush(job_id, batch)
                batch = []

        self._flush(job_id, batch)
        return report

    def _flush(self, job_id: str, batch: list[TransactionRecord]) -> None:
        self.batch_writer.save_batch(batch)
        if batch:
            logger.info(f"[JOB {job_id}] Saved batch of {len(batch)} transactions")

    def _start(self, job: ImportJob) -> None:
        job.transition_to(ImportStatus.PROCESSING)
        job.started_at = utcnow_iso()
        self.jobs.save(job)
        logger.info(f"Starting import job {job.id} for {job.year_month}")

    def _complete(self, job: ImportJob, report: ImportReport) -> ImportJob:
        self.stats_materializer.materialize_for_month(job.year_month)

        completed = job.model_copy(
            update={
                "total_rows": report.total_rows,
                "imported_rows": report.imported_rows,
                "invalid_rows": report.invalid_rows,
            }
        )
        completed.transition_to(ImportStatus.COMPLETED)
        completed.finished_at = utcnow_iso()
        self.jobs.save(completed)
        logger.info(
            f"Completed import job {job.id}: total={report.total_rows}, "
            f"imported={report.imported_rows}, invalid={report.invalid_rows}"
        )
        return completed

    def _fail(self, job: ImportJob, exc: Exception) -> ImportJob:
        logger.error(f"Import job failed: jobId={job.id}, yearMonth={job.year_month}", exc_info=exc)
        failed = job.model_copy()
        failed.transition_to(ImportStatus.FAILED)
        failed.finished_at = utcnow_iso()
        failed.error_message = safe_error_message(exc, self.max_error_message_len)
        self.jobs.save(failed)
        return failed
