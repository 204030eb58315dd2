"""FastAPI endpoints for the bank transactions importer.

This module defines the routes for uploading a monthly transactions CSV, polling the resulting
import job, querying materialized statistics and health checks. Uploads are registered
synchronously; the import itself runs as a background task after the response is sent.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile

from bank_transactions.api.dependencies import get_import_processor, get_import_service, get_stats_service
from bank_transactions.api.errors import ApiError
from bank_transactions.api.schemas import ImportJobResponse
from bank_transactions.core.exceptions import FileTooLargeError, ImportFileReadError
from bank_transactions.core.models import YEAR_MONTH_PATTERN, StatsGroupBy, StatsSort
from bank_transactions.core.settings import Settings, get_settings
from bank_transactions.core.utils import get_logger
from bank_transactions.services.import_service import ImportService
from bank_transactions.services.stats_service import MonthlyStatsRow, TransactionStatsRow, TransactionStatsService
from bank_transactions.workers.import_processor import ImportProcessor

router = APIRouter()
logger = get_logger("bank-transactions.api")


async def read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """Read an uploaded file fully, enforcing the configured size limit."""
    if file.size is not None and file.size > max_bytes:
        raise FileTooLargeError(max_bytes)
    try:
        data = await file.read()
    except OSError as exc:
        msg = "Cannot read uploaded file"
        raise ImportFileReadError(msg) from exc
    if len(data) > max_bytes:
        raise FileTooLargeError(max_bytes)
    return data


@router.post(
    "/api/v1/imports",
    status_code=202,
    response_model=ImportJobResponse,
    summary="Upload a monthly transactions CSV and start an import job",
    description=(
        "Upload a CSV file with the columns `IBAN`, `date`, `currency`, `category` and `amount` "
        "for one month. The job is registered immediately in `RECEIVED` status and processed in the "
        "background; poll `GET /api/v1/imports/{jobId}` until it is `COMPLETED` or `FAILED`.\n\n"
        "**Request:**\n"
        "- Content-Type: multipart/form-data\n"
        "- Form field: `yearMonth` (yyyy-MM)\n"
        "- Form field: `file` (CSV file)"
    ),
    response_description="Job accepted. Returns the job snapshot.",
    responses={
        400: {"model": ApiError, "description": "Malformed month or unreadable file."},
        409: {"model": ApiError, "description": "An import for this month already exists."},
        413: {"model": ApiError, "description": "Uploaded file is too large."},
    },
)
async def create_import(
    background_tasks: BackgroundTasks,
    year_month: str = Form(alias="yearMonth", pattern=YEAR_MONTH_PATTERN),
    file: UploadFile = File(...),
    service: ImportService = Depends(get_import_service),
    processor: ImportProcessor = Depends(get_import_processor),
    settings: Settings = Depends(get_settings),
) -> ImportJobResponse:
    """Register an import job for ``yearMonth`` and process the uploaded file in the background."""
    logger.info(f"Received upload request: filename={file.filename}, yearMonth={year_month}")
    data = await read_upload(file, settings.max_upload_size_bytes)
    job = service.create_import(year_month, file.filename, data)
    background_tasks.add_task(processor.process, job.id, data)
    logger.info(f"Background import scheduled: job_id={job.id}")
    return ImportJobResponse.from_job(job)


@router.get(
    "/api/v1/imports/{job_id}",
    response_model=ImportJobResponse,
    summary="Get an import job",
    responses={404: {"model": ApiError, "description": "Job not found."}},
)
async def get_import(job_id: str, service: ImportService = Depends(get_import_service)) -> ImportJobResponse:
    """Return the current state of an import job."""
    return ImportJobResponse.from_job(service.get_import(job_id))


@router.get(
    "/api/v1/stats",
    response_model=list[TransactionStatsRow],
    summary="Grouped statistics for one month",
    description=(
        "Totals and counts of one month's imported transactions grouped by `CATEGORY`, `IBAN` or "
        "`MONTH` (one `TOTAL` row per currency). Rows are ordered by total amount; `limit` must be "
        "between 1 and 500. A month without data returns an empty list."
    ),
    responses={400: {"model": ApiError, "description": "Malformed month, dimension or limit."}},
)
async def get_stats(
    year_month: str = Query(alias="yearMonth", pattern=YEAR_MONTH_PATTERN),
    group_by: StatsGroupBy = Query(alias="groupBy"),
    limit: int | None = Query(None),
    sort: StatsSort = Query(StatsSort.TOTAL_DESC),
    service: TransactionStatsService = Depends(get_stats_service),
) -> list[TransactionStatsRow]:
    """Return grouped statistics of one month."""
    return service.get_stats(year_month, group_by, limit, sort)


@router.get(
    "/api/v1/stats/monthly",
    response_model=list[MonthlyStatsRow],
    summary="Monthly totals for a range of months",
    responses={400: {"model": ApiError, "description": "Malformed or inverted month range."}},
)
async def get_monthly_stats(
    from_month: str = Query(alias="from", pattern=YEAR_MONTH_PATTERN),
    to_month: str = Query(alias="to", pattern=YEAR_MONTH_PATTERN),
    service: TransactionStatsService = Depends(get_stats_service),
) -> list[MonthlyStatsRow]:
    """Return the per-currency totals of every month in ``[from, to]``, oldest first."""
    return service.get_monthly_stats(from_month, to_month)


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
