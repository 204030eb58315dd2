"""Response models of the HTTP API. Field names are camelCase on the wire."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from bank_transactions.core.models import ImportJob, ImportStatus


class ImportJobResponse(BaseModel):
    """Snapshot of an import job as returned to API clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    year_month: str
    file_name: str | None = None
    status: ImportStatus
    total_rows: int
    imported_rows: int
    invalid_rows: int
    created_at: str | None = None
    started_at: str | None = None
    finished_at: str | None = None
    error_message: str | None = None

    @classmethod
    def from_job(cls, job: ImportJob) -> "ImportJobResponse":
        """Build the response from a domain job."""
        return cls(**job.model_dump())
