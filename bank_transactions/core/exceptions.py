"""Error taxonomy for the bank transactions importer.

Every error the service raises on purpose carries an ``ErrorKind``. The HTTP layer translates
kinds into status codes in one place (``bank_transactions.api.errors``); nothing else looks at
exception types to decide how a failure is reported.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Closed set of error categories surfaced to callers."""

    CONFLICT = "CONFLICT"
    NOT_FOUND = "NOT_FOUND"
    FILE_INVALID = "FILE_INVALID"
    TOO_LARGE = "TOO_LARGE"
    BAD_REQUEST = "BAD_REQUEST"
    INTERNAL = "INTERNAL"


class BankTransactionsError(Exception):
    """Base class for all errors raised by the importer."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        """Initialize the error with a human-readable message."""
        super().__init__(message)
        self.message = message


class ImportAlreadyExistsError(BankTransactionsError):
    """An import job already exists for the requested month."""

    kind = ErrorKind.CONFLICT

    def __init__(self, year_month: str) -> None:
        """Initialize the error for the conflicting month."""
        super().__init__(f"Import for yearMonth already exists: {year_month}")
        self.year_month = year_month


class ImportNotFoundError(BankTransactionsError):
    """No import job exists with the requested id."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, job_id: str) -> None:
        """Initialize the error for the unknown job id."""
        super().__init__(f"Import job not found: {job_id}")
        self.job_id = job_id


class ImportFileReadError(BankTransactionsError):
    """The uploaded file is absent, undecodable or structurally malformed."""

    kind = ErrorKind.FILE_INVALID


class FileTooLargeError(BankTransactionsError):
    """The uploaded file exceeds the configured size limit."""

    kind = ErrorKind.TOO_LARGE

    def __init__(self, max_bytes: int) -> None:
        """Initialize the error with the configured limit."""
        super().__init__(f"Uploaded file is too large (limit {max_bytes} bytes)")
        self.max_bytes = max_bytes


class BadRequestError(BankTransactionsError):
    """A request parameter is malformed or out of range."""

    kind = ErrorKind.BAD_REQUEST


class IllegalJobTransitionError(BankTransactionsError):
    """An import job was asked to move between states the lifecycle does not allow."""

    kind = ErrorKind.INTERNAL


class RowError(Exception):
    """A single CSV row could not be turned into a transaction record.

    Row errors are recovered inside the import loop: the row is counted as invalid and the job
    carries on with the next one.
    """


class RowMappingError(RowError):
    """A row is missing a column or holds a value that cannot be parsed."""


class RowValidationError(RowError):
    """A parsed row violates a domain rule."""
