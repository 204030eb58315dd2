"""Translation of importer errors into HTTP responses.

Error kinds are mapped to status codes and API error codes here and nowhere else.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from bank_transactions.core.exceptions import BankTransactionsError, ErrorKind
from bank_transactions.core.utils import get_logger

logger = get_logger("bank-transactions.api")

ERROR_RESPONSES: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.CONFLICT: (409, "IMPORT_ALREADY_EXISTS"),
    ErrorKind.NOT_FOUND: (404, "IMPORT_NOT_FOUND"),
    ErrorKind.FILE_INVALID: (400, "IMPORT_FILE_INVALID"),
    ErrorKind.TOO_LARGE: (413, "FILE_TOO_LARGE"),
    ErrorKind.BAD_REQUEST: (400, "BAD_REQUEST"),
    ErrorKind.INTERNAL: (500, "UNEXPECTED_ERROR"),
}
UNEXPECTED_MESSAGE = "Unexpected error"


class ApiError(BaseModel):
    """Error body returned by every failing endpoint."""

    code: str
    message: str


def error_response(kind: ErrorKind, message: str) -> JSONResponse:
    """Build the JSON response for an error of ``kind``."""
    status_code, code = ERROR_RESPONSES[kind]
    if kind is ErrorKind.INTERNAL:
        message = UNEXPECTED_MESSAGE
    return JSONResponse(status_code=status_code, content=ApiError(code=code, message=message).model_dump())


async def handle_importer_error(request: Request, exc: BankTransactionsError) -> JSONResponse:
    """Report a known importer error by its kind."""
    if exc.kind is ErrorKind.INTERNAL:
        logger.error(f"Internal error on {request.url.path}: {exc.message}")
    return error_response(exc.kind, exc.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request parameters as a bad request."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("query", "body", "path"))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "Invalid request"
    logger.warning(f"Rejected request to {request.url.path}: {message}")
    return error_response(ErrorKind.BAD_REQUEST, message)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Report any other failure without leaking its details."""
    logger.error(f"Unexpected error on {request.url.path}", exc_info=exc)
    return error_response(ErrorKind.INTERNAL, UNEXPECTED_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the importer's exception handlers on ``app``."""
    app.add_exception_handler(BankTransactionsError, handle_importer_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
