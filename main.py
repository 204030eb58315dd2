"""Main entrypoint and application factory for the Bank Transactions Importer API.

This module initializes the FastAPI application, configures logging, makes sure the database tables
exist, installs the error handlers and exposes the Scalar API reference endpoint for interactive
OpenAPI documentation. It also includes the main entrypoint for running the app with Uvicorn.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from scalar_fastapi import get_scalar_api_reference

from bank_transactions.api.dependencies import get_engine
from bank_transactions.api.errors import register_exception_handlers
from bank_transactions.api.routes import router
from bank_transactions.core.db import init_db
from bank_transactions.core.settings import get_settings
from bank_transactions.core.utils import LOG_FORMAT, ROOT_LOGGER_NAME, ensure_dir, get_logger


# --- Logging Setup ---
def setup_logging() -> None:
    """Configure logging to file and console, and ensure the log directory exists."""
    settings = get_settings()
    ensure_dir(settings.log_dir)
    logger = get_logger(ROOT_LOGGER_NAME)
    logger.setLevel(settings.log_level.upper())
    # Add file handler for persistent logs (not colorized)
    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        file_handler = logging.FileHandler(Path(settings.log_dir) / "imports.log")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)


setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan event handler that creates the importer tables before serving requests."""
    _ = app
    init_db(get_engine())
    yield


app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="Bank Transactions Importer API",
    description="""
    The Bank Transactions Importer API ingests monthly CSV files of bank transactions and serves grouped
    statistics computed from the imported data.

    **Endpoints:**
    - `POST /api/v1/imports`: Upload a CSV for a month (`yearMonth`) and start an import job.
    - `GET /api/v1/imports/{{jobId}}`: Check the status and row counters of an import job.
    - `GET /api/v1/stats`: Statistics of one month grouped by category, IBAN or month total.
    - `GET /api/v1/stats/monthly`: Month totals per currency for a range of months.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
    version="1.0.0",
)
register_exception_handlers(app)
app.include_router(router)


@app.get("/scalar", include_in_schema=False)
async def scalar_docs() -> HTMLResponse:
    """Return Scalar API reference."""
    return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port, reload=True)
