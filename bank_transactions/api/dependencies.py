"""FastAPI dependencies for DI (settings, stores, services, processor).

Every store shares one engine and session factory per process; the tables are created at startup.
Tests swap the database by overriding ``get_session_factory`` in ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from bank_transactions.core.db import create_db_engine, make_session_factory
from bank_transactions.core.settings import Settings, get_settings
from bank_transactions.services.import_service import ImportService
from bank_transactions.services.job_store import JobStore
from bank_transactions.services.stats_materializer import TransactionStatsMaterializer
from bank_transactions.services.stats_service import TransactionStatsService
from bank_transactions.services.stats_store import StatsStore
from bank_transactions.services.transaction_store import TransactionBatchWriter, TransactionStore
from bank_transactions.workers.import_processor import ImportProcessor


@lru_cache
def get_engine() -> Engine:
    """Provide the process-wide SQLAlchemy engine for the configured database."""
    return create_db_engine(get_settings().database_url)


@lru_cache
def get_session_factory() -> sessionmaker:
    """Provide the process-wide SQLAlchemy session factory bound to ``get_engine``."""
    return make_session_factory(get_engine())


def get_job_store(session_factory: sessionmaker = Depends(get_session_factory)) -> JobStore:
    """Provide the import job store."""
    return JobStore(session_factory)


def get_import_service(jobs: JobStore = Depends(get_job_store)) -> ImportService:
    """Provide the service that creates and looks up import jobs."""
    return ImportService(jobs)


def get_import_processor(
    session_factory: sessionmaker = Depends(get_session_factory),
    settings: Settings = Depends(get_settings),
) -> ImportProcessor:
    """Provide the background import processor wired to the configured stores."""
    transactions = TransactionStore(session_factory)
    return ImportProcessor(
        jobs=JobStore(session_factory),
        batch_writer=TransactionBatchWriter(transactions),
        stats_materializer=TransactionStatsMaterializer(transactions, StatsStore(session_factory)),
        settings=settings,
    )


def get_stats_service(
    session_factory: sessionmaker = Depends(get_session_factory),
    settings: Settings = Depends(get_settings),
) -> TransactionStatsService:
    """Provide the statistics query service."""
    return TransactionStatsService(StatsStore(session_factory), settings=settings)
