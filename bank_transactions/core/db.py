"""DB tables and engine helpers for the bank transactions importer."""

import uuid

from sqlalchemy import Column, Date, Index, Integer, String, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def new_id() -> str:
    """Generate a storage identifier."""
    return str(uuid.uuid4())


class ImportJobRow(Base):
    """Durable record of an import job."""

    __tablename__ = "import_jobs"
    id = Column(String(36), primary_key=True, default=new_id)
    # Not unique: duplicate months are rejected by a check at job creation.
    year_month = Column(String(7), nullable=False, index=True)
    file_name = Column(String, nullable=True)
    status = Column(String(16), nullable=False)
    total_rows = Column(Integer, nullable=False, default=0)
    imported_rows = Column(Integer, nullable=False, default=0)
    invalid_rows = Column(Integer, nullable=False, default=0)
    created_at = Column(String, nullable=False)
    started_at = Column(String, nullable=True)
    finished_at = Column(String, nullable=True)
    error_message = Column(Text, nullable=True)


class TransactionRow(Base):
    """An imported transaction. Amounts are stored as exact decimal text."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("idx_ym_cat", "year_month", "category"),
        Index("idx_ym_iban", "year_month", "iban"),
    )
    id = Column(String(36), primary_key=True, default=new_id)
    import_job_id = Column(String(36), nullable=False, index=True)
    iban = Column(String(34), nullable=False)
    transaction_date = Column(Date, nullable=False)
    currency = Column(String(3), nullable=False)
    category = Column(String, nullable=False)
    amount = Column(String, nullable=False)
    year_month = Column(String(7), nullable=False)


class GroupedStatRow(Base):
    """A materialized aggregate row for one month, dimension, key and currency."""

    __tablename__ = "transaction_stats"
    __table_args__ = (Index("ux_stats", "year_month", "group_by", "key", "currency", unique=True),)
    id = Column(String(36), primary_key=True, default=new_id)
    year_month = Column(String(7), nullable=False)
    group_by = Column(String(16), nullable=False)
    key = Column(String, nullable=False)
    currency = Column(String(3), nullable=False)
    count = Column(Integer, nullable=False)
    total_amount = Column(String, nullable=False)


def create_db_engine(url: str) -> Engine:
    """Create a SQLAlchemy engine usable from background worker threads."""
    if not url.startswith("sqlite"):
        return create_engine(url)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection, otherwise every thread would see its own empty database.
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def init_db(engine: Engine) -> None:
    """Create the importer tables if they do not exist yet."""
    Base.metadata.create_all(engine)


def make_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to ``engine``."""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_session_factory(url: str) -> sessionmaker:
    """Create the engine for ``url``, ensure the tables exist and return a session factory."""
    engine = create_db_engine(url)
    init_db(engine)
    return make_session_factory(engine)
