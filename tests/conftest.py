"""Shared fixtures: an in-memory database per test and an API client wired to it."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from bank_transactions.api.dependencies import get_session_factory
from bank_transactions.core.db import create_session_factory
from main import app

IBAN = "PL61109010140000071219812874"
HEADER = "IBAN,date,currency,category,amount"


def make_csv(*rows: str, header: str = HEADER) -> bytes:
    """Build CSV bytes from a header and data lines."""
    return ("\n".join([header, *rows]) + "\n").encode("utf-8")


@pytest.fixture
def session_factory() -> sessionmaker:
    """A fresh in-memory SQLite database with the importer tables."""
    return create_session_factory("sqlite://")


@pytest.fixture
def client(session_factory: sessionmaker) -> Iterator[TestClient]:
    """API client whose stores use the test database."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
