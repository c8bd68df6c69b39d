"""Shared pytest fixtures."""

from collections.abc import Callable, Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.dialects import postgresql
from sqlalchemy.sql import ClauseElement

from feedback_server.db import get_session
from feedback_server.main import app
from feedback_server.services.storage import get_object_store


def _compile_pg(stmt: ClauseElement) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


@pytest.fixture()
def pg_sql() -> Callable[[ClauseElement], str]:
    """Render a statement as PostgreSQL SQL (bound parameters left as placeholders)."""
    return _compile_pg


@pytest.fixture()
def db_session() -> MagicMock:
    """Mock database session for unit tests."""
    return MagicMock()


@pytest.fixture()
def mock_store() -> MagicMock:
    """Mock ObjectStore."""
    store = MagicMock()
    store.url_for.side_effect = lambda key: f"https://cdn.example.com/{key}"
    store.upload.side_effect = lambda key, data, content_type=None: f"https://cdn.example.com/{key}"
    return store


@pytest.fixture()
def client(db_session: MagicMock, mock_store: MagicMock) -> Generator[TestClient, None, None]:
    """HTTP client with the session and object store dependencies replaced by mocks."""
    app.dependency_overrides[get_session] = lambda: db_session
    app.dependency_overrides[get_object_store] = lambda: mock_store
    yield TestClient(app)
    app.dependency_overrides.clear()
