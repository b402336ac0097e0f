"""Shared test fixtures."""

import sqlite3
from collections.abc import Iterator

import pytest

from tests.unit.fakes import FakeTaskStore
from todo_docs.core.database.schema import create_schema
from todo_docs.core.store.sqlite_store import SqliteTaskStore


@pytest.fixture
def store() -> Iterator[SqliteTaskStore]:
    """Return a task store over an in-memory database with the schema created."""
    conn = sqlite3.connect(":memory:")
    create_schema(conn)
    task_store = SqliteTaskStore(conn)
    yield task_store
    task_store.close()


@pytest.fixture
def fake_store() -> FakeTaskStore:
    return FakeTaskStore()
