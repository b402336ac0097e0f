"""Protocols for the record store consumed by the synchronization engine."""

from collections.abc import Mapping
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from todo_docs.models.todo import TodoDocument, TodoItem


@runtime_checkable
class TaskStoreProtocol(Protocol):
    """Keyed record store for todo documents and their task items.

    All calls made inside one ``transaction()`` block commit together or not at all.
    """

    def transaction(self) -> AbstractContextManager[None]:
        """Open a unit of work; nested units join the outer one."""
        ...

    def get_document(self, document_id: int) -> TodoDocument | None:
        """Point lookup of a document by id."""
        ...

    def list_tasks(self, document_id: int) -> list[TodoItem]:
        """Return all task records owned by a document."""
        ...

    def insert_task(self, fields: Mapping[str, Any]) -> int:
        """Insert a task record and return its store key."""
        ...

    def patch_task(self, todo_id: int, changes: Mapping[str, Any]) -> None:
        """Update the given columns of a task record. A None value clears the column."""
        ...

    def delete_task(self, todo_id: int) -> None:
        """Delete a task record."""
        ...

    def patch_document(self, document_id: int, changes: Mapping[str, Any]) -> None:
        """Update the given columns of a document."""
        ...
