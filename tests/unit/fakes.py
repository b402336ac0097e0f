"""Fake implementations for testing the synchronization engine."""

import dataclasses
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from todo_docs.models.todo import TodoDocument, TodoItem


class FakeTaskStore:
    """In-memory fake for SqliteTaskStore.

    Records every write for assertions. A failing transaction restores the
    state from before it started.
    """

    def __init__(self) -> None:
        self.documents: dict[int, TodoDocument] = {}
        self.tasks: dict[int, TodoItem] = {}
        self.calls: list[tuple[Any, ...]] = []
        self.transactions = 0
        self._next_id = 1

    def _new_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def add_document(self, **fields: Any) -> TodoDocument:
        """Seed a document without recording a call."""
        values: dict[str, Any] = {
            "title": "Doc",
            "content": "{}",
            "todo_count": 0,
            "completed_count": 0,
            "created_at": 1000,
            "updated_at": 1000,
        }
        values.update(fields)
        document = TodoDocument(id=self._new_id(), **values)
        self.documents[document.id] = document
        return document

    def add_task(self, document_id: int, node_id: str, **fields: Any) -> TodoItem:
        """Seed a task record without recording a call."""
        values: dict[str, Any] = {
            "text": "",
            "is_completed": False,
            "sort_order": 0,
            "created_at": 1000,
            "updated_at": 1000,
        }
        values.update(fields)
        item = TodoItem(id=self._new_id(), document_id=document_id, node_id=node_id, **values)
        self.tasks[item.id] = item
        return item

    @property
    def task_writes(self) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] != "patch_document"]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self.transactions += 1
        documents, tasks = dict(self.documents), dict(self.tasks)
        try:
            yield
        except Exception:
            self.documents, self.tasks = documents, tasks
            raise

    def get_document(self, document_id: int) -> TodoDocument | None:
        return self.documents.get(document_id)

    def list_tasks(self, document_id: int) -> list[TodoItem]:
        items = [t for t in self.tasks.values() if t.document_id == document_id]
        return sorted(items, key=lambda t: (t.sort_order, t.id))

    def insert_task(self, fields: Mapping[str, Any]) -> int:
        self.calls.append(("insert_task", dict(fields)))
        item = TodoItem(id=self._new_id(), **fields)
        self.tasks[item.id] = item
        return item.id

    def patch_task(self, todo_id: int, changes: Mapping[str, Any]) -> None:
        self.calls.append(("patch_task", todo_id, dict(changes)))
        self.tasks[todo_id] = dataclasses.replace(self.tasks[todo_id], **changes)

    def delete_task(self, todo_id: int) -> None:
        self.calls.append(("delete_task", todo_id))
        del self.tasks[todo_id]

    def patch_document(self, document_id: int, changes: Mapping[str, Any]) -> None:
        self.calls.append(("patch_document", document_id, dict(changes)))
        self.documents[document_id] = dataclasses.replace(self.documents[document_id], **changes)

    def task_by_node(self, document_id: int, node_id: str) -> TodoItem:
        matches = [t for t in self.list_tasks(document_id) if t.node_id == node_id]
        assert len(matches) == 1, f"expected one record for {node_id!r}, got {matches!r}"
        return matches[0]
