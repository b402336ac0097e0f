"""SQLite implementation of the task store."""

import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger

from todo_docs.core.database.schema import migrate_schema
from todo_docs.models.todo import TodoDocument, TodoItem

DOCUMENT_COLUMNS = (
    "id", "title", "content", "todo_count", "completed_count",
    "created_at", "updated_at", "project_id",
)

ITEM_COLUMNS = (
    "id", "document_id", "node_id", "text", "is_completed", "sort_order",
    "created_at", "updated_at", "project_id", "completed_at",
    "source_chat_id", "source_contact_id", "source_contact_name",
)

_DOCUMENT_SELECT = f"SELECT {', '.join(DOCUMENT_COLUMNS)} FROM todo_documents"
_ITEM_SELECT = f"SELECT {', '.join(ITEM_COLUMNS)} FROM todo_items"


def row_to_document(row: tuple) -> TodoDocument:
    return TodoDocument(
        id=row[0], title=row[1], content=row[2], todo_count=row[3],
        completed_count=row[4], created_at=row[5], updated_at=row[6],
        project_id=row[7],
    )


def row_to_item(row: tuple) -> TodoItem:
    return TodoItem(
        id=row[0], document_id=row[1], node_id=row[2], text=row[3],
        is_completed=bool(row[4]), sort_order=row[5], created_at=row[6],
        updated_at=row[7], project_id=row[8], completed_at=row[9],
        source_chat_id=row[10], source_contact_id=row[11],
        source_contact_name=row[12],
    )


def _check_columns(fields: Mapping[str, Any], allowed: tuple[str, ...]) -> None:
    unknown = set(fields) - set(allowed) | ({"id"} & set(fields))
    if unknown:
        msg = f"Unknown or read-only columns: {sorted(unknown)!r}"
        raise ValueError(msg)


class SqliteTaskStore:
    """Task store backed by a SQLite connection.

    Each top-level ``transaction()`` begins an immediate transaction so that
    reads and writes inside it see one consistent snapshot.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._depth = 0

    @classmethod
    def open(cls, db_path: str | Path) -> "SqliteTaskStore":
        """Open (and create or migrate) a database file."""
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path))
        migrate_schema(conn)
        logger.debug("Opened task store at {}", db_path)
        return cls(conn)

    def close(self) -> None:
        self.conn.close()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        if not self.conn.in_transaction:
            self.conn.execute("BEGIN IMMEDIATE")
        self._depth = 1
        try:
            yield
        except Exception:
            self.conn.rollback()
            raise
        else:
            self.conn.commit()
        finally:
            self._depth = 0

    # --- Documents ---

    def get_document(self, document_id: int) -> TodoDocument | None:
        row = self.conn.execute(f"{_DOCUMENT_SELECT} WHERE id = ?", (document_id,)).fetchone()
        return row_to_document(row) if row else None

    def find_document_by_title(self, title: str) -> TodoDocument | None:
        row = self.conn.execute(
            f"{_DOCUMENT_SELECT} WHERE title = ? ORDER BY id LIMIT 1", (title,)
        ).fetchone()
        return row_to_document(row) if row else None

    def list_documents(self) -> list[TodoDocument]:
        """Return all documents, most recently updated first."""
        rows = self.conn.execute(f"{_DOCUMENT_SELECT} ORDER BY updated_at DESC, id DESC").fetchall()
        return [row_to_document(r) for r in rows]

    def insert_document(self, fields: Mapping[str, Any]) -> int:
        _check_columns(fields, DOCUMENT_COLUMNS)
        return self._insert("todo_documents", fields)

    def patch_document(self, document_id: int, changes: Mapping[str, Any]) -> None:
        _check_columns(changes, DOCUMENT_COLUMNS)
        self._patch("todo_documents", document_id, changes)

    def delete_document(self, document_id: int) -> None:
        self.conn.execute("DELETE FROM todo_documents WHERE id = ?", (document_id,))

    # --- Task items ---

    def get_task(self, todo_id: int) -> TodoItem | None:
        row = self.conn.execute(f"{_ITEM_SELECT} WHERE id = ?", (todo_id,)).fetchone()
        return row_to_item(row) if row else None

    def list_tasks(self, document_id: int) -> list[TodoItem]:
        """Return a document's task records ordered by position."""
        rows = self.conn.execute(
            f"{_ITEM_SELECT} WHERE document_id = ? ORDER BY sort_order, id",
            (document_id,),
        ).fetchall()
        return [row_to_item(r) for r in rows]

    def query_tasks(self, where: str = "", params: tuple[Any, ...] = ()) -> list[TodoItem]:
        """Return task records matching a SQL condition over ``todo_items`` columns."""
        sql = _ITEM_SELECT + (f" WHERE {where}" if where else "") + " ORDER BY id"
        return [row_to_item(r) for r in self.conn.execute(sql, params).fetchall()]

    def insert_task(self, fields: Mapping[str, Any]) -> int:
        _check_columns(fields, ITEM_COLUMNS)
        return self._insert("todo_items", fields)

    def patch_task(self, todo_id: int, changes: Mapping[str, Any]) -> None:
        _check_columns(changes, ITEM_COLUMNS)
        self._patch("todo_items", todo_id, changes)

    def delete_task(self, todo_id: int) -> None:
        self.conn.execute("DELETE FROM todo_items WHERE id = ?", (todo_id,))

    # --- Helpers ---

    def _insert(self, table: str, fields: Mapping[str, Any]) -> int:
        columns = list(fields)
        placeholders = ", ".join("?" * len(columns))
        cursor = self.conn.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
            [fields[c] for c in columns],
        )
        if cursor.lastrowid is None:
            msg = f"Insert into {table} did not return a row id"
            raise RuntimeError(msg)
        return cursor.lastrowid

    def _patch(self, table: str, key: int, changes: Mapping[str, Any]) -> None:
        if not changes:
            return
        assignments = ", ".join(f"{c} = ?" for c in changes)
        self.conn.execute(
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            [*changes.values(), key],
        )
