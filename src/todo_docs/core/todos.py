"""Task record queries and single-task edits outside the editor."""

import json
import re
from collections import Counter
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

from loguru import logger

from todo_docs.config import (
    COMPLETED_HISTORY_LIMIT,
    COMPLETED_STATS_DAYS,
    QUICK_TASKS_TITLE,
    RECENTLY_COMPLETED_DAYS,
    RECENTLY_COMPLETED_LIMIT,
)
from todo_docs.core.clock import now_ms
from todo_docs.core.documents import create_document
from todo_docs.core.projects import get_project, project_names
from todo_docs.core.store.sqlite_store import SqliteTaskStore
from todo_docs.core.sync.reconciler import decode_json_object
from todo_docs.core.tree.editing import append_task_item, set_task_checked, set_task_text
from todo_docs.errors import InvalidContentError, TodoNotFoundError
from todo_docs.models.todo import CompletedTodo, SummaryStats, TodoDocument, TodoItem

_HASHTAG_RE = re.compile(r"#(\w+)")

_DAY_MS = 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class TodoView:
    """A task record with its document title, project name and hashtags."""

    item: TodoItem
    document_title: str
    project_name: str | None = None
    hashtags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProjectCount:
    project_id: int | None
    project_name: str
    count: int


@dataclass(frozen=True)
class CompletedStats:
    """Completion history grouped by UTC date and by project."""

    total: int
    by_date: tuple[tuple[str, int], ...]
    by_project: tuple[ProjectCount, ...]


def extract_hashtags(text: str) -> list[str]:
    """Return lowercased ``#tags`` in order of appearance."""
    return [m.group(0).lower() for m in _HASHTAG_RE.finditer(text)]


def _document_titles(store: SqliteTaskStore, items: list[TodoItem]) -> dict[int, str]:
    titles: dict[int, str] = {}
    for document_id in {item.document_id for item in items}:
        document = store.get_document(document_id)
        if document is not None:
            titles[document_id] = document.title
    return titles


def _with_titles(store: SqliteTaskStore, items: list[TodoItem]) -> list[TodoView]:
    titles = _document_titles(store, items)
    return [TodoView(item=i, document_title=titles.get(i.document_id, "Unknown")) for i in items]


def list_by_document(store: SqliteTaskStore, document_id: int) -> list[TodoItem]:
    """Return a document's task records in document order."""
    return store.list_tasks(document_id)


def list_all_pending(store: SqliteTaskStore) -> list[TodoView]:
    """Return incomplete tasks across all documents."""
    return _with_titles(store, store.query_tasks("is_completed = 0"))


def list_recently_completed(
    store: SqliteTaskStore,
    *,
    limit: int = RECENTLY_COMPLETED_LIMIT,
    now: int | None = None,
) -> list[TodoView]:
    """Return tasks completed within the last week, most recent first."""
    now = now_ms() if now is None else now
    cutoff = now - RECENTLY_COMPLETED_DAYS * _DAY_MS
    items = store.query_tasks(
        "is_completed = 1 AND completed_at IS NOT NULL AND completed_at >= ?", (cutoff,)
    )
    items.sort(key=lambda i: i.completed_at or 0, reverse=True)
    return _with_titles(store, items[:limit])


def get_summary_stats(store: SqliteTaskStore, *, now: int | None = None) -> SummaryStats:
    """Totals across all tasks, plus how many were completed since local midnight."""
    now = now_ms() if now is None else now
    today = datetime.fromtimestamp(now / 1000).replace(hour=0, minute=0, second=0, microsecond=0)
    today_start = int(today.timestamp() * 1000)

    items = store.query_tasks()
    total = len(items)
    completed = sum(1 for i in items if i.is_completed)
    completed_today = sum(1 for i in items if i.completed_at and i.completed_at >= today_start)
    return SummaryStats(
        total=total,
        completed=completed,
        pending=total - completed,
        completed_today=completed_today,
        completion_rate=round(completed / total * 100) if total > 0 else 0,
    )


def list_all_todos(
    store: SqliteTaskStore,
    *,
    project_id: int | Literal["none"] | None = None,
    show_completed: bool | None = None,
    hashtag: str | None = None,
) -> list[TodoView]:
    """Return tasks with document, project and hashtag details.

    Args:
        store: Task store.
        project_id: Only tasks of this project; "none" for tasks without one.
        show_completed: True for completed only, False for pending only, None for both.
        hashtag: Only tasks mentioning this hashtag (with or without ``#``).

    Returns:
        Pending tasks first, then newest first.
    """
    if project_id == "none":
        items = store.query_tasks("project_id IS NULL")
    elif project_id is not None:
        items = store.query_tasks("project_id = ?", (project_id,))
    else:
        items = store.query_tasks()

    if show_completed is not None:
        items = [i for i in items if i.is_completed == show_completed]

    if hashtag:
        tag = hashtag.lower()
        wanted = {tag, f"#{tag}"}
        items = [i for i in items if wanted & set(extract_hashtags(i.text))]

    titles = _document_titles(store, items)
    names = project_names(store)
    views = [
        TodoView(
            item=i,
            document_title=titles.get(i.document_id, "Unknown"),
            project_name=names.get(i.project_id) if i.project_id is not None else None,
            hashtags=tuple(extract_hashtags(i.text)),
        )
        for i in items
    ]
    views.sort(key=lambda v: (v.item.is_completed, -v.item.created_at))
    return views


def list_all_hashtags(store: SqliteTaskStore) -> list[tuple[str, int]]:
    """Return every hashtag with the number of tasks using it, most used first."""
    counts: Counter[str] = Counter()
    for item in store.query_tasks():
        counts.update(extract_hashtags(item.text))
    return counts.most_common()


def _load_content(document: TodoDocument) -> dict | None:
    try:
        return decode_json_object(document.content)
    except InvalidContentError as e:
        logger.warning("Document {} content is unusable ({}), leaving it as is", document.id, e)
        return None


def _require_task(store: SqliteTaskStore, todo_id: int) -> TodoItem:
    item = store.get_task(todo_id)
    if item is None:
        raise TodoNotFoundError(todo_id)
    return item


def toggle_todo_completion(store: SqliteTaskStore, todo_id: int, *, now: int | None = None) -> bool:
    """Flip a task's completion state and mirror it into its document.

    The document's completed count and the task node's ``checked`` attribute
    are updated. Completing a task also writes a permanent history record.

    Returns:
        The new completion state.
    """
    now = now_ms() if now is None else now
    with store.transaction():
        item = _require_task(store, todo_id)
        completed = not item.is_completed
        store.patch_task(
            todo_id,
            {
                "is_completed": completed,
                "updated_at": now,
                "completed_at": now if completed else None,
            },
        )

        document = store.get_document(item.document_id)
        if document is not None:
            changes: dict[str, object] = {
                "completed_count": max(0, document.completed_count + (1 if completed else -1)),
                "updated_at": now,
            }
            content = _load_content(document)
            if content is not None:
                if set_task_checked(content, item.node_id, completed):
                    changes["content"] = json.dumps(content)
                else:
                    logger.warning(
                        "Task {} not found in document {} content", item.node_id, document.id
                    )
            store.patch_document(document.id, changes)

        if completed:
            project = get_project(store, item.project_id) if item.project_id is not None else None
            store.conn.execute(
                """INSERT INTO completed_todos
                   (original_todo_id, original_document_id, original_node_id, text,
                    project_id, project_name, document_title, todo_created_at, completed_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    todo_id, item.document_id, item.node_id, item.text,
                    item.project_id, project.name if project else None,
                    document.title if document else None, item.created_at, now,
                ),
            )

    logger.debug("Toggled task {} to {}", todo_id, "done" if completed else "open")
    return completed


def update_todo_text(
    store: SqliteTaskStore,
    todo_id: int,
    text: str,
    *,
    now: int | None = None,
) -> bool:
    """Change a task's text and mirror it into its document.

    Returns:
        False if the text was already equal (nothing written), True otherwise.
    """
    now = now_ms() if now is None else now
    with store.transaction():
        item = _require_task(store, todo_id)
        if item.text == text:
            return False

        store.patch_task(todo_id, {"text": text, "updated_at": now})

        document = store.get_document(item.document_id)
        if document is not None:
            content = _load_content(document)
            if content is not None:
                if set_task_text(content, item.node_id, text):
                    store.patch_document(
                        document.id, {"content": json.dumps(content), "updated_at": now}
                    )
                else:
                    logger.warning(
                        "Failed to find task {} in document {} content", item.node_id, document.id
                    )
    return True


def _unique_node_id(existing: set[str], base: str) -> str:
    node_id = base
    count = 0
    while node_id in existing:
        count += 1
        node_id = f"{base}-{count}"
    return node_id


def create_quick_todo(
    store: SqliteTaskStore,
    text: str,
    *,
    chat_id: str | None = None,
    contact_id: str | None = None,
    contact_name: str | None = None,
    now: int | None = None,
) -> TodoItem:
    """Add a task to the "Quick Tasks" document, creating the document if needed.

    The task is appended to the document content as well, so a later save
    from the editor keeps it.

    Raises:
        InvalidContentError: The existing "Quick Tasks" content cannot be
            decoded. Nothing is written.
    """
    now = now_ms() if now is None else now
    with store.transaction():
        document = store.find_document_by_title(QUICK_TASKS_TITLE)
        if document is None:
            document = create_document(store, QUICK_TASKS_TITLE, now=now)
            logger.info("Created {!r} document {}", QUICK_TASKS_TITLE, document.id)

        content = decode_json_object(document.content)

        existing = store.list_tasks(document.id)
        max_order = max((i.sort_order for i in existing), default=-1)
        node_id = _unique_node_id({i.node_id for i in existing}, f"quick-{now}")

        todo_id = store.insert_task(
            {
                "document_id": document.id,
                "node_id": node_id,
                "project_id": document.project_id,
                "text": text,
                "is_completed": False,
                "sort_order": max_order + 1,
                "created_at": now,
                "updated_at": now,
                "source_chat_id": chat_id,
                "source_contact_id": contact_id,
                "source_contact_name": contact_name,
            }
        )

        append_task_item(content, node_id, text)
        store.patch_document(
            document.id,
            {
                "content": json.dumps(content),
                "todo_count": document.todo_count + 1,
                "updated_at": now,
            },
        )

    item = store.get_task(todo_id)
    if item is None:
        raise TodoNotFoundError(todo_id)
    return item


def _row_to_completed(row: tuple) -> CompletedTodo:
    return CompletedTodo(
        id=row[0], original_todo_id=row[1], original_document_id=row[2],
        original_node_id=row[3], text=row[4], project_id=row[5],
        project_name=row[6], document_title=row[7], todo_created_at=row[8],
        completed_at=row[9],
    )


_COMPLETED_SELECT = (
    "SELECT id, original_todo_id, original_document_id, original_node_id, text, "
    "project_id, project_name, document_title, todo_created_at, completed_at "
    "FROM completed_todos"
)


def list_completed_history(
    store: SqliteTaskStore,
    *,
    limit: int = COMPLETED_HISTORY_LIMIT,
    project_id: int | None = None,
) -> list[CompletedTodo]:
    """Return permanent completion records, most recent first."""
    if project_id is not None:
        rows = store.conn.execute(
            f"{_COMPLETED_SELECT} WHERE project_id = ? ORDER BY completed_at DESC, id DESC LIMIT ?",
            (project_id, limit),
        ).fetchall()
    else:
        rows = store.conn.execute(
            f"{_COMPLETED_SELECT} ORDER BY completed_at DESC, id DESC LIMIT ?", (limit,)
        ).fetchall()
    return [_row_to_completed(r) for r in rows]


def get_completed_stats(
    store: SqliteTaskStore,
    *,
    start: int | None = None,
    end: int | None = None,
) -> CompletedStats:
    """Group completion records in ``[start, end]`` by UTC date and by project.

    Defaults to the last 30 days.
    """
    end = now_ms() if end is None else end
    start = end - COMPLETED_STATS_DAYS * _DAY_MS if start is None else start
    rows = store.conn.execute(
        f"{_COMPLETED_SELECT} WHERE completed_at >= ? AND completed_at <= ?",
        (start, end),
    ).fetchall()
    records = [_row_to_completed(r) for r in rows]

    by_date: Counter[str] = Counter(
        datetime.fromtimestamp(r.completed_at / 1000, tz=UTC).date().isoformat() for r in records
    )
    project_counts: Counter[int | None] = Counter(r.project_id for r in records)
    project_labels = {r.project_id: r.project_name or "No project" for r in records}

    by_project = sorted(
        (
            ProjectCount(project_id=pid, project_name=project_labels[pid], count=count)
            for pid, count in project_counts.items()
        ),
        key=lambda p: -p.count,
    )
    return CompletedStats(
        total=len(records),
        by_date=tuple(sorted(by_date.items())),
        by_project=tuple(by_project),
    )
