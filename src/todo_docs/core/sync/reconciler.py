"""Synchronize a document's task records with the tasks in its content."""

import json
import random
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from loguru import logger

from todo_docs.core.clock import now_ms
from todo_docs.core.sync.aggregate import count_tasks, update_document_aggregate
from todo_docs.core.tree.extractor import extract_tasks
from todo_docs.core.tree.walker import parse_tree
from todo_docs.errors import DocumentNotFoundError, InvalidContentError
from todo_docs.models.node import TaskDescriptor, TreeNode
from todo_docs.models.todo import SyncResult, TodoDocument, TodoItem
from todo_docs.protocols import TaskStoreProtocol


@dataclass(frozen=True)
class TaskInsert:
    """A task record to create."""

    document_id: int
    node_id: str
    text: str
    is_completed: bool
    sort_order: int
    created_at: int
    updated_at: int
    project_id: int | None = None
    completed_at: int | None = None

    def as_fields(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TaskPatch:
    """Changed columns of an existing task record."""

    todo_id: int
    changes: dict[str, Any]


@dataclass
class SyncPlan:
    """Writes needed to bring a document's task records up to date."""

    inserts: list[TaskInsert] = field(default_factory=list)
    patches: list[TaskPatch] = field(default_factory=list)
    deletes: list[int] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.inserts or self.patches or self.deletes)


def decode_json_object(content: str) -> dict[str, Any]:
    """Decode serialized document content into its top-level JSON object.

    Raises:
        InvalidContentError: The content is not JSON, nests deeper than the
            decoder supports, or its top level is not an object.
    """
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError) as e:
        raise InvalidContentError(str(e)) from e
    except RecursionError as e:
        raise InvalidContentError("nesting too deep") from e
    if not isinstance(data, dict):
        msg = f"expected an object, got {type(data).__name__}"
        raise InvalidContentError(msg)
    return data


def decode_content(content: str) -> TreeNode:
    """Decode serialized document content into a tree.

    Raises:
        InvalidContentError: See ``decode_json_object``.
    """
    return parse_tree(decode_json_object(content))


def _task_changes(item: TodoItem, task: TaskDescriptor, now: int) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    if item.text != task.text:
        changes["text"] = task.text
    if item.sort_order != task.order:
        changes["sort_order"] = task.order
    if item.is_completed != task.is_completed:
        changes["is_completed"] = task.is_completed
        changes["completed_at"] = now if task.is_completed else None
    if changes:
        changes["updated_at"] = now
    return changes


def plan_task_changes(
    existing: Sequence[TodoItem],
    tasks: Sequence[TaskDescriptor],
    *,
    document: TodoDocument,
    now: int,
) -> SyncPlan:
    """Diff persisted task records against freshly extracted tasks.

    Records are matched by ``node_id``. Unchanged records get no write at
    all, changed records get only the changed columns plus ``updated_at``,
    and ``completed_at`` moves only when the completion state flips. When a
    node id occurs twice in ``tasks`` the later occurrence wins. Extra
    records sharing one node id are deleted.

    Args:
        existing: Current task records of the document.
        tasks: Tasks extracted from the new content.
        document: The owning document (source of ``project_id`` for new records).
        now: Timestamp for every write in this pass.

    Returns:
        The inserts, patches and deletes to apply.
    """
    by_node_id: dict[str, TodoItem] = {}
    deletes: list[int] = []
    for item in existing:
        if item.node_id in by_node_id:
            deletes.append(item.id)
        else:
            by_node_id[item.node_id] = item

    inserts: dict[str, TaskInsert] = {}
    patches: dict[int, TaskPatch] = {}
    present: set[str] = set()

    for task in tasks:
        present.add(task.node_id)
        item = by_node_id.get(task.node_id)
        if item is None:
            inserts[task.node_id] = TaskInsert(
                document_id=document.id,
                node_id=task.node_id,
                text=task.text,
                is_completed=task.is_completed,
                sort_order=task.order,
                created_at=now,
                updated_at=now,
                project_id=document.project_id,
                completed_at=now if task.is_completed else None,
            )
            continue

        changes = _task_changes(item, task, now)
        if changes:
            patches[item.id] = TaskPatch(todo_id=item.id, changes=changes)
        else:
            patches.pop(item.id, None)

    deletes.extend(item.id for node_id, item in by_node_id.items() if node_id not in present)
    return SyncPlan(
        inserts=list(inserts.values()),
        patches=list(patches.values()),
        deletes=deletes,
    )


def apply_plan(store: TaskStoreProtocol, plan: SyncPlan) -> None:
    """Write a sync plan to the store."""
    for insert in plan.inserts:
        store.insert_task(insert.as_fields())
    for patch in plan.patches:
        store.patch_task(patch.todo_id, patch.changes)
    for todo_id in plan.deletes:
        store.delete_task(todo_id)


def save_document_content(
    store: TaskStoreProtocol,
    document_id: int,
    content: str,
    *,
    now: int | None = None,
    rng: random.Random | None = None,
) -> SyncResult:
    """Save a document's content and synchronize its task records.

    Runs as one store transaction: task inserts, patches and deletes and the
    document's content and counts are committed together.

    Args:
        store: Task store.
        document_id: Document being saved.
        content: Serialized Tiptap JSON, stored verbatim.
        now: Timestamp for this save (default: current time).
        rng: Entropy source for ids of task nodes that have none.

    Returns:
        The document's new task counts.

    Raises:
        DocumentNotFoundError: No document has this id. Nothing is written.
        InvalidContentError: The content cannot be decoded. Nothing is written.
    """
    now = now_ms() if now is None else now
    rng = rng or random.SystemRandom()

    with store.transaction():
        document = store.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)

        root = decode_content(content)
        tasks = extract_tasks(root, rng)

        plan = plan_task_changes(
            store.list_tasks(document_id), tasks, document=document, now=now
        )
        apply_plan(store, plan)

        result = count_tasks(tasks)
        update_document_aggregate(store, document_id, content=content, result=result, now=now)

    logger.debug(
        "Synced document {}: {} inserted, {} updated, {} deleted ({} tasks, {} completed)",
        document_id,
        len(plan.inserts),
        len(plan.patches),
        len(plan.deletes),
        result.todo_count,
        result.completed_count,
    )
    return result
