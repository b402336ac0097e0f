"""Persisted records: todo documents, their task items and history."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TodoDocument:
    """A rich-text todo document with denormalized task counts."""

    id: int
    title: str
    content: str
    todo_count: int
    completed_count: int
    created_at: int
    updated_at: int
    project_id: int | None = None


@dataclass(frozen=True)
class TodoItem:
    """A task record mirrored from a task node of a todo document."""

    id: int
    document_id: int
    node_id: str
    text: str
    is_completed: bool
    sort_order: int
    created_at: int
    updated_at: int
    project_id: int | None = None
    completed_at: int | None = None
    source_chat_id: str | None = None
    source_contact_id: str | None = None
    source_contact_name: str | None = None


@dataclass(frozen=True)
class CompletedTodo:
    """A permanent record of a task being completed."""

    id: int
    original_todo_id: int
    original_document_id: int
    original_node_id: str
    text: str
    todo_created_at: int
    completed_at: int
    project_id: int | None = None
    project_name: str | None = None
    document_title: str | None = None


@dataclass(frozen=True)
class Project:
    """A project that documents and tasks can be assigned to."""

    id: int
    name: str
    created_at: int


@dataclass(frozen=True)
class SyncResult:
    """Task counts written to a document by a synchronization pass."""

    todo_count: int
    completed_count: int


@dataclass(frozen=True)
class SummaryStats:
    """Dashboard summary across all task records."""

    total: int
    completed: int
    pending: int
    completed_today: int
    completion_rate: int
