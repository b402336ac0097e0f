"""MCP server exposing todo documents and their synchronized tasks."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from todo_docs.config import DB_FILENAME, resolve_data_directory
from todo_docs.core.clock import ms_to_iso
from todo_docs.core.documents import list_documents, require_document
from todo_docs.core.store.sqlite_store import SqliteTaskStore
from todo_docs.core.sync.reconciler import decode_content, save_document_content
from todo_docs.core.todos import (
    TodoView,
    create_quick_todo,
    get_summary_stats,
    list_all_todos,
    list_by_document,
    toggle_todo_completion,
)
from todo_docs.core.tree.markdown import render_tree_as_markdown
from todo_docs.errors import TodoDocsError
from todo_docs.models.todo import TodoDocument, TodoItem


def document_dict(document: TodoDocument) -> dict[str, Any]:
    return {
        "id": document.id,
        "title": document.title,
        "todo_count": document.todo_count,
        "completed_count": document.completed_count,
        "project_id": document.project_id,
        "created": ms_to_iso(document.created_at),
        "updated": ms_to_iso(document.updated_at),
    }


def todo_dict(item: TodoItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "document_id": item.document_id,
        "node_id": item.node_id,
        "text": item.text,
        "is_completed": item.is_completed,
        "order": item.sort_order,
        "project_id": item.project_id,
        "created": ms_to_iso(item.created_at),
        "updated": ms_to_iso(item.updated_at),
        "completed": ms_to_iso(item.completed_at),
    }


def todo_view_dict(view: TodoView) -> dict[str, Any]:
    entry = todo_dict(view.item)
    entry["document"] = view.document_title
    entry["project"] = view.project_name
    entry["hashtags"] = list(view.hashtags)
    return entry


# --- Core functions (testable without MCP context) ---


def todo_list_documents(store: SqliteTaskStore) -> dict[str, Any]:
    """List all todo documents with their task counts."""
    documents = list_documents(store)
    return {
        "documents": [document_dict(d) for d in documents],
        "count": len(documents),
        "total_todos": sum(d.todo_count for d in documents),
    }


def todo_read_document(
    store: SqliteTaskStore,
    *,
    document_id: int,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read a document as markdown or as its list of task records.

    Args:
        document_id: Document id.
        output_format: "markdown" or "json".
    """
    try:
        document = require_document(store, document_id)
    except TodoDocsError as e:
        return {"error": str(e)}

    result: dict[str, Any] = {"document": document_dict(document)}
    if output_format == "markdown":
        try:
            result["content"] = render_tree_as_markdown(decode_content(document.content))
        except TodoDocsError as e:
            return {"error": str(e)}
        return result

    result["todos"] = [todo_dict(i) for i in list_by_document(store, document_id)]
    return result


def todo_save_document(store: SqliteTaskStore, *, document_id: int, content: str) -> dict[str, Any]:
    """Save Tiptap JSON content and synchronize the document's tasks."""
    try:
        result = save_document_content(store, document_id, content)
    except TodoDocsError as e:
        return {"error": str(e)}
    return {"todo_count": result.todo_count, "completed_count": result.completed_count}


def todo_list_todos(
    store: SqliteTaskStore,
    *,
    project: str | None = None,
    show_completed: bool | None = None,
    hashtag: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> dict[str, Any]:
    """List tasks across documents, pending first.

    Args:
        project: Project id, or "none" for tasks without a project.
        show_completed: True for completed only, False for pending only.
        hashtag: Only tasks mentioning this hashtag.
        limit: Max results (1-200, default 50).
        offset: Pagination offset.
    """
    limit = max(1, min(limit, 200))
    project_id: int | Literal["none"] | None = None
    if project == "none":
        project_id = "none"
    elif project:
        try:
            project_id = int(project)
        except ValueError:
            return {"error": f"Invalid project id '{project}'.", "results": [], "count": 0}

    views = list_all_todos(
        store,
        project_id=project_id,
        show_completed=show_completed,
        hashtag=hashtag,
    )
    page = views[offset : offset + limit]
    output: dict[str, Any] = {
        "results": [todo_view_dict(v) for v in page],
        "count": len(page),
        "total": len(views),
        "has_more": offset + len(page) < len(views),
    }
    if output["has_more"]:
        output["next_offset"] = offset + limit
    return output


def todo_toggle(store: SqliteTaskStore, *, todo_id: int) -> dict[str, Any]:
    """Toggle a task's completion state."""
    try:
        completed = toggle_todo_completion(store, todo_id)
    except TodoDocsError as e:
        return {"error": str(e)}
    return {"id": todo_id, "is_completed": completed}


def todo_quick_add(
    store: SqliteTaskStore,
    *,
    text: str,
    contact_name: str | None = None,
) -> dict[str, Any]:
    """Add a task to the Quick Tasks document."""
    if not text.strip():
        return {"error": "No task text provided."}
    try:
        item = create_quick_todo(store, text, contact_name=contact_name)
    except TodoDocsError as e:
        return {"error": str(e)}
    return {"todo": todo_dict(item), "document_id": item.document_id}


def todo_summary(store: SqliteTaskStore) -> dict[str, Any]:
    """Totals across all tasks."""
    stats = get_summary_stats(store)
    return {
        "total": stats.total,
        "completed": stats.completed,
        "pending": stats.pending,
        "completed_today": stats.completed_today,
        "completion_rate": stats.completion_rate,
    }


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    store: SqliteTaskStore
    data_dir: Path


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Open database on startup, close on shutdown."""
    data_dir = resolve_data_directory()
    store = SqliteTaskStore.open(data_dir / DB_FILENAME)
    logger.info("Serving todo documents from {}", data_dir)
    try:
        yield ServerContext(store=store, data_dir=data_dir)
    finally:
        store.close()


mcp_server = FastMCP(
    "todo-docs",
    instructions="""\
Todo documents are rich-text checklists. Each checklist line is a task whose
record is kept in sync with the document every time the document is saved.

## Tips
- Use todo_list_documents_tool to discover document ids.
- Use todo_read_document_tool to see a document as markdown, or its task
  records with output_format="json".
- Use todo_list_todos_tool to see tasks across documents (pending first).
- todo_save_document_tool replaces the whole document content; tasks missing
  from the new content are deleted.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def todo_list_documents_tool(ctx: Context) -> dict[str, Any]:
    """List all todo documents with task counts."""
    return todo_list_documents(_ctx(ctx).store)


@mcp_server.tool()
async def todo_read_document_tool(
    ctx: Context,
    document_id: int,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read a todo document.

    Args:
        document_id: Document id.
        output_format: "markdown" (human-readable) or "json" (task records).
    """
    return todo_read_document(_ctx(ctx).store, document_id=document_id, output_format=output_format)


@mcp_server.tool()
async def todo_save_document_tool(ctx: Context, document_id: int, content: str) -> dict[str, Any]:
    """Replace a document's content (Tiptap JSON) and sync its tasks.

    Args:
        document_id: Document id.
        content: Serialized Tiptap JSON document.
    """
    return todo_save_document(_ctx(ctx).store, document_id=document_id, content=content)


@mcp_server.tool()
async def todo_list_todos_tool(
    ctx: Context,
    project: str | None = None,
    show_completed: bool | None = None,
    hashtag: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> dict[str, Any]:
    """List tasks across all documents, pending first.

    Pagination: When has_more is true, use next_offset in a follow-up call.

    Args:
        project: Project id, or "none" for tasks without a project.
        show_completed: True for completed only, False for pending only.
        hashtag: Only tasks mentioning this hashtag.
        limit: Max results (1-200, default 50).
        offset: Pagination offset.
    """
    return todo_list_todos(
        _ctx(ctx).store,
        project=project,
        show_completed=show_completed,
        hashtag=hashtag,
        limit=limit,
        offset=offset,
    )


@mcp_server.tool()
async def todo_toggle_tool(ctx: Context, todo_id: int) -> dict[str, Any]:
    """Toggle a task between done and not done.

    Args:
        todo_id: Task record id.
    """
    return todo_toggle(_ctx(ctx).store, todo_id=todo_id)


@mcp_server.tool()
async def todo_quick_add_tool(
    ctx: Context,
    text: str,
    contact_name: str | None = None,
) -> dict[str, Any]:
    """Add a task to the "Quick Tasks" document.

    Args:
        text: Task text.
        contact_name: Optional name of the person the task came from.
    """
    return todo_quick_add(_ctx(ctx).store, text=text, contact_name=contact_name)


@mcp_server.tool()
async def todo_summary_tool(ctx: Context) -> dict[str, Any]:
    """Get totals: tasks, completed, pending, completed today, completion rate."""
    return todo_summary(_ctx(ctx).store)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from todo_docs.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
