"""CLI for todo documents (documents, tasks, MCP server)."""

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from todo_docs.config import DB_FILENAME, resolve_data_directory
from todo_docs.core.clock import ms_to_iso
from todo_docs.core.documents import (
    create_document,
    delete_document,
    update_document_project,
    update_document_title,
)
from todo_docs.core.projects import create_project, list_projects
from todo_docs.core.store.sqlite_store import SqliteTaskStore
from todo_docs.core.sync.reconciler import save_document_content
from todo_docs.core.todos import (
    get_completed_stats,
    list_all_hashtags,
    list_all_pending,
    list_completed_history,
    list_recently_completed,
    update_todo_text,
)
from todo_docs.errors import TodoDocsError
from todo_docs.logging_config import configure_logging

app = typer.Typer(help="Todo documents: rich-text checklists with synchronized tasks.")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Database directory"),
]
JsonOption = Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


@contextmanager
def _open_store(data_dir: Path | None) -> Iterator[SqliteTaskStore]:
    """Open the database, creating it if needed; report domain errors and exit 1."""
    dst = data_dir or resolve_data_directory()
    store = SqliteTaskStore.open(dst / DB_FILENAME)
    try:
        yield store
    except TodoDocsError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    finally:
        store.close()


def _echo_json(data: object) -> None:
    typer.echo(json.dumps(data, indent=2))


@app.command()
def create(
    title: str = typer.Argument(..., help="Document title"),
    project: Annotated[
        int | None, typer.Option("--project", "-p", help="Project id")
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Create an empty todo document."""
    with _open_store(data_dir) as store:
        document = create_document(store, title, project_id=project)
        typer.echo(f"Created document {document.id}: {document.title}")


@app.command()
def documents(data_dir: DataDirOption = None, output_json: JsonOption = False) -> None:
    """List todo documents, most recently updated first."""
    from todo_docs.mcp.server import todo_list_documents

    with _open_store(data_dir) as store:
        result = todo_list_documents(store)
        if output_json:
            _echo_json(result)
            return
        typer.echo(f"{result['count']} documents:\n")
        for d in result["documents"]:
            typer.echo(
                f"  {d['title']} - {d['completed_count']}/{d['todo_count']} done  [id={d['id']}]"
            )


@app.command()
def show(
    document_id: int = typer.Argument(..., help="Document id"),
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Show a document as markdown (or its task records with --json)."""
    from todo_docs.mcp.server import todo_read_document

    with _open_store(data_dir) as store:
        result = todo_read_document(
            store, document_id=document_id, output_format="json" if output_json else "markdown"
        )
        if "error" in result:
            typer.echo(result["error"])
            raise typer.Exit(1)
        if output_json:
            _echo_json(result)
        else:
            typer.echo(f"# {result['document']['title']}\n")
            typer.echo(result["content"])


@app.command()
def save(
    document_id: int = typer.Argument(..., help="Document id"),
    content_file: str = typer.Argument(..., help="File with Tiptap JSON content, or - for stdin"),
    data_dir: DataDirOption = None,
) -> None:
    """Save document content and synchronize its tasks."""
    if content_file == "-":
        content = sys.stdin.read()
    else:
        try:
            content = Path(content_file).read_text(encoding="utf-8")
        except OSError as e:
            logger.error("Cannot read {}: {}", content_file, e.strerror or e)
            raise typer.Exit(1) from e

    with _open_store(data_dir) as store:
        result = save_document_content(store, document_id, content)
        typer.echo(f"Saved: {result.todo_count} tasks, {result.completed_count} completed")


@app.command()
def rename(
    document_id: int = typer.Argument(..., help="Document id"),
    title: str = typer.Argument(..., help="New title"),
    data_dir: DataDirOption = None,
) -> None:
    """Rename a document."""
    with _open_store(data_dir) as store:
        update_document_title(store, document_id, title)
        typer.echo(f"Renamed document {document_id}")


@app.command()
def assign(
    document_id: int = typer.Argument(..., help="Document id"),
    project: Annotated[
        int | None, typer.Option("--project", "-p", help="Project id (omit to unassign)")
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Assign a document and its tasks to a project."""
    with _open_store(data_dir) as store:
        count = update_document_project(store, document_id, project)
        typer.echo(f"Updated document {document_id} and {count} tasks")


@app.command()
def delete(
    document_id: int = typer.Argument(..., help="Document id"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a document and its tasks."""
    with _open_store(data_dir) as store:
        count = delete_document(store, document_id)
        typer.echo(f"Deleted document {document_id} ({count} tasks)")


@app.command()
def todos(
    project: Annotated[
        str | None,
        typer.Option("--project", "-p", help="Project id, or 'none'"),
    ] = None,
    completed: Annotated[
        bool | None,
        typer.Option("--completed/--pending", help="Only completed or only pending tasks"),
    ] = None,
    hashtag: Annotated[str | None, typer.Option("--tag", "-t", help="Hashtag filter")] = None,
    limit: int = typer.Option(50, "--limit", "-n", help="Max results"),
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """List tasks across all documents."""
    from todo_docs.mcp.server import todo_list_todos

    with _open_store(data_dir) as store:
        result = todo_list_todos(
            store, project=project, show_completed=completed, hashtag=hashtag, limit=limit
        )
        if output_json or "error" in result:
            _echo_json(result)
            if "error" in result:
                raise typer.Exit(1)
            return
        typer.echo(f"Found {result['total']} tasks (showing {result['count']}):\n")
        for t in result["results"]:
            box = "[x]" if t["is_completed"] else "[ ]"
            typer.echo(f"  {box} {t['text'][:80]}")
            typer.echo(f"      {t['document']}  id={t['id']}")


@app.command()
def pending(data_dir: DataDirOption = None) -> None:
    """List incomplete tasks with their documents."""
    with _open_store(data_dir) as store:
        for view in list_all_pending(store):
            typer.echo(f"  [ ] {view.item.text[:80]}  ({view.document_title}, id={view.item.id})")


@app.command()
def recent(
    limit: int = typer.Option(20, "--limit", "-n", help="Max results"),
    data_dir: DataDirOption = None,
) -> None:
    """Show tasks completed in the last week."""
    with _open_store(data_dir) as store:
        for view in list_recently_completed(store, limit=limit):
            typer.echo(f"  [x] {view.item.text[:80]}  ({view.document_title})")
            typer.echo(f"      {ms_to_iso(view.item.completed_at)}  id={view.item.id}")


@app.command()
def toggle(
    todo_id: int = typer.Argument(..., help="Task id"),
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Toggle a task between done and not done."""
    from todo_docs.mcp.server import todo_toggle

    with _open_store(data_dir) as store:
        result = todo_toggle(store, todo_id=todo_id)
        if output_json:
            _echo_json(result)
        elif "error" in result:
            typer.echo(result["error"])
        else:
            typer.echo(f"Task {todo_id} is now {'done' if result['is_completed'] else 'open'}")
        if "error" in result:
            raise typer.Exit(1)


@app.command()
def edit(
    todo_id: int = typer.Argument(..., help="Task id"),
    text: str = typer.Argument(..., help="New task text"),
    data_dir: DataDirOption = None,
) -> None:
    """Change a task's text (also in its document)."""
    with _open_store(data_dir) as store:
        changed = update_todo_text(store, todo_id, text)
        typer.echo(f"Updated task {todo_id}" if changed else "Text unchanged")


@app.command()
def quick(
    text: str = typer.Argument(..., help="Task text"),
    contact: Annotated[
        str | None, typer.Option("--contact", "-c", help="Who the task came from")
    ] = None,
    data_dir: DataDirOption = None,
    output_json: JsonOption = False,
) -> None:
    """Add a task to the Quick Tasks document."""
    from todo_docs.mcp.server import todo_quick_add

    with _open_store(data_dir) as store:
        result = todo_quick_add(store, text=text, contact_name=contact)
        if output_json or "error" in result:
            _echo_json(result)
            if "error" in result:
                raise typer.Exit(1)
            return
        typer.echo(f"Added task {result['todo']['id']} to document {result['document_id']}")


@app.command()
def stats(data_dir: DataDirOption = None, output_json: JsonOption = False) -> None:
    """Show task totals and completion history for the last 30 days."""
    from todo_docs.mcp.server import todo_summary

    with _open_store(data_dir) as store:
        summary = todo_summary(store)
        history = get_completed_stats(store)
        if output_json:
            summary["history"] = {
                "total": history.total,
                "by_date": [{"date": d, "count": c} for d, c in history.by_date],
                "by_project": [
                    {"project_id": p.project_id, "project_name": p.project_name, "count": p.count}
                    for p in history.by_project
                ],
            }
            _echo_json(summary)
            return
        typer.echo(
            f"{summary['total']} tasks: {summary['completed']} completed, "
            f"{summary['pending']} pending ({summary['completion_rate']}%), "
            f"{summary['completed_today']} completed today"
        )
        typer.echo(f"{history.total} completed in the last 30 days")
        for day, count in history.by_date:
            typer.echo(f"  {day}  {count}")


@app.command()
def hashtags(data_dir: DataDirOption = None) -> None:
    """List hashtags used in tasks, most used first."""
    with _open_store(data_dir) as store:
        for tag, count in list_all_hashtags(store):
            typer.echo(f"  {tag}  {count}")


@app.command()
def history(
    project: Annotated[int | None, typer.Option("--project", "-p", help="Project id")] = None,
    limit: int = typer.Option(50, "--limit", "-n", help="Max results"),
    data_dir: DataDirOption = None,
) -> None:
    """Show the permanent completion history."""
    with _open_store(data_dir) as store:
        for record in list_completed_history(store, limit=limit, project_id=project):
            where = record.document_title or "?"
            if record.project_name:
                where += f" / {record.project_name}"
            typer.echo(f"  {ms_to_iso(record.completed_at)}  {record.text[:80]}  ({where})")


@app.command()
def project(
    name: Annotated[str | None, typer.Argument(help="Create a project with this name")] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Create a project, or list projects when no name is given."""
    with _open_store(data_dir) as store:
        if name:
            created = create_project(store, name)
            typer.echo(f"Created project {created.id}: {created.name}")
            return
        for p in list_projects(store):
            typer.echo(f"  {p.name}  [id={p.id}]")


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from todo_docs.mcp.server import run_mcp_server

    run_mcp_server()
