"""tasktracker CLI - manage tasks from the terminal or launch the API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import settings
from .errors import TaskTrackerError
from .routers.tasks import generate_task_id
from .services.task_store import TaskStore
from .task import Task

app = typer.Typer(
    name="tasktracker",
    help="Single-user task tracker",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    database_url: str = typer.Option(None, "--db", help="Database URL (defaults to TASKS_DATABASE_URL)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Single-user task tracker."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = database_url or settings.database_url


def _run(ctx: typer.Context, action: Callable[[TaskStore], Awaitable[Any]]) -> Any:
    """Open the store selected by ``--db``, run ``action`` against it and close it again."""

    async def runner() -> Any:
        async with TaskStore(ctx.obj, echo=settings.echo_sql) as store:
            return await action(store)

    try:
        return asyncio.run(runner())
    except TaskTrackerError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)


def _parse_due(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        console.print(f"[red]Invalid due date format:[/red] {value}")
        raise typer.Exit(1)


@app.command("add")
def add_task(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Task title"),
    description: str = typer.Option("", "--description", "-d", help="Task description"),
    due: str = typer.Option(None, "--due", help="Due date (ISO 8601)"),
):
    """Create a task."""
    due_date = _parse_due(due)

    async def action(store: TaskStore) -> Task:
        task = Task(generate_task_id(), title, description=description, due_date=due_date)
        await store.add(task)
        return task

    task = _run(ctx, action)
    console.print(f"[green]Created[/green] {task.id}: {escape(task.describe())}")


@app.command("list")
def list_tasks(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List all tasks, newest first."""

    async def action(store: TaskStore) -> list[Task]:
        return await store.get_all()

    tasks = _run(ctx, action)
    if json_output:
        console.print_json(json.dumps([task.serialize() for task in tasks]))
        return
    if not tasks:
        console.print("[dim]No tasks yet.[/dim]")
        return

    table = Table(title=f"Tasks ({len(tasks)})")
    table.add_column("ID", style="dim")
    table.add_column("Done")
    table.add_column("Title", style="cyan")
    table.add_column("Due")
    for task in tasks:
        due = task.due_date.isoformat() if task.due_date else "-"
        if task.is_overdue():
            due = f"[red]{due} (overdue)[/red]"
        table.add_row(task.id, "✓" if task.completed else "", escape(task.title), due)
    console.print(table)


@app.command("complete")
def complete_task(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
):
    """Mark a task as completed."""

    async def action(store: TaskStore) -> Task:
        return await store.update(task_id, completed=True)

    task = _run(ctx, action)
    console.print(f"[green]Completed[/green] {escape(task.describe())}")


@app.command("reopen")
def reopen_task(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
):
    """Mark a task as not completed."""

    async def action(store: TaskStore) -> Task:
        return await store.update(task_id, completed=False)

    task = _run(ctx, action)
    console.print(f"[yellow]Reopened[/yellow] {escape(task.describe())}")


@app.command("delete")
def delete_task(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
):
    """Delete a task."""

    async def action(store: TaskStore) -> bool:
        return await store.delete(task_id)

    if _run(ctx, action):
        console.print(f"[green]Deleted[/green] {task_id}")
    else:
        console.print(f"[dim]No task with id {task_id}[/dim]")


@app.command("stats")
def show_stats(ctx: typer.Context):
    """Show task totals and completion rate."""

    async def action(store: TaskStore):
        return await store.stats()

    stats = _run(ctx, action)
    console.print(
        f"Total: [bold]{stats.total}[/bold]  Completed: [green]{stats.completed}[/green]  "
        f"Pending: [yellow]{stats.pending}[/yellow]  Rate: {stats.completion_rate:.2f}%"
    )


@app.command("serve")
def serve(
    port: int = typer.Option(3000, "--port", "-p", help="Port to run on"),
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the task API."""
    import uvicorn

    logging.getLogger("tasktracker").setLevel(settings.log_level.upper())
    console.print(f"[bold cyan]Starting Task Manager at http://{host}:{port}[/bold cyan]")
    console.print(f"  Health: http://{host}:{port}/health")
    console.print(f"  API:    http://{host}:{port}{settings.api_prefix}/tasks")
    uvicorn.run(
        "tasktracker.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
