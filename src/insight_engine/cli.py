"""Command-line interface using Typer."""

import json
from typing import Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from insight_engine import __version__
from insight_engine.domain.enums import ProviderName, TaskStatus, TimeWindow
from insight_engine.domain.models import ResultSet, Task, TaskParameters
from insight_engine.exceptions import NoResults, NotReady, TaskNotFound
from insight_engine.logging import setup_logging
from insight_engine.services.tasks import TaskService

# Setup logging
setup_logging()

app = typer.Typer(
    name="insight-engine",
    help="AI Insight Engine - prompt-driven video search and analysis",
    add_completion=False,
)

console = Console()

STATUS_STYLES = {
    TaskStatus.PENDING: "yellow",
    TaskStatus.RUNNING: "blue",
    TaskStatus.COMPLETED: "green",
    TaskStatus.FAILED: "red",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"AI Insight Engine v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """AI Insight Engine - find videos, analyze them, and build storyboards."""
    pass


def _service() -> TaskService:
    return TaskService()


def _parse_id(task_id: str) -> UUID:
    try:
        return UUID(task_id)
    except ValueError:
        console.print(f"[bold red]Invalid task ID: {task_id}[/bold red]")
        raise typer.Exit(code=1) from None


def _print_task(task: Task) -> None:
    style = STATUS_STYLES[task.status]
    lines = [
        f"[bold]Prompt:[/bold] {task.prompt}",
        f"[bold]Type:[/bold] {task.kind.value}",
        f"[bold]Status:[/bold] [{style}]{task.status.value}[/{style}]",
        f"[bold]Created:[/bold] {task.created_at}",
    ]
    if task.completed_at:
        lines.append(f"[bold]Finished:[/bold] {task.completed_at}")
    if task.error_message:
        lines.append(f"[bold red]Error:[/bold red] {task.error_message}")
    console.print(Panel("\n".join(lines), title=f"Task {task.id}"))


def _print_results(result_set: ResultSet) -> None:
    meta = result_set.metadata
    table = Table(title="Analyzed Videos")
    table.add_column("#", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Channel")
    table.add_column("Views", justify="right")
    table.add_column("Sentiment")
    table.add_column("Themes")
    table.add_column("Scenes", justify="right")

    for index, entry in enumerate(result_set.entries, start=1):
        analysis = entry.analysis
        table.add_row(
            str(index),
            entry.item.title[:60],
            entry.item.channel_name,
            entry.item.view_count,
            analysis.sentiment.value if analysis else "[red]failed[/red]",
            ", ".join(analysis.themes[:3]) if analysis else "",
            str(len(entry.storyboard.scenes)) if entry.storyboard else "-",
        )
    console.print(table)

    average = f"{meta.average_views:,}" if meta.average_views is not None else "n/a"
    top = ", ".join(f"{t.theme} ({t.count})" for t in meta.theme_frequency[:5]) or "none"
    sentiment = ", ".join(f"{k}={v}" for k, v in meta.sentiment_distribution.items())
    channel = (
        f"{meta.top_channel.channel} ({meta.top_channel.count} videos)"
        if meta.top_channel
        else "n/a"
    )
    summary = [
        f"Items: {meta.total_items}  Analyzed: {meta.analyzed_items}  "
        f"Storyboards: {meta.storyboard_items}  Failed: {meta.failed_items}",
        f"Total views: {meta.total_views:,}  Average views: {average}",
        f"Average duration: {meta.average_duration or 'n/a'}  Top channel: {channel}",
        f"Content types: {', '.join(c.value for c in meta.content_types) or 'none'}",
        f"Top themes: {top}",
        f"Sentiment: {sentiment}",
    ]
    console.print(Panel("\n".join(summary), title="Summary"))

    for rec in result_set.recommendations:
        console.print(f"[bold]{rec.title}[/bold] ({rec.type}): {rec.description}")

    if result_set.summary:
        console.print(Panel(result_set.summary, title="Overall Report"))


@app.command()
def analyze(
    prompt: str = typer.Argument(..., help='e.g. "Find 10 videos about ghost stories"'),
    max_results: Optional[int] = typer.Option(
        None, "--max-results", "-n", min=1, max=50, help="Number of videos"
    ),
    time_window: Optional[TimeWindow] = typer.Option(
        None, "--time-window", "-t", help="Upload date window"
    ),
    provider: Optional[ProviderName] = typer.Option(
        None, "--provider", "-p", help="AI provider for analysis"
    ),
    no_storyboard: bool = typer.Option(False, "--no-storyboard", help="Skip storyboards"),
) -> None:
    """Create a task and run it in this process."""
    from insight_engine.utils.async_utils import run_async

    service = _service()
    parameters = TaskParameters(
        max_results=max_results,
        time_window=time_window,
        provider=provider,
        want_storyboard=False if no_storyboard else None,
    )

    try:
        task = service.create(prompt, parameters=parameters)
    except (ValueError, SQLAlchemyError) as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    console.print(f"[bold blue]Running task {task.id}...[/bold blue]")
    task = run_async(service.run(task.id))
    _print_task(task)

    if task.status != TaskStatus.COMPLETED or task.result_set is None:
        raise typer.Exit(code=1)
    _print_results(task.result_set)


@app.command()
def status(
    task_id: str = typer.Argument(..., help="The task ID to check"),
) -> None:
    """Show the status of a task."""
    try:
        task = _service().status(_parse_id(task_id))
    except TaskNotFound as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1) from e
    _print_task(task)


@app.command()
def results(
    task_id: str = typer.Argument(..., help="The task ID"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result set as JSON"),
) -> None:
    """Show the results of a completed task."""
    try:
        result_set = _service().results(_parse_id(task_id))
    except (TaskNotFound, NotReady, NoResults) as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=1) from e

    if as_json:
        typer.echo(json.dumps(result_set.to_dict(), indent=2))
    else:
        _print_results(result_set)


@app.command("list")
def list_tasks(
    status_filter: Optional[TaskStatus] = typer.Option(
        None, "--status", "-s", help="Only tasks in this status"
    ),
    limit: int = typer.Option(20, "--limit", "-l", min=1, max=200, help="Max tasks to show"),
) -> None:
    """List recent tasks."""
    tasks, total = _service().list(status=status_filter, limit=limit)

    if not tasks:
        console.print("[dim]No tasks found.[/dim]")
        return

    table = Table(title=f"Tasks ({len(tasks)} of {total})")
    table.add_column("ID", style="dim")
    table.add_column("Status")
    table.add_column("Type")
    table.add_column("Prompt", style="cyan")
    table.add_column("Created")

    for task in tasks:
        style = STATUS_STYLES[task.status]
        table.add_row(
            str(task.id),
            f"[{style}]{task.status.value}[/{style}]",
            task.kind.value,
            task.prompt[:50],
            task.created_at.strftime("%Y-%m-%d %H:%M") if task.created_at else "",
        )
    console.print(table)


@app.command("init-db")
def init_db_command() -> None:
    """Create the task tables in the configured database."""
    from insight_engine.db.session import init_db

    try:
        init_db()
    except SQLAlchemyError as e:
        console.print(f"[bold red]Database error: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    console.print("[bold green]✓ Database initialized[/bold green]")


if __name__ == "__main__":
    app()
