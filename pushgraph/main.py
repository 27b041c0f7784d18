"""pushgraph CLI — schedule and preview task graphs for pushes."""

import json
import logging
from typing import Annotated

import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from pushgraph.errors import PushgraphError
from pushgraph.job import QueueFactory, TaskGraphJob
from pushgraph.models import PushJob, Repository
from pushgraph.projects import ProjectRegistry
from pushgraph.providers.base import TaskQueue
from pushgraph.providers.hg import HgPushLog
from pushgraph.providers.queue import TaskclusterQueue
from pushgraph.settings import PushgraphSettings, get_settings

app = typer.Typer(help="pushgraph: turn a push into a Taskcluster task group", no_args_is_help=True)

AliasOpt = Annotated[str, typer.Option("--alias", "-a", help="Project alias from the project registry")]
RepoUrlArg = Annotated[str, typer.Argument(help="Repository URL (e.g. https://hg.mozilla.org/try)")]
PushIdArg = Annotated[int, typer.Argument(help="Pushlog id")]


@app.callback()
def _configure_logging(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    level = "DEBUG" if verbose else get_settings().log_level
    logging.basicConfig(level=level, format="%(message)s", handlers=[RichHandler(show_path=False)], force=True)


# ---------------------------------------------------------------------------
# Job factory
# ---------------------------------------------------------------------------


def _queue_factory(settings: PushgraphSettings) -> QueueFactory:
    def make(scopes: list[str]) -> TaskQueue:
        return TaskclusterQueue(settings, authorized_scopes=scopes)

    return make


def build_job(repo_url: str, push_id: int, alias: str, revision_hash: str | None = None) -> TaskGraphJob:
    settings = get_settings()
    job = PushJob(push_id=push_id, repo=Repository(url=repo_url, alias=alias), revision_hash=revision_hash)
    return TaskGraphJob(
        job,
        pushlog=HgPushLog(),
        registry=ProjectRegistry.from_path(settings.projects_path),
        queue_factory=_queue_factory(settings),
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("schedule")
def schedule(
    repo_url: RepoUrlArg,
    push_id: PushIdArg,
    alias: AliasOpt,
    revision_hash: Annotated[str | None, typer.Option("--revision-hash", help="Treeherder revision hash")] = None,
) -> None:
    """Render .taskcluster.yml for a push and submit its tasks."""
    job = build_job(repo_url, push_id, alias, revision_hash)
    try:
        group_id = job.run()
    except PushgraphError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc
    rprint(f"[green]✓[/green] Task group [bold]{group_id}[/bold]")


@app.command("render")
def render(
    repo_url: RepoUrlArg,
    push_id: PushIdArg,
    alias: AliasOpt,
    revision_hash: Annotated[str | None, typer.Option("--revision-hash", help="Treeherder revision hash")] = None,
) -> None:
    """Print the rendered task graph for a push without submitting anything."""
    job = build_job(repo_url, push_id, alias, revision_hash)
    try:
        push, graph = job.render()
    except PushgraphError as exc:
        rprint(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc
    # No markup: task definitions may contain [brackets]
    typer.echo(json.dumps({"scopes": job.scopes(push), **graph.model_dump()}, indent=2))


@app.command("config-show")
def config_show() -> None:
    """Show resolved configuration (masks credentials)."""
    settings = get_settings()

    def mask(val: str | None) -> str:
        if val is None:
            return "[dim](not set)[/dim]"
        if len(val) <= 5:
            return "***"
        return f"...{val[-5:]}"

    table = Table(title="pushgraph Configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("taskcluster_root_url", settings.taskcluster_root_url or "[dim](not set)[/dim]")
    table.add_row("taskcluster_client_id", settings.taskcluster_client_id or "[dim](not set)[/dim]")
    table.add_row(
        "taskcluster_access_token",
        mask(settings.taskcluster_access_token.get_secret_value() if settings.taskcluster_access_token else None),
    )
    table.add_row("projects_path", str(settings.projects_path))
    table.add_row("log_level", settings.log_level)

    registry = ProjectRegistry.from_path(settings.projects_path)
    table.add_row("projects", ", ".join(registry.aliases()) or "[dim](none)[/dim]")

    rprint(table)
