import asyncio
from collections.abc import Callable
from functools import partial, wraps
from logging import getLogger
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from .conf.github import load_context
from .conf.settings import load_config, parse_exclude_paths, parse_thresholds
from .exceptions import EventError, PRSizeError
from .services.diffstat import DiffstatSource, run_git_diffstat
from .services.exclusions import filter_excluded
from .services.formatter import format_classification, format_file_stats
from .services.github.client import GitHubAPIClient
from .services.github.models import PullRequestInfo
from .services.labeler import label_pull_request
from .services.pr_size import aggregate_changes, classify_size

PROJECT_NAME = "prsize"

app = typer.Typer()
logger = getLogger(__name__)
console = Console()


def syncify(f: Callable[..., Any]) -> Callable[..., Any]:
    """This simple decorator converts an async function into a sync function,
    allowing it to work with Typer.
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def _fail(error: Exception) -> typer.Exit:
    logger.error(str(error))
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    return typer.Exit(1)


@app.command(help=f"Display the current installed version of {PROJECT_NAME}.")
def version() -> None:
    from . import __version__

    typer.echo(f"{PROJECT_NAME} - {__version__}")


@app.command(help="Label the pull request that triggered the current GitHub Actions run by size.")
@syncify
async def run() -> None:
    """GitHub Action entry point."""
    try:
        context = load_context()

        if not context.github_actions:
            logger.warning("Not in GitHub Action mode, quitting...")
            console.print("[yellow]Not running in GitHub Actions, nothing to do.[/yellow]")
            return

        if not context.is_pull_request_event:
            logger.info(f"Not a pull request event ({context.github_event_name}), nothing to do here...")
            return

        config = load_config()

        if not context.github_event_path:
            raise EventError("GITHUB_EVENT_PATH is not set")
        pull_request = PullRequestInfo.from_event_file(
            context.github_event_path,
            repository=context.github_repository,
        )

        diff_runner = partial(run_git_diffstat, workspace=context.github_workspace)
        async with GitHubAPIClient(config.github_token, base_url=context.github_api_url) as client:
            result = await label_pull_request(config, pull_request, client, diff_runner)

    except PRSizeError as e:
        raise _fail(e)
    except Exception as e:
        logger.exception("Unexpected error while labeling pull request")
        raise _fail(e)

    target = pull_request.url or f"{pull_request.repository}#{pull_request.number}"
    console.print(
        f"Labeled {escape(target)} as "
        f"[bold]{escape(result.label)}[/bold] ({result.total_changes} changed lines)"
    )


@app.command(help="Show the size label a given number of changed lines maps to.")
def classify(
    total: int = typer.Argument(
        ...,
        min=0,
        help="Total number of changed lines",
    ),
    thresholds: str | None = typer.Option(
        None,
        "--thresholds",
        help="YAML document overriding the default thresholds (same format as INPUT_THRESHOLDS)",
    ),
) -> None:
    try:
        size_thresholds = parse_thresholds(thresholds)
    except PRSizeError as e:
        raise _fail(e)

    result = classify_size(total, size_thresholds)
    format_classification(result, size_thresholds.managed_labels().index(result.label), console=console)


@app.command(help="Measure the working tree against a base commit without touching GitHub.")
def measure(
    base: str = typer.Argument(
        ...,
        help="Base commit or ref to diff the working tree against",
    ),
    exclude: list[str] | None = typer.Option(
        None,
        "--exclude",
        help="Glob pattern to exclude from the count. Can be specified multiple times.",
    ),
    exclude_yaml: str | None = typer.Option(
        None,
        "--exclude-yaml",
        help="YAML list of glob patterns (same format as INPUT_EXCLUDE_PATHS)",
    ),
    thresholds: str | None = typer.Option(
        None,
        "--thresholds",
        help="YAML document overriding the default thresholds (same format as INPUT_THRESHOLDS)",
    ),
    workspace: str | None = typer.Option(
        None,
        "--workspace",
        help="Mark this directory as a git safe directory before diffing",
    ),
) -> None:
    try:
        size_thresholds = parse_thresholds(thresholds)
        exclude_paths = parse_exclude_paths(exclude_yaml) + list(exclude or [])

        source = DiffstatSource(base, partial(run_git_diffstat, workspace=workspace))
        stats = source.collect()
    except PRSizeError as e:
        raise _fail(e)

    format_file_stats(stats, exclude_paths, console=console)

    result = classify_size(aggregate_changes(filter_excluded(stats, exclude_paths)), size_thresholds)
    format_classification(result, size_thresholds.managed_labels().index(result.label), console=console)


if __name__ == "__main__":
    app()
