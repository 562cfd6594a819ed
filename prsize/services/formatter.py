from logging import getLogger

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from prsize.models import ClassificationResult, FileChangeStat

from .exclusions import is_excluded

logger = getLogger(__name__)

# Color per tier position, XL last
TIER_COLORS = ["blue", "green", "yellow", "orange3", "red"]


def format_classification(result: ClassificationResult, tier_index: int, console: Console | None = None) -> None:
    """Display the resulting size label in a panel.

    Args:
        result: Classification to display
        tier_index: Position of the matched tier (0 for XS, 4 for XL)
        console: Console to print to (default: a new Console)
    """
    console = console or Console()
    color = TIER_COLORS[min(tier_index, len(TIER_COLORS) - 1)]
    body = f"[bold {color}]{escape(result.label)}[/bold {color}] ({result.total_changes} changed lines)"
    if result.is_oversized:
        body += "\n[red]Oversized: this pull request exceeds the largest size tier.[/red]"
    console.print(Panel(body, title="PR Size", border_style=color))


def format_file_stats(
    stats: list[FileChangeStat],
    exclude_paths: list[str],
    console: Console | None = None,
) -> None:
    """Display per-file diffstat counts, marking excluded files.

    Args:
        stats: Per-file statistics before exclusion
        exclude_paths: Exclusion glob patterns
        console: Console to print to (default: a new Console)
    """
    console = console or Console()

    if not stats:
        console.print(
            Panel(
                "[yellow]No changed files found.[/yellow]",
                title="No Changes",
                border_style="yellow",
            )
        )
        return

    table = Table(title="Changed Files", show_header=True, header_style="bold magenta")
    table.add_column("File", style="white")
    table.add_column("Inserted", style="green", justify="right", no_wrap=True)
    table.add_column("Deleted", style="red", justify="right", no_wrap=True)
    table.add_column("Modified", style="yellow", justify="right", no_wrap=True)
    table.add_column("Excluded by", style="dim")

    for stat in stats:
        matched = is_excluded(stat.path, exclude_paths)
        path_display = f"[dim strike]{escape(stat.path)}[/dim strike]" if matched else escape(stat.path)
        table.add_row(
            path_display,
            str(stat.inserted),
            str(stat.deleted),
            str(stat.modified),
            escape(matched or ""),
        )

    console.print(table)
