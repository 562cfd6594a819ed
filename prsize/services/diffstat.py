"""Sources of change volume for a pull request.

Two strategies estimate how many lines a pull request changes:

- ``DiffstatSource`` diffs the checked out tree against the base commit and
  pipes the result through ``diffstat``. It yields per-file counts, so
  exclusion patterns apply.
- ``MetadataSource`` uses the additions and deletions GitHub already reports
  in the event payload. It needs no checkout but cannot exclude files.
"""

import csv
import io
import subprocess
from collections.abc import Callable
from logging import getLogger
from typing import Protocol

from prsize.exceptions import ExternalToolError
from prsize.models import FileChangeStat

from .exclusions import filter_excluded
from .pr_size import aggregate_changes

logger = getLogger(__name__)

DiffRunner = Callable[[str], bytes]

DIFFSTAT_COLUMNS = ("inserted", "deleted", "modified")


class ChangeSource(Protocol):
    """Anything that can estimate the number of changed lines of a pull request."""

    def total_changes(self, exclude_paths: list[str]) -> int: ...


def parse_diffstat_output(output: bytes) -> list[FileChangeStat]:
    """Parse the CSV output of ``diffstat -t``.

    The first row is the ``INSERTED,DELETED,MODIFIED,FILENAME`` header and is
    skipped. Filenames containing commas are rejoined from the trailing columns.

    Args:
        output: Raw diffstat output

    Returns:
        One FileChangeStat per listed file

    Raises:
        ExternalToolError: If a row is too short or a count is not a non-negative integer
    """
    try:
        text = output.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ExternalToolError(f"diffstat output is not valid UTF-8: {e}") from e

    stats: list[FileChangeStat] = []
    rows = csv.reader(io.StringIO(text))
    for line_number, row in enumerate(rows, start=1):
        if line_number == 1 or not row:
            continue
        if len(row) < 4:
            raise ExternalToolError(f"Malformed diffstat row {line_number}: {','.join(row)!r}")

        counts: dict[str, int] = {}
        for column, raw in zip(DIFFSTAT_COLUMNS, row[:3]):
            try:
                value = int(raw.strip())
            except ValueError as e:
                raise ExternalToolError(
                    f"Invalid {column} count {raw!r} on diffstat row {line_number}"
                ) from e
            if value < 0:
                raise ExternalToolError(f"Negative {column} count {value} on diffstat row {line_number}")
            counts[column] = value

        stats.append(FileChangeStat(path=",".join(row[3:]), **counts))
    return stats


def _run(args: list[str], stdin: bytes | None = None) -> bytes:
    try:
        completed = subprocess.run(args, input=stdin, capture_output=True, check=False)
    except OSError as e:
        raise ExternalToolError(f"Unable to run {args[0]}: {e}") from e

    if completed.returncode != 0:
        stderr = completed.stderr.decode("utf-8", errors="replace").strip()
        raise ExternalToolError(f"{' '.join(args)} exited with status {completed.returncode}: {stderr}")
    return completed.stdout


def run_git_diffstat(base_sha: str, workspace: str | None = None) -> bytes:
    """Run ``git diff <base_sha> | diffstat -mbqt`` in the current directory.

    Args:
        base_sha: Commit to diff the working tree against
        workspace: Checkout directory to mark as a git safe directory first

    Returns:
        Raw diffstat CSV output

    Raises:
        ExternalToolError: If git or diffstat is missing or exits non-zero
    """
    if workspace:
        _run(["git", "config", "--global", "--add", "safe.directory", workspace])

    diff = _run(["git", "diff", base_sha])
    output = _run(["diffstat", "-mbqt"], stdin=diff)
    logger.debug(f"Diffstat output:\n{output.decode('utf-8', errors='replace')}")
    return output


class DiffstatSource:
    """Per-file change counts from diffstat, with exclusions applied."""

    def __init__(self, base_sha: str, diff_runner: DiffRunner = run_git_diffstat) -> None:
        """Initialize the source.

        Args:
            base_sha: Base commit of the pull request
            diff_runner: Callable returning diffstat CSV output for a base commit
        """
        self.base_sha = base_sha
        self.diff_runner = diff_runner

    def collect(self) -> list[FileChangeStat]:
        """Run the diff and parse its per-file statistics."""
        return parse_diffstat_output(self.diff_runner(self.base_sha))

    def total_changes(self, exclude_paths: list[str]) -> int:
        stats = filter_excluded(self.collect(), exclude_paths)
        return aggregate_changes(stats)


class MetadataSource:
    """Change volume from the additions and deletions reported by GitHub."""

    def __init__(self, additions: int, deletions: int) -> None:
        self.additions = additions
        self.deletions = deletions

    def total_changes(self, exclude_paths: list[str]) -> int:
        if exclude_paths:
            logger.warning("Exclusion patterns are ignored when using pull request metadata")
        return max(self.additions, self.deletions)
