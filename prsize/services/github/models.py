import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from prsize.exceptions import EventError


@dataclass
class PullRequestInfo:
    """Domain model for the pull request that triggered the workflow."""

    number: int
    repository: str  # owner/name
    base_sha: str
    additions: int = 0
    deletions: int = 0
    url: str | None = None

    @classmethod
    def from_event(cls, event: dict[str, Any], repository: str | None = None) -> "PullRequestInfo":
        """Build from a ``pull_request`` webhook payload.

        Args:
            event: Decoded event payload
            repository: Fallback ``owner/name`` when the payload has no repository block

        Returns:
            PullRequestInfo instance

        Raises:
            EventError: If the payload has no usable pull request
        """
        pull_request = event.get("pull_request")
        if not isinstance(pull_request, dict):
            raise EventError("Event payload does not contain a pull request")

        repo_name = (event.get("repository") or {}).get("full_name") or repository
        number = pull_request.get("number", event.get("number"))
        base_sha = (pull_request.get("base") or {}).get("sha")
        if not repo_name or not isinstance(number, int) or not base_sha:
            raise EventError("Pull request event is missing the repository, number or base commit")

        return cls(
            number=number,
            repository=repo_name,
            base_sha=base_sha,
            additions=pull_request.get("additions") or 0,
            deletions=pull_request.get("deletions") or 0,
            url=pull_request.get("html_url"),
        )

    @classmethod
    def from_event_file(cls, path: str | Path, repository: str | None = None) -> "PullRequestInfo":
        """Load the event payload GitHub Actions writes to ``GITHUB_EVENT_PATH``."""
        try:
            event = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise EventError(f"Unable to read event payload from {path}: {e}") from e
        if not isinstance(event, dict):
            raise EventError(f"Event payload in {path} is not a JSON object")
        return cls.from_event(event, repository=repository)
