from typing import Any

import pytest
from pydantic import SecretStr

from prsize.conf.settings import ActionConfig
from prsize.exceptions import APIError
from prsize.models import SizeThresholds
from prsize.services.github.client import GitHubAPIClient
from prsize.services.github.models import PullRequestInfo

GITHUB_ENV_VARS = [
    "GITHUB_ACTIONS",
    "GITHUB_EVENT_NAME",
    "GITHUB_EVENT_PATH",
    "GITHUB_REPOSITORY",
    "GITHUB_WORKSPACE",
    "GITHUB_API_URL",
    "INPUT_GITHUB_TOKEN",
    "INPUT_THRESHOLDS",
    "INPUT_EXCLUDE_PATHS",
    "INPUT_STRATEGY",
]


class FakeGitHub:
    """In-memory stand-in for the label and comment endpoints of GitHubAPIClient."""

    def __init__(self, labels: list[str] | None = None, failing_removals: set[str] | None = None) -> None:
        self.labels: list[str] = list(labels or [])
        self.comments: list[str] = []
        self.calls: list[tuple[str, Any]] = []
        self.failing_removals = failing_removals or set()

    async def list_issue_labels(self, repository: str, number: int) -> list[dict[str, Any]]:
        self.calls.append(("list", None))
        return [{"name": name} for name in self.labels]

    async def remove_issue_label(self, repository: str, number: int, name: str) -> None:
        self.calls.append(("remove", name))
        if name in self.failing_removals:
            raise APIError(f"DELETE label {name} failed with status 500", status_code=500)
        if name not in self.labels:
            raise APIError(f"Label does not exist: {name}", status_code=404)
        self.labels.remove(name)

    async def add_issue_labels(self, repository: str, number: int, labels: list[str]) -> list[dict[str, Any]]:
        self.calls.append(("add", list(labels)))
        for name in labels:
            if name not in self.labels:
                self.labels.append(name)
        return [{"name": name} for name in self.labels]

    async def create_issue_comment(self, repository: str, number: int, body: str) -> dict[str, Any]:
        self.calls.append(("comment", body))
        self.comments.append(body)
        return {"id": len(self.comments), "body": body}


@pytest.fixture(autouse=True)
def clean_github_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the CI environment running the tests from leaking into settings."""
    for name in GITHUB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_client() -> GitHubAPIClient:
    """Create a test GitHub API client for mocking."""
    return GitHubAPIClient(token=SecretStr("test_token"))


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def default_thresholds() -> SizeThresholds:
    return SizeThresholds()


@pytest.fixture
def action_config() -> ActionConfig:
    return ActionConfig(github_token=SecretStr("test_token"))


@pytest.fixture
def pull_request() -> PullRequestInfo:
    return PullRequestInfo(
        number=42,
        repository="owner/repo",
        base_sha="abc123",
        additions=30,
        deletions=12,
        url="https://github.com/owner/repo/pull/42",
    )
