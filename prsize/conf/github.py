from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from prsize.exceptions import ConfigurationError

# pull_request_target checks out the base branch, which would diff to nothing
PULL_REQUEST_EVENTS = frozenset({"pull_request"})


class GitHubContextSettings(BaseSettings):
    """Runtime context exported by GitHub Actions to every step."""

    github_actions: bool = Field(
        default=False,
        description="Set to true by GitHub Actions when running in a workflow",
    )
    github_event_name: str | None = Field(
        default=None,
        description="Name of the event that triggered the workflow",
    )
    github_event_path: str | None = Field(
        default=None,
        description="Path to the file holding the webhook event payload",
    )
    github_repository: str | None = Field(
        default=None,
        description="Repository in owner/name form",
    )
    github_workspace: str | None = Field(
        default=None,
        description="Checkout directory, marked as a git safe directory before diffing",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API (differs on GitHub Enterprise Server)",
    )

    @property
    def is_pull_request_event(self) -> bool:
        return self.github_event_name in PULL_REQUEST_EVENTS


def load_context() -> GitHubContextSettings:
    """Read the GitHub Actions runtime context from the environment.

    Raises:
        ConfigurationError: If a GITHUB_* variable has an invalid value
    """
    try:
        return GitHubContextSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid GitHub Actions environment: {e}") from e
