"""Error types raised by the size labeling pipeline.

Every error is fatal for a run. The CLI turns them into a message and a
non-zero exit code.
"""


class PRSizeError(Exception):
    """Base class for all prsize errors."""


class ConfigurationError(PRSizeError):
    """Required settings are missing or a threshold/exclusion document is invalid."""


class EventError(ConfigurationError):
    """The GitHub event payload could not be read or has no pull request."""


class ExternalToolError(PRSizeError):
    """git or diffstat failed, or their output could not be parsed."""


class APIError(PRSizeError):
    """A GitHub API call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PolicyFailure(PRSizeError):
    """The pull request is XL and the fail-on-XL policy is enabled."""
