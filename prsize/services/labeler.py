"""Label a pull request by size: measure, classify, reconcile, enforce."""

from logging import getLogger

from prsize.conf.settings import ActionConfig, ChangeStrategy
from prsize.exceptions import PolicyFailure
from prsize.models import ClassificationResult

from .diffstat import ChangeSource, DiffRunner, DiffstatSource, MetadataSource, run_git_diffstat
from .github.client import GitHubAPIClient
from .github.models import PullRequestInfo
from .labels import reconcile_size_labels
from .pr_size import classify_size

logger = getLogger(__name__)


def build_change_source(
    config: ActionConfig,
    pull_request: PullRequestInfo,
    diff_runner: DiffRunner = run_git_diffstat,
) -> ChangeSource:
    """Pick the change source matching the configured strategy."""
    if config.strategy == ChangeStrategy.METADATA:
        return MetadataSource(pull_request.additions, pull_request.deletions)
    return DiffstatSource(pull_request.base_sha, diff_runner)


def measure_pull_request(
    config: ActionConfig,
    pull_request: PullRequestInfo,
    diff_runner: DiffRunner = run_git_diffstat,
) -> ClassificationResult:
    """Count the changed lines of a pull request and classify them.

    Raises:
        ExternalToolError: If the diff could not be produced or parsed
    """
    source = build_change_source(config, pull_request, diff_runner)
    total_changes = source.total_changes(config.exclude_paths)
    logger.info(f"Total changes: {total_changes} lines")

    result = classify_size(total_changes, config.thresholds)
    logger.info(f"Label: {result.label}, oversized: {result.is_oversized}")
    return result


async def label_pull_request(
    config: ActionConfig,
    pull_request: PullRequestInfo,
    client: GitHubAPIClient,
    diff_runner: DiffRunner = run_git_diffstat,
) -> ClassificationResult:
    """Apply the size label to a pull request and enforce the XL policy.

    Nothing is written to GitHub until the size is known. For an XL pull
    request the comment is posted only after the label is in place, and the
    policy failure is raised only after the comment.

    Args:
        config: Validated action configuration
        pull_request: Pull request from the triggering event
        client: Authenticated GitHub API client (inside its context manager)
        diff_runner: Callable producing diffstat output for the base commit

    Returns:
        The classification that was applied

    Raises:
        ExternalToolError: If measuring the change failed
        APIError: If a GitHub call failed
        PolicyFailure: If the pull request is XL and ``fail_if_xl`` is set
    """
    result = measure_pull_request(config, pull_request, diff_runner)
    thresholds = config.thresholds

    await reconcile_size_labels(
        client,
        pull_request.repository,
        pull_request.number,
        result.label,
        thresholds.managed_labels(),
    )

    if not result.is_oversized:
        logger.debug("Pull request successfully labeled")
        return result

    if thresholds.message_if_xl:
        await client.create_issue_comment(pull_request.repository, pull_request.number, thresholds.message_if_xl)
        logger.info(f"Posted XL comment on {pull_request.repository}#{pull_request.number}")
    else:
        logger.debug("No message_if_xl configured, skipping comment")

    if thresholds.fail_if_xl:
        raise PolicyFailure(
            f"PR size is XL ({result.total_changes} lines, limit {thresholds.l.less_than}), make it shorter, please!"
        )

    logger.debug("Pull request successfully labeled")
    return result
