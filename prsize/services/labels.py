"""Keep exactly one size label on a pull request."""

from collections.abc import Collection
from logging import getLogger

from prsize.exceptions import APIError

from .github.client import GitHubAPIClient

logger = getLogger(__name__)


async def reconcile_size_labels(
    client: GitHubAPIClient,
    repository: str,
    number: int,
    label: str,
    managed_labels: Collection[str],
) -> None:
    """Replace whatever size label a pull request carries with ``label``.

    Every currently applied label belonging to ``managed_labels`` is removed,
    including ``label`` itself, then ``label`` is added. Running it again with
    the same label leaves the pull request unchanged. Labels outside the
    managed set are never touched.

    A failed removal does not stop the other removals, but the run still fails
    and the new label is not added.

    Args:
        client: Authenticated GitHub API client
        repository: Repository in ``owner/name`` form
        number: Pull request number
        label: Size label to apply
        managed_labels: All size labels owned by prsize

    Raises:
        APIError: If listing, removing or adding labels fails
    """
    current = [item["name"] for item in await client.list_issue_labels(repository, number)]
    stale = [name for name in current if name in managed_labels]

    failed: list[str] = []
    for name in stale:
        try:
            await client.remove_issue_label(repository, number, name)
            logger.info(f"Removed label '{name}' from {repository}#{number}")
        except APIError as e:
            logger.error(f"Failed to remove label '{name}' from {repository}#{number}: {e}")
            failed.append(name)

    if failed:
        raise APIError(f"Failed to remove size labels from {repository}#{number}: {', '.join(failed)}")

    await client.add_issue_labels(repository, number, [label])
    logger.info(f"Added label '{label}' to {repository}#{number}")
