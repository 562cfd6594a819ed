"""PR size aggregation and categorization utilities."""

from collections.abc import Iterable
from logging import getLogger

from prsize.models import ClassificationResult, FileChangeStat, SizeThresholds

logger = getLogger(__name__)


def aggregate_changes(stats: Iterable[FileChangeStat]) -> int:
    """Sum inserted, deleted and modified lines over all files.

    Args:
        stats: Per-file change statistics (already filtered)

    Returns:
        Total changed lines, 0 for no files
    """
    return sum(stat.changed_lines for stat in stats)


def classify_size(total_changes: int, thresholds: SizeThresholds) -> ClassificationResult:
    """Categorize a PR by its total changed lines.

    Tiers are checked in ascending order and the first one whose ``less_than``
    is strictly greater than the total wins, so a total equal to a bound falls
    into the next tier. Anything at or above the largest bound is XL.

    Args:
        total_changes: Total changed lines
        thresholds: Validated size thresholds

    Returns:
        Classification with the label to apply and whether the PR is oversized
    """
    for tier in thresholds.tiers():
        if total_changes < tier.less_than:
            return ClassificationResult(label=tier.label, is_oversized=False, total_changes=total_changes)

    return ClassificationResult(label=thresholds.label_if_xl, is_oversized=True, total_changes=total_changes)
