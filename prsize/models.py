"""Domain models for change statistics and size thresholds."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_XL_MESSAGE = "This PR is too big. Please, split it."


@dataclass(frozen=True)
class FileChangeStat:
    """Line change counts for a single file, as reported by diffstat."""

    path: str
    inserted: int
    deleted: int
    modified: int

    @property
    def changed_lines(self) -> int:
        return self.inserted + self.deleted + self.modified


@dataclass(frozen=True)
class ClassificationResult:
    """Outcome of classifying a pull request's total change count."""

    label: str
    is_oversized: bool
    total_changes: int


class SizeTier(BaseModel):
    """A size bucket with an exclusive upper bound on changed lines."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    less_than: int = Field(ge=0, description="Exclusive upper bound on changed lines")
    label: str = Field(min_length=1, description="Label applied when the tier matches")


class SizeThresholds(BaseModel):
    """Ordered size tiers plus the XL overflow policy."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    xs: SizeTier = SizeTier(less_than=10, label="size/xs")
    s: SizeTier = SizeTier(less_than=100, label="size/s")
    m: SizeTier = SizeTier(less_than=500, label="size/m")
    l: SizeTier = SizeTier(less_than=1000, label="size/l")  # noqa: E741
    label_if_xl: str = Field(default="XL", min_length=1)
    fail_if_xl: bool = False
    message_if_xl: str = DEFAULT_XL_MESSAGE

    @model_validator(mode="after")
    def validate_tiers(self) -> "SizeThresholds":
        """Check tier bounds are strictly increasing and labels are unique."""
        tiers = self.tiers()
        for lower, upper in zip(tiers, tiers[1:]):
            if upper.less_than <= lower.less_than:
                raise ValueError(
                    f"Size thresholds must be strictly increasing: "
                    f"'{upper.label}' ({upper.less_than}) is not above '{lower.label}' ({lower.less_than})"
                )

        labels = self.managed_labels()
        duplicates = sorted({label for label in labels if labels.count(label) > 1})
        if duplicates:
            raise ValueError(f"Size labels must be unique, duplicated: {', '.join(duplicates)}")
        return self

    def tiers(self) -> list[SizeTier]:
        """Finite tiers in ascending order."""
        return [self.xs, self.s, self.m, self.l]

    def managed_labels(self) -> list[str]:
        """All labels owned by prsize, including the XL label."""
        return [tier.label for tier in self.tiers()] + [self.label_if_xl]
