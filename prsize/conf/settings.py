from dataclasses import dataclass, field
from enum import Enum
from logging import getLogger
from typing import Any

import yaml
from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from prsize.exceptions import ConfigurationError
from prsize.models import SizeThresholds

logger = getLogger(__name__)


class ChangeStrategy(str, Enum):
    """Supported ways of measuring a pull request."""

    DIFFSTAT = "diffstat"
    METADATA = "metadata"


class ActionSettings(BaseSettings):
    """Action inputs, exposed by GitHub Actions as INPUT_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="INPUT_", extra="ignore")

    github_token: SecretStr = Field(
        description="Token used to manage labels and comments on the pull request",
    )
    thresholds: str = Field(
        default="",
        description="YAML document overriding the default size thresholds",
    )
    exclude_paths: str = Field(
        default="",
        description="YAML list of glob patterns excluded from the change count",
    )
    strategy: ChangeStrategy = Field(
        default=ChangeStrategy.DIFFSTAT,
        description="How changed lines are measured (diffstat or metadata)",
    )


@dataclass(frozen=True)
class ActionConfig:
    """Validated configuration for one run, built once at start up."""

    github_token: SecretStr
    thresholds: SizeThresholds = field(default_factory=SizeThresholds)
    exclude_paths: list[str] = field(default_factory=list)
    strategy: ChangeStrategy = ChangeStrategy.DIFFSTAT


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_yaml(document: str, name: str) -> Any:
    try:
        return yaml.safe_load(document)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {name}: {e}") from e


def parse_thresholds(document: str | None) -> SizeThresholds:
    """Build size thresholds from a YAML document.

    Keys present in the document override the defaults, everything else keeps
    its default value, so ``xs: {less_than: 5}`` keeps the ``size/xs`` label.

    Args:
        document: YAML text, empty or None for the defaults

    Returns:
        Validated thresholds

    Raises:
        ConfigurationError: If the YAML is malformed or the thresholds are invalid
    """
    data = _load_yaml(document or "", "thresholds")
    if data is None:
        return SizeThresholds()
    if not isinstance(data, dict):
        raise ConfigurationError("thresholds must be a YAML mapping")

    try:
        return SizeThresholds.model_validate(_deep_merge(SizeThresholds().model_dump(), data))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid thresholds: {e}") from e


def parse_exclude_paths(document: str | None) -> list[str]:
    """Parse a YAML list of glob patterns.

    Raises:
        ConfigurationError: If the YAML is malformed or not a list of strings
    """
    data = _load_yaml(document or "", "exclude_paths")
    if data is None:
        return []
    if isinstance(data, str):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(pattern, str) for pattern in data):
        raise ConfigurationError("exclude_paths must be a YAML list of glob patterns")
    return [pattern for pattern in data if pattern]


def load_config() -> ActionConfig:
    """Read the action inputs from the environment and validate them.

    Raises:
        ConfigurationError: If the token is missing or an input is invalid
    """
    try:
        settings = ActionSettings()  # type: ignore[call-arg]
    except ValidationError as e:
        raise ConfigurationError(f"Required configuration is missing or invalid: {e}") from e

    if not settings.github_token.get_secret_value():
        raise ConfigurationError("INPUT_GITHUB_TOKEN is required")

    config = ActionConfig(
        github_token=settings.github_token,
        thresholds=parse_thresholds(settings.thresholds),
        exclude_paths=parse_exclude_paths(settings.exclude_paths),
        strategy=settings.strategy,
    )
    logger.debug(
        f"Loaded configuration: strategy={config.strategy.value}, "
        f"exclude_paths={config.exclude_paths}, labels={config.thresholds.managed_labels()}"
    )
    return config
