"""Configuration loading for issue-creator."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILE_NAME = "issue-creator.yaml"
ENV_PREFIX = "ISSUE_CREATOR_"

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class Config:
    """Settings for one issue-creator run.

    Attributes:
        github_access_token: Token used for both the REST and GraphQL APIs.
        close_last_issue: Close the prior ticket after creating the new one.
        check_before_create_issue: Shell script that must exit 0 before creation.
            None or empty disables the check.
        github_api_url: GitHub REST API base URL (for testing/enterprise).
        github_graphql_url: GitHub GraphQL endpoint (for testing/enterprise).
    """

    github_access_token: str
    close_last_issue: bool = False
    check_before_create_issue: str | None = None
    github_api_url: str = DEFAULT_API_URL
    github_graphql_url: str = DEFAULT_GRAPHQL_URL

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Create config from a merged settings mapping.

        Args:
            data: Settings keyed by field name.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If the token is missing or a value is malformed.
        """
        token = data.get("github_access_token")
        if not token:
            raise ConfigError(
                "Missing GitHub access token "
                f"(set github_access_token, {ENV_PREFIX}GITHUB_ACCESS_TOKEN or GITHUB_TOKEN)"
            )

        script = data.get("check_before_create_issue")
        return cls(
            github_access_token=str(token),
            close_last_issue=_parse_bool("close_last_issue", data.get("close_last_issue", False)),
            check_before_create_issue=str(script) if script else None,
            github_api_url=str(data.get("github_api_url") or DEFAULT_API_URL),
            github_graphql_url=str(data.get("github_graphql_url") or DEFAULT_GRAPHQL_URL),
        )


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"Invalid boolean for {key}: {value!r}")


def _read_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect settings from ISSUE_CREATOR_* environment variables."""
    data: dict[str, Any] = {}
    token = env.get(f"{ENV_PREFIX}GITHUB_ACCESS_TOKEN") or env.get("GITHUB_TOKEN")
    if token:
        data["github_access_token"] = token

    for key in (
        "close_last_issue",
        "check_before_create_issue",
        "github_api_url",
        "github_graphql_url",
    ):
        value = env.get(ENV_PREFIX + key.upper())
        if value is not None:
            data[key] = value
    return data


def _read_file(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")
    return data


def load_config(
    config_path: Path | str | None = None,
    overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> Config:
    """Load configuration from file, environment and explicit overrides.

    Later sources win: YAML file, then environment, then overrides. Overrides
    whose value is None are ignored so unset CLI options fall through.

    Args:
        config_path: Path to issue-creator.yaml. When None, the file is looked
            up from the working directory and is optional.
        overrides: Values taken from the command line.
        env: Environment mapping. Defaults to os.environ.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If an explicit file is missing, the file is invalid, or
            the merged settings are incomplete.
    """
    if env is None:
        env = os.environ

    data: dict[str, Any] = {}
    if config_path is not None:
        data.update(_read_file(Path(config_path)))
    else:
        found = find_config()
        if found is not None:
            data.update(_read_file(found))

    data.update(_read_env(env))

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})

    return Config.from_dict(data)


def find_config(start_path: Path | str | None = None) -> Path | None:
    """Find issue-creator.yaml by walking up the directory tree.

    Args:
        start_path: Starting directory. Defaults to current directory.

    Returns:
        Path to the config file, or None if there is none.
    """
    current = Path.cwd() if start_path is None else Path(start_path)
    current = current.resolve()

    for directory in (current, *current.parents):
        config_path = directory / CONFIG_FILE_NAME
        if config_path.exists():
            return config_path

    return None
