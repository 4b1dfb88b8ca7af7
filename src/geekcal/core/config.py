"""Remote store configuration.

The configuration file is YAML with a single ``github`` section:

    github:
      owner: alice
      repo: calendar-data
      path: calendar.json
      token: ghp_xxx

``GITHUB_TOKEN`` in the environment overrides the file token.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import yaml

from geekcal.core.errors import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"
TOKEN_ENV_VAR = "GITHUB_TOKEN"

REQUIRED_FIELDS = ("owner", "repo", "path", "token")


@dataclass
class RemoteConfig:
    """Configuration for the remote calendar file.

    Attributes:
        owner: Repository owner (user or organization).
        repo: Repository name.
        path: Path of the calendar file inside the repository.
        token: Personal access token.
        api_url: Base URL of the GitHub REST API.
        timeout: Request timeout in seconds.
    """

    owner: str
    repo: str
    path: str
    token: str
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0

    def __post_init__(self) -> None:
        """Normalize API URL and file path."""
        self.api_url = self.api_url.rstrip("/")
        self.path = self.path.strip("/")

    @property
    def remote_key(self) -> str:
        """Key identifying this remote in the sync metadata file."""
        return f"{self.owner}/{self.repo}:{self.path}"


def load_remote_config(
    config_file: Path,
    environ: Mapping[str, str] | None = None,
) -> RemoteConfig:
    """Load the remote configuration from a YAML file.

    Args:
        config_file: Path to config.yml.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Validated RemoteConfig.

    Raises:
        ConfigurationError: If the file is missing, unparsable, or lacks
            a required field.
    """
    if environ is None:
        environ = os.environ

    if not config_file.exists():
        raise ConfigurationError(
            f"{config_file} not found. Please create it with your GitHub repository details."
        )

    try:
        data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
    except (yaml.YAMLError, OSError) as e:
        raise ConfigurationError(f"Could not read {config_file}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("github"), dict):
        raise ConfigurationError(f"{config_file} has no 'github' section")

    section = {k: v for k, v in data["github"].items() if v is not None}
    if environ.get(TOKEN_ENV_VAR):
        section["token"] = environ[TOKEN_ENV_VAR]

    missing = [name for name in REQUIRED_FIELDS if not str(section.get(name, "")).strip()]
    if missing:
        raise ConfigurationError(
            f"Missing required setting(s) in {config_file}: {', '.join(missing)}"
        )

    try:
        timeout = float(section.get("timeout", 30.0))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid timeout in {config_file}: {e}") from e

    return RemoteConfig(
        owner=str(section["owner"]),
        repo=str(section["repo"]),
        path=str(section["path"]),
        token=str(section["token"]),
        api_url=str(section.get("api_url") or DEFAULT_API_URL),
        timeout=timeout,
    )
