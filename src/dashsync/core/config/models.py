"""
Configuration data model for dashsync.

Command-line flags and environment variables are merged into a single
validated ``SyncConfig``. Credentials are held as ``SecretStr`` so they
never show up in reprs or log lines.
"""

import os
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from dashsync.core.exceptions import ConfigError

DEFAULT_BRANCH = "grafana-dashboards"
DEFAULT_TIMEOUT = 10.0
DEFAULT_GITHUB_API_URL = "https://api.github.com"

GRAFANA_CREDENTIALS_MESSAGE = (
    "GRAFANA_USERNAME and GRAFANA_PASSWORD environment variables are required"
)
GITHUB_TOKEN_MESSAGE = "GITHUB_TOKEN environment variable is required"


class SyncConfig(BaseModel):
    """
    Settings for one sync run.

    Example:
        >>> config = SyncConfig.from_env(
        ...     grafana_url="https://grafana.example.com",
        ...     owner="acme",
        ...     repo="infra",
        ...     directory="grafana/dashboards",
        ... )
        >>> config.github_token.get_secret_value()
    """

    grafana_url: str = Field(..., min_length=1, description="Grafana base URL")
    owner: str = Field(..., min_length=1, description="GitHub repository owner")
    repo: str = Field(..., min_length=1, description="GitHub repository name")
    directory: str = Field(
        ...,
        description="Repository directory dashboards are stored in"
    )

    grafana_username: str = Field(..., min_length=1, description="Grafana basic auth user")
    grafana_password: SecretStr = Field(..., description="Grafana basic auth password")
    github_token: SecretStr = Field(..., description="GitHub access token")

    branch: str = Field(
        default=DEFAULT_BRANCH,
        min_length=1,
        description="Name of the branch the pull request is opened from"
    )
    base_branch: Optional[str] = Field(
        default=None,
        min_length=1,
        description="Branch dashboards are compared against and merged into "
        "(None = the repository default branch)"
    )
    unique_branch: bool = Field(
        default=False,
        description="Append a UTC timestamp to the branch name"
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Per-request timeout in seconds"
    )
    max_concurrency: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum simultaneous dashboard fetches (None = unbounded)"
    )
    github_api_url: str = Field(
        default=DEFAULT_GITHUB_API_URL,
        description="GitHub REST API base URL"
    )
    dry_run: bool = Field(
        default=False,
        description="Detect changes without publishing them"
    )

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    @field_validator("directory")
    @classmethod
    def normalize_directory(cls, v: str) -> str:
        """Strip surrounding slashes so paths join cleanly."""
        return v.strip().strip("/")

    @field_validator("grafana_url", "github_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **options: Any,
    ) -> "SyncConfig":
        """
        Build a config from CLI options plus credentials in the environment.

        Grafana credentials are checked before the GitHub token, and both
        before any network access happens.

        Args:
            environ: Environment mapping (defaults to ``os.environ``)
            **options: Values for the non-credential fields; ``None`` values
                are dropped so model defaults apply

        Returns:
            Validated SyncConfig

        Raises:
            ConfigError: If a required credential is missing
        """
        env = os.environ if environ is None else environ

        grafana_username = env.get("GRAFANA_USERNAME")
        grafana_password = env.get("GRAFANA_PASSWORD")
        if not grafana_username or not grafana_password:
            raise ConfigError(GRAFANA_CREDENTIALS_MESSAGE)

        github_token = env.get("GITHUB_TOKEN")
        if not github_token:
            raise ConfigError(GITHUB_TOKEN_MESSAGE)

        values = {k: v for k, v in options.items() if v is not None}
        if env.get("GITHUB_API_URL") and "github_api_url" not in values:
            values["github_api_url"] = env["GITHUB_API_URL"]

        return cls(
            grafana_username=grafana_username,
            grafana_password=SecretStr(grafana_password),
            github_token=SecretStr(github_token),
            **values,
        )

    def file_path(self, filename: str) -> str:
        """Repository path for a dashboard file."""
        if not self.directory:
            return filename
        return f"{self.directory}/{filename}"
