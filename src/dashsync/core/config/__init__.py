"""
Configuration model and environment loading.

Flags and environment variables are merged into one validated
``SyncConfig`` before any network access.
"""

from .env import load_env_file
from .models import (
    DEFAULT_BRANCH,
    DEFAULT_GITHUB_API_URL,
    DEFAULT_TIMEOUT,
    GITHUB_TOKEN_MESSAGE,
    GRAFANA_CREDENTIALS_MESSAGE,
    SyncConfig,
)

__all__ = [
    "DEFAULT_BRANCH",
    "DEFAULT_GITHUB_API_URL",
    "DEFAULT_TIMEOUT",
    "GITHUB_TOKEN_MESSAGE",
    "GRAFANA_CREDENTIALS_MESSAGE",
    "SyncConfig",
    "load_env_file",
]
