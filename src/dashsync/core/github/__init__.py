"""
GitHub integration for dashsync.

Reads stored dashboards and publishes changes as a pull request via the
GitHub REST API.
"""

from dashsync.core.github.client import GitHubClient
from dashsync.core.github.models import CommitRef, PullRequest, RepoInfo, TreeEntry

__all__ = [
    "CommitRef",
    "GitHubClient",
    "PullRequest",
    "RepoInfo",
    "TreeEntry",
]
