"""
GitHub data models for dashsync.

Defines Pydantic models for the repository coordinates and the git data
objects created while publishing dashboards.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

REGULAR_FILE_MODE = "100644"


class RepoInfo(BaseModel):
    """
    GitHub repository coordinates.

    Example:
        >>> RepoInfo(owner="acme", repo="infra").full_name
        'acme/infra'
    """

    owner: str = Field(..., description="Repository owner (user or organization)")
    repo: str = Field(..., description="Repository name")

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def full_name(self) -> str:
        """Full repository name (owner/repo)."""
        return f"{self.owner}/{self.repo}"

    @computed_field
    @property
    def url(self) -> str:
        """GitHub URL for the repository."""
        return f"https://github.com/{self.owner}/{self.repo}"


class CommitRef(BaseModel):
    """A commit SHA together with the SHA of its tree."""

    sha: str
    tree_sha: str

    @classmethod
    def from_api(cls, data: dict[str, object]) -> CommitRef:
        """
        Create CommitRef from a commits API entry.

        Accepts both the ``GET /commits`` shape (tree under ``commit.tree``)
        and the ``POST /git/commits`` shape (tree at the top level).
        """
        commit = data.get("commit")
        tree = commit.get("tree") if isinstance(commit, dict) else data.get("tree")
        if not isinstance(tree, dict):
            raise ValueError("commit entry has no tree")
        return cls(sha=str(data["sha"]), tree_sha=str(tree["sha"]))


class TreeEntry(BaseModel):
    """One blob in a ``POST /git/trees`` request, given inline as content."""

    path: str
    content: str
    mode: Literal["100644"] = REGULAR_FILE_MODE
    type: Literal["blob"] = "blob"


class PullRequest(BaseModel):
    """The fields of a created pull request that dashsync reports."""

    number: int
    url: str = Field(default="", alias="html_url")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
