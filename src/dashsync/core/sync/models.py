"""
Data models for the sync service.

Defines Pydantic models for change candidates and the results of a run.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from dashsync.core.grafana.models import DashboardRecord


class ChangeCandidate(BaseModel):
    """A fetched dashboard and whether it differs from the stored copy."""

    record: DashboardRecord
    needs_update: bool

    @property
    def filename(self) -> str:
        return self.record.filename


class PublishResult(BaseModel):
    """
    Everything created by publishing a change set.

    Example:
        >>> result.pull_request_url
        'https://github.com/acme/infra/pull/12'
    """

    branch: str = Field(..., description="Branch the pull request is opened from")
    tree_sha: str = Field(..., description="SHA of the new tree")
    commit_sha: str = Field(..., description="SHA of the new commit")
    pull_request_number: int = Field(..., description="Number of the pull request")
    pull_request_url: str = Field(default="", description="HTML URL of the pull request")
    files: list[str] = Field(default_factory=list, description="Repository paths written")


class SyncResult(BaseModel):
    """Outcome of one sync run."""

    dashboards_checked: int = Field(default=0, ge=0)
    changed: list[DashboardRecord] = Field(default_factory=list)
    published: PublishResult | None = None
    dry_run: bool = False

    @property
    def has_changes(self) -> bool:
        return bool(self.changed)
