"""
Grafana to GitHub dashboard synchronization.

Detects dashboards that drifted from the repository copy and publishes them
as a single pull request.

Example:
    >>> from dashsync.core.sync import run_sync
    >>> result = asyncio.run(run_sync(config))
    >>> if result.published:
    ...     print(result.published.pull_request_url)
"""

from dashsync.core.sync.drift import content_hash, needs_update
from dashsync.core.sync.models import ChangeCandidate, PublishResult, SyncResult
from dashsync.core.sync.publisher import COMMIT_SUBJECT, ChangePublisher
from dashsync.core.sync.service import (
    SyncService,
    gather_limited,
    resolve_branch_name,
    run_sync,
)

__all__ = [
    "COMMIT_SUBJECT",
    "ChangeCandidate",
    "ChangePublisher",
    "PublishResult",
    "SyncResult",
    "SyncService",
    "content_hash",
    "gather_limited",
    "needs_update",
    "resolve_branch_name",
    "run_sync",
]
