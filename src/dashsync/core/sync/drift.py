"""
Drift detection between Grafana and the repository.

Compares a freshly fetched dashboard with the copy stored on the base branch
by content hash. Read-only: nothing here writes to the repository.
"""

from __future__ import annotations

import hashlib
import logging

from dashsync.core.exceptions import ApiError
from dashsync.core.github.client import GitHubClient
from dashsync.core.grafana.models import DashboardRecord

logger = logging.getLogger(__name__)


def content_hash(content: str) -> str:
    """SHA-1 hex digest of the UTF-8 encoded content."""
    return hashlib.sha1(content.encode("utf-8")).hexdigest()


async def needs_update(
    github: GitHubClient,
    path: str,
    record: DashboardRecord,
    ref: str | None = None,
) -> bool:
    """
    Decide whether a dashboard must be written to the repository.

    The comparison is exact: whitespace-only differences count as changes.

    Args:
        github: Repository client
        path: Repository path of the stored dashboard
        record: Newly fetched dashboard
        ref: Branch to compare against

    Returns:
        True if the file is missing or its content differs

    Raises:
        ApiError: For any failure other than the file not existing
    """
    try:
        existing = await github.get_file_content(path, ref=ref)
    except ApiError as e:
        if e.is_not_found:
            logger.debug("%s not in repository, marking for update", path)
            return True
        raise

    changed = content_hash(existing) != content_hash(record.content)
    logger.debug("%s %s", path, "changed" if changed else "unchanged")
    return changed
