"""
Grafana to GitHub dashboard synchronization service.

Runs the whole pipeline once:

1. list dashboard uids in Grafana
2. fetch every dashboard and compare it with the repository, concurrently
3. keep the ones that differ
4. publish them as one commit on a new branch with a pull request

Any failure aborts the run; there is no partial publish.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timezone
from typing import TypeVar

from dashsync.core.config.models import SyncConfig
from dashsync.core.github.client import GitHubClient
from dashsync.core.github.models import RepoInfo
from dashsync.core.grafana.client import GrafanaClient
from dashsync.core.sync.drift import needs_update
from dashsync.core.sync.models import ChangeCandidate, SyncResult
from dashsync.core.sync.publisher import ChangePublisher

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def gather_limited(
    items: Sequence[T],
    func: Callable[[T], Awaitable[R]],
    limit: int | None = None,
) -> list[R]:
    """
    Apply ``func`` to every item concurrently and wait for all of them.

    With ``limit=None`` every call is dispatched at once. Otherwise at most
    ``limit`` calls are in flight. Results are returned in input order. If
    any call raises, the remaining calls are cancelled and the first
    exception propagates.

    Args:
        items: Inputs
        func: Async function applied to each input
        limit: Maximum concurrent calls, or None for unbounded

    Returns:
        Results in the same order as ``items``
    """
    if limit is not None and limit < 1:
        raise ValueError("limit must be at least 1")

    semaphore = asyncio.Semaphore(limit) if limit is not None else None

    async def run(item: T) -> R:
        if semaphore is None:
            return await func(item)
        async with semaphore:
            return await func(item)

    tasks = [asyncio.ensure_future(run(item)) for item in items]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def resolve_branch_name(config: SyncConfig, now: datetime | None = None) -> str:
    """
    Branch name for this run.

    The configured name is used as-is unless ``unique_branch`` is set, in
    which case a UTC timestamp suffix keeps reruns from colliding.
    """
    if not config.unique_branch:
        return config.branch
    now = now or datetime.now(timezone.utc)
    return f"{config.branch}-{now.astimezone(timezone.utc):%Y%m%dT%H%M%SZ}"


class SyncService:
    """
    Synchronizes Grafana dashboards into a GitHub repository.

    Example:
        >>> async with GrafanaClient(...) as grafana, GitHubClient(...) as github:
        ...     result = await SyncService(config, grafana, github).run()
        >>> result.published.pull_request_url
    """

    def __init__(
        self,
        config: SyncConfig,
        grafana: GrafanaClient,
        github: GitHubClient,
        *,
        now: datetime | None = None,
    ) -> None:
        """
        Initialize the sync service.

        Args:
            config: Run configuration
            grafana: Grafana client
            github: GitHub client for the target repository
            now: Clock override for unique branch names
        """
        self.config = config
        self.grafana = grafana
        self.github = github
        self.branch = resolve_branch_name(config, now)
        self.base_branch: str | None = config.base_branch

    async def check_dashboard(self, uid: str) -> ChangeCandidate:
        """Fetch one dashboard and compare it with the repository."""
        record = await self.grafana.get_dashboard(uid)
        update = await needs_update(
            self.github,
            self.config.file_path(record.filename),
            record,
            ref=self.base_branch,
        )
        return ChangeCandidate(record=record, needs_update=update)

    async def collect_changes(self) -> tuple[int, list[ChangeCandidate]]:
        """
        Find every dashboard that differs from the repository.

        Without a configured base branch the repository default branch is
        looked up once, before any dashboard is compared, and used for the
        rest of the run.

        Returns:
            Number of dashboards checked and the change set
        """
        uids = await self.grafana.list_dashboard_uids()
        if uids and self.base_branch is None:
            self.base_branch = await self.github.get_default_branch()
            logger.debug("Using default branch %s", self.base_branch)
        candidates = await gather_limited(
            uids, self.check_dashboard, self.config.max_concurrency
        )
        change_set = [c for c in candidates if c.needs_update]
        logger.info("%d of %d dashboards changed", len(change_set), len(candidates))
        return len(candidates), change_set

    async def run(self) -> SyncResult:
        """
        Run the full sync once.

        Returns:
            SyncResult; ``published`` is None when nothing changed or on a
            dry run

        Raises:
            ApiError: If listing, fetching or comparing fails
            PublishError: If publishing fails part-way
        """
        checked, change_set = await self.collect_changes()
        result = SyncResult(
            dashboards_checked=checked,
            changed=[c.record for c in change_set],
            dry_run=self.config.dry_run,
        )

        if not change_set or self.config.dry_run:
            return result

        publisher = ChangePublisher(
            self.github,
            self.branch,
            self.base_branch,
            self.config.file_path,
        )
        result.published = await publisher.publish(change_set)
        return result


async def run_sync(config: SyncConfig) -> SyncResult:
    """Open both API clients from ``config`` and run one sync."""
    async with GrafanaClient(
        config.grafana_url,
        config.grafana_username,
        config.grafana_password.get_secret_value(),
        timeout=config.timeout,
    ) as grafana, GitHubClient(
        RepoInfo(owner=config.owner, repo=config.repo),
        config.github_token.get_secret_value(),
        api_url=config.github_api_url,
        timeout=config.timeout,
    ) as github:
        return await SyncService(config, grafana, github).run()
