"""
Publishing a change set as a GitHub pull request.

The chain is strictly sequential, each call consuming the previous one's
output:

    latest commit -> tree -> commit -> branch ref -> pull request

GitHub has no transaction spanning these calls, so nothing is rolled back on
failure. ``PublishError`` names the failed step and lists what the earlier
steps already created.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from dashsync.core.exceptions import ApiError, ApiErrorKind, PublishError, PublishStep
from dashsync.core.github.client import GitHubClient
from dashsync.core.github.models import TreeEntry
from dashsync.core.sync.models import ChangeCandidate, PublishResult

logger = logging.getLogger(__name__)

COMMIT_SUBJECT = "Update grafana dashboards"


class ChangePublisher:
    """
    Commits a change set to a new branch and opens a pull request.

    Example:
        >>> publisher = ChangePublisher(github, "grafana-dashboards", "master", config.file_path)
        >>> result = await publisher.publish(change_set)
        >>> print(result.pull_request_url)
    """

    def __init__(
        self,
        github: GitHubClient,
        branch: str,
        base_branch: str,
        path_for: Callable[[str], str],
        subject: str = COMMIT_SUBJECT,
    ) -> None:
        """
        Initialize the publisher.

        Args:
            github: Repository client
            branch: Name of the branch to create
            base_branch: Branch to build on and open the pull request against
            path_for: Maps a dashboard filename to its repository path
            subject: Commit message and pull request title
        """
        self.github = github
        self.branch = branch
        self.base_branch = base_branch
        self.path_for = path_for
        self.subject = subject

    def tree_entries(self, change_set: Sequence[ChangeCandidate]) -> list[TreeEntry]:
        """Build tree entries in change set order, warning on duplicate paths."""
        entries: list[TreeEntry] = []
        seen: set[str] = set()
        for candidate in change_set:
            path = self.path_for(candidate.filename)
            if path in seen:
                logger.warning("Duplicate dashboard path %s, the last one wins", path)
            seen.add(path)
            entries.append(TreeEntry(path=path, content=candidate.record.content))
        return entries

    async def publish(self, change_set: Sequence[ChangeCandidate]) -> PublishResult:
        """
        Publish the change set.

        Args:
            change_set: Candidates to commit (must not be empty)

        Returns:
            PublishResult describing the created objects

        Raises:
            ValueError: If the change set is empty
            PublishError: If any step of the chain fails
        """
        if not change_set:
            raise ValueError("Cannot publish an empty change set")

        entries = self.tree_entries(change_set)
        created: dict[str, str] = {}

        step = PublishStep.LATEST_COMMIT
        try:
            tip = await self.github.get_latest_commit(self.base_branch)
            logger.debug("Base %s is at %s", self.base_branch, tip.sha)

            step = PublishStep.CREATE_TREE
            tree_sha = await self.github.create_tree(tip.tree_sha, entries)
            created["tree"] = tree_sha

            step = PublishStep.CREATE_COMMIT
            commit_sha = await self.github.create_commit(self.subject, tree_sha, [tip.sha])
            created["commit"] = commit_sha

            step = PublishStep.CREATE_REF
            ref = await self.github.create_ref(self.branch, commit_sha)
            created["ref"] = ref

            step = PublishStep.CREATE_PULL_REQUEST
            pull_request = await self.github.create_pull_request(
                self.subject, self.branch, self.base_branch
            )
        except ApiError as e:
            raise self._step_failed(step, e, created) from e

        logger.info(
            "Opened pull request #%d with %d files", pull_request.number, len(entries)
        )
        return PublishResult(
            branch=self.branch,
            tree_sha=tree_sha,
            commit_sha=commit_sha,
            pull_request_number=pull_request.number,
            pull_request_url=pull_request.url,
            files=[entry.path for entry in entries],
        )

    def _step_failed(
        self, step: PublishStep, error: ApiError, created: dict[str, str]
    ) -> PublishError:
        if step is PublishStep.CREATE_REF and error.kind is ApiErrorKind.INVALID:
            message = (
                f"Branch {self.branch} already exists. Merge or delete it, "
                "or rerun with --unique-branch"
            )
        else:
            message = str(error)
        if created:
            logger.error("Publishing failed at %s, left behind: %s", step.value, created)
        return PublishError(step, message, created, branch=self.branch)
