"""
GitHub REST API client for dashsync.

Provides the handful of repository operations the sync needs: reading a file
from a branch, resolving a branch tip, and creating a tree, commit, branch ref
and pull request. Authenticates with a token.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from dashsync.core.exceptions import ApiError, ApiErrorKind, api_error_from_httpx
from dashsync.core.github.models import CommitRef, PullRequest, RepoInfo, TreeEntry

logger = logging.getLogger(__name__)

SERVICE = "github"
API_VERSION = "2022-11-28"
RAW_MEDIA_TYPE = "application/vnd.github.raw+json"


class GitHubClient:
    """
    Async client for GitHub repository operations.

    Wraps the GitHub REST API with ``httpx``. Every failed call is raised as
    an ``ApiError``; a missing file is ``ApiErrorKind.NOT_FOUND``.

    Example:
        >>> repo = RepoInfo(owner="acme", repo="infra")
        >>> async with GitHubClient(repo, token) as github:
        ...     tip = await github.get_latest_commit("master")
        ...     print(tip.sha)
    """

    def __init__(
        self,
        repo: RepoInfo,
        token: str,
        *,
        api_url: str = "https://api.github.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize GitHubClient.

        Args:
            repo: Repository to operate on
            token: Personal access or installation token
            api_url: REST API base URL (override for GitHub Enterprise)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.repo = repo
        self.api_url = api_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            },
            transport=transport,
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.repo.owner}/{self.repo.repo}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Send one request and raise ``ApiError`` on any failure.

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            params: Query parameters
            json: JSON request body
            headers: Extra request headers

        Returns:
            The successful response

        Raises:
            ApiError: On transport errors or non-2xx responses
        """
        logger.debug("%s %s%s", method, self.api_url, path)
        try:
            response = await self._client.request(
                method, path, params=params, json=json, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise api_error_from_httpx(SERVICE, e, f"{self.api_url}{path}") from e
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                SERVICE,
                ApiErrorKind.UNKNOWN,
                "Failed to parse JSON response from GitHub API",
                url=str(response.request.url),
            ) from e

    def _sha_from(self, response: httpx.Response, what: str) -> str:
        data = self._json(response)
        if not isinstance(data, dict) or not data.get("sha"):
            raise ApiError(
                SERVICE,
                ApiErrorKind.UNKNOWN,
                f"GitHub API returned no sha for the new {what}",
            )
        return str(data["sha"])

    async def get_default_branch(self) -> str:
        """
        Look up the repository's default branch.

        Returns:
            Default branch name (e.g. "main")

        Raises:
            ApiError: NOT_FOUND if the repository does not exist or is not
                visible to the token
        """
        response = await self._request("GET", self._repo_path)
        data = self._json(response)
        if not isinstance(data, dict) or not data.get("default_branch"):
            raise ApiError(
                SERVICE,
                ApiErrorKind.UNKNOWN,
                f"GitHub API returned no default branch for {self.repo.full_name}",
            )
        return str(data["default_branch"])

    async def get_file_content(self, path: str, ref: str | None = None) -> str:
        """
        Read a file's raw content.

        Args:
            path: Path of the file within the repository
            ref: Branch, tag or commit to read from (repository default if None)

        Returns:
            File content as text

        Raises:
            ApiError: NOT_FOUND if the file does not exist on ``ref``
        """
        params = {"ref": ref} if ref else None
        response = await self._request(
            "GET",
            f"{self._repo_path}/contents/{quote(path, safe='/')}",
            params=params,
            headers={"Accept": RAW_MEDIA_TYPE},
        )
        return response.text

    async def get_latest_commit(self, branch: str) -> CommitRef:
        """
        Resolve the tip commit of a branch.

        Args:
            branch: Branch name

        Returns:
            CommitRef with the commit and tree SHAs

        Raises:
            ApiError: If the branch does not exist or has no commits
        """
        response = await self._request(
            "GET",
            f"{self._repo_path}/commits",
            params={"sha": branch, "per_page": "1"},
        )
        data = self._json(response)
        if not isinstance(data, list) or not data:
            raise ApiError(
                SERVICE,
                ApiErrorKind.UNKNOWN,
                f"No commits found on branch {branch}",
                branch=branch,
            )
        try:
            return CommitRef.from_api(data[0])
        except (KeyError, TypeError, ValueError) as e:
            raise ApiError(
                SERVICE,
                ApiErrorKind.UNKNOWN,
                "Unexpected commit entry in GitHub API response",
                branch=branch,
            ) from e

    async def create_tree(self, base_tree: str, entries: list[TreeEntry]) -> str:
        """
        Create a tree that layers ``entries`` over ``base_tree``.

        Args:
            base_tree: SHA of the tree to build on
            entries: Files to add or replace

        Returns:
            SHA of the new tree
        """
        response = await self._request(
            "POST",
            f"{self._repo_path}/git/trees",
            json={
                "base_tree": base_tree,
                "tree": [entry.model_dump() for entry in entries],
            },
        )
        return self._sha_from(response, "tree")

    async def create_commit(self, message: str, tree: str, parents: list[str]) -> str:
        """
        Create a commit object.

        Args:
            message: Commit message
            tree: SHA of the commit's tree
            parents: Parent commit SHAs

        Returns:
            SHA of the new commit
        """
        response = await self._request(
            "POST",
            f"{self._repo_path}/git/commits",
            json={"message": message, "tree": tree, "parents": parents},
        )
        return self._sha_from(response, "commit")

    async def create_ref(self, branch: str, sha: str) -> str:
        """
        Create a branch pointing at ``sha``.

        Args:
            branch: Branch name (without ``refs/heads/``)
            sha: Commit SHA

        Returns:
            The full ref name

        Raises:
            ApiError: INVALID (HTTP 422) if the branch already exists
        """
        ref = f"refs/heads/{branch}"
        await self._request(
            "POST",
            f"{self._repo_path}/git/refs",
            json={"ref": ref, "sha": sha},
        )
        return ref

    async def create_pull_request(self, title: str, head: str, base: str) -> PullRequest:
        """
        Open a pull request.

        Args:
            title: Pull request title
            head: Branch with the changes
            base: Branch to merge into

        Returns:
            The created PullRequest
        """
        response = await self._request(
            "POST",
            f"{self._repo_path}/pulls",
            json={"title": title, "head": head, "base": base},
        )
        try:
            return PullRequest.model_validate(self._json(response))
        except ValidationError as e:
            raise ApiError(
                SERVICE,
                ApiErrorKind.UNKNOWN,
                "Unexpected pull request in GitHub API response",
            ) from e
