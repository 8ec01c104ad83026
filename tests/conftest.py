"""
Pytest configuration and shared fixtures.

Provides a recording fake HTTP API for the Grafana and GitHub clients,
canned API payloads, and a ready-made SyncConfig.
"""

from collections.abc import Callable
from typing import Any

import httpx
import pytest
from pydantic import SecretStr

from dashsync.core.config.models import SyncConfig
from dashsync.core.github.client import GitHubClient
from dashsync.core.github.models import RepoInfo
from dashsync.core.grafana.client import GrafanaClient

GRAFANA_URL = "https://grafana.example.com"
REPO_PATH = "/repos/acme/infra"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeAPI:
    """
    Minimal routed HTTP fake for ``httpx.MockTransport``.

    Routes are keyed by (method, path). Unknown routes answer 404 like the
    real APIs do. Every request is recorded in order.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        text: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text, headers=headers)
            return httpx.Response(status, json=json, headers=headers)

        self.routes[(method, path)] = handler

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        """Route to a custom handler, for responses that depend on the request."""
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "Not Found"})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method: str | None = None, path: str | None = None) -> list[httpx.Request]:
        return [
            r
            for r in self.requests
            if (method is None or r.method == method) and (path is None or r.url.path == path)
        ]

    @property
    def writes(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method != "GET"]


# ==============================================================================
# Payload helpers
# ==============================================================================


def dashboard_payload(
    slug: str,
    dashboard: dict[str, Any],
    provisioned_external_id: str = "",
) -> dict[str, Any]:
    """Build a ``GET /api/dashboards/uid/{uid}`` response body."""
    return {
        "meta": {
            "type": "db",
            "slug": slug,
            "provisioned": bool(provisioned_external_id),
            "provisionedExternalId": provisioned_external_id,
        },
        "dashboard": dashboard,
    }


def add_repo_route(github: FakeAPI, default_branch: str = "master") -> None:
    """Register the repository metadata response."""
    github.add(
        "GET",
        REPO_PATH,
        json={"full_name": "acme/infra", "default_branch": default_branch},
    )


def add_publish_routes(github: FakeAPI, pr_number: int = 7) -> None:
    """Register successful responses for the whole publish chain."""
    add_repo_route(github)
    github.add(
        "GET",
        f"{REPO_PATH}/commits",
        json=[{"sha": "tip-sha", "commit": {"tree": {"sha": "base-tree-sha"}}}],
    )
    github.add("POST", f"{REPO_PATH}/git/trees", status=201, json={"sha": "new-tree-sha"})
    github.add(
        "POST",
        f"{REPO_PATH}/git/commits",
        status=201,
        json={"sha": "new-commit-sha", "tree": {"sha": "new-tree-sha"}},
    )
    github.add(
        "POST",
        f"{REPO_PATH}/git/refs",
        status=201,
        json={"ref": "refs/heads/grafana-dashboards", "object": {"sha": "new-commit-sha"}},
    )
    github.add(
        "POST",
        f"{REPO_PATH}/pulls",
        status=201,
        json={"number": pr_number, "html_url": f"https://github.com/acme/infra/pull/{pr_number}"},
    )


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def grafana_api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def github_api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def grafana_client(grafana_api: FakeAPI) -> GrafanaClient:
    return GrafanaClient(GRAFANA_URL, "admin", "secret", transport=grafana_api.transport)


@pytest.fixture
def github_client(github_api: FakeAPI) -> GitHubClient:
    return GitHubClient(
        RepoInfo(owner="acme", repo="infra"),
        "gh-token",
        transport=github_api.transport,
    )


@pytest.fixture
def sync_config() -> SyncConfig:
    return SyncConfig(
        grafana_url=GRAFANA_URL,
        owner="acme",
        repo="infra",
        directory="dir",
        grafana_username="admin",
        grafana_password=SecretStr("secret"),
        github_token=SecretStr("gh-token"),
    )


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove credential variables so tests control them explicitly."""
    for name in ("GRAFANA_USERNAME", "GRAFANA_PASSWORD", "GITHUB_TOKEN", "GITHUB_API_URL"):
        # setenv first so teardown also removes values written directly to os.environ
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch
