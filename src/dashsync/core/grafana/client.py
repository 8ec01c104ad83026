"""
Grafana HTTP API client for dashsync.

Lists dashboards and fetches their definitions. Failures are translated into
``ApiError`` and never retried.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from dashsync.core.exceptions import ApiError, ApiErrorKind, api_error_from_httpx
from dashsync.core.grafana.models import DashboardPayload, DashboardRecord

logger = logging.getLogger(__name__)

SERVICE = "grafana"


class GrafanaClient:
    """
    Async client for the Grafana dashboard API.

    Authenticates with HTTP basic auth. Use as an async context manager so
    the underlying connection pool is closed.

    Example:
        >>> async with GrafanaClient(url, "admin", "secret") as grafana:
        ...     for uid in await grafana.list_dashboard_uids():
        ...         record = await grafana.get_dashboard(uid)
        ...         print(record.filename)
    """

    SEARCH_PATH = "/api/search"
    DASHBOARD_PATH = "/api/dashboards/uid/{uid}"

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize GrafanaClient.

        Args:
            base_url: Grafana base URL (e.g. https://grafana.example.com)
            username: Basic auth user
            password: Basic auth password
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=(username, password),
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> GrafanaClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        logger.debug("GET %s%s params=%s", self.base_url, path, params)
        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise api_error_from_httpx(SERVICE, e, f"{self.base_url}{path}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                SERVICE,
                ApiErrorKind.UNKNOWN,
                "Failed to parse JSON response from Grafana API",
                url=f"{self.base_url}{path}",
            ) from e

    async def list_dashboard_uids(self) -> list[str]:
        """
        List the uids of all dashboards.

        Issues a single search for ``dash-db`` entries; folders are excluded
        by the type filter. Grafana returns everything in one response.

        Returns:
            Dashboard uids in response order

        Raises:
            ApiError: If the request fails or the response is not a list
        """
        data = await self._get_json(self.SEARCH_PATH, params={"type": "dash-db"})
        if not isinstance(data, list):
            raise ApiError(
                SERVICE,
                ApiErrorKind.UNKNOWN,
                "Dashboard search did not return a list",
                response_type=type(data).__name__,
            )

        try:
            uids = [str(item["uid"]) for item in data]
        except (KeyError, TypeError) as e:
            raise ApiError(
                SERVICE,
                ApiErrorKind.UNKNOWN,
                "Dashboard search result without a uid",
            ) from e

        logger.info("Found %d dashboards in Grafana", len(uids))
        return uids

    async def get_dashboard(self, uid: str) -> DashboardRecord:
        """
        Fetch one dashboard and serialize it for storage.

        Args:
            uid: Dashboard uid

        Returns:
            DashboardRecord with the target filename and serialized body

        Raises:
            ApiError: NOT_FOUND if the dashboard was deleted since listing,
                UNKNOWN if the payload is malformed, or any transport error
        """
        path = self.DASHBOARD_PATH.format(uid=uid)
        data = await self._get_json(path)

        try:
            payload = DashboardPayload.model_validate(data)
        except ValidationError as e:
            raise ApiError(
                SERVICE,
                ApiErrorKind.UNKNOWN,
                f"Unexpected dashboard payload for uid {uid}",
                uid=uid,
                errors=e.error_count(),
            ) from e

        record = DashboardRecord.from_payload(payload)
        logger.debug("Fetched dashboard %s as %s", uid, record.filename)
        return record
