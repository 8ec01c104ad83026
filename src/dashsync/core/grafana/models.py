"""
Grafana data models for dashsync.

Defines Pydantic models for the parts of the Grafana HTTP API responses
that dashsync reads, plus the serialized ``DashboardRecord`` that is
compared against the repository.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DASHBOARD_EXTENSION = ".json"


class DashboardMeta(BaseModel):
    """
    The ``meta`` block of ``GET /api/dashboards/uid/{uid}``.

    Grafana sometimes keeps the original provisioning filename in
    ``provisionedExternalId``; it is empty for dashboards created in the UI.
    """

    provisioned_external_id: str = Field(default="", alias="provisionedExternalId")
    slug: str = Field(..., description="URL slug derived from the dashboard title")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def filename(self) -> str:
        """Target filename in the repository."""
        return dashboard_filename(self)


class DashboardPayload(BaseModel):
    """Full response of ``GET /api/dashboards/uid/{uid}``."""

    meta: DashboardMeta
    dashboard: dict[str, Any]

    model_config = ConfigDict(extra="ignore")


class DashboardRecord(BaseModel):
    """A dashboard ready to be compared and committed."""

    filename: str = Field(..., min_length=1, description="Filename within the target directory")
    content: str = Field(..., description="Serialized dashboard JSON")

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_payload(cls, payload: DashboardPayload) -> DashboardRecord:
        return cls(
            filename=dashboard_filename(payload.meta),
            content=serialize_dashboard(payload.dashboard),
        )


def dashboard_filename(meta: DashboardMeta) -> str:
    """
    Pick the repository filename for a dashboard.

    Uses ``provisionedExternalId`` verbatim when it is non-empty, otherwise
    ``<slug>.json``.

    Example:
        >>> dashboard_filename(DashboardMeta(provisionedExternalId="foo.json", slug="x"))
        'foo.json'
        >>> dashboard_filename(DashboardMeta(provisionedExternalId="", slug="bar"))
        'bar.json'
    """
    if meta.provisioned_external_id:
        return meta.provisioned_external_id
    return f"{meta.slug}{DASHBOARD_EXTENSION}"


def serialize_dashboard(dashboard: dict[str, Any]) -> str:
    """
    Serialize a dashboard body for storage.

    Two-space indentation, keys in the order Grafana returned them, and no
    trailing newline, so repeated runs produce byte-identical output.
    """
    return json.dumps(dashboard, indent=2, ensure_ascii=False)
