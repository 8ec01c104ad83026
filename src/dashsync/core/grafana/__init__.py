"""
Grafana integration for dashsync.

Lists dashboards and fetches their JSON definitions over the Grafana HTTP API.
"""

from dashsync.core.grafana.client import GrafanaClient
from dashsync.core.grafana.models import (
    DashboardMeta,
    DashboardPayload,
    DashboardRecord,
    dashboard_filename,
    serialize_dashboard,
)

__all__ = [
    "DashboardMeta",
    "DashboardPayload",
    "DashboardRecord",
    "GrafanaClient",
    "dashboard_filename",
    "serialize_dashboard",
]
