"""
dashsync - Grafana dashboards to GitHub

A CLI tool that keeps dashboard JSON in a repository in sync with Grafana,
opening a pull request when dashboards change.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
