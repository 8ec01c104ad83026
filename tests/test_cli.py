"""
Tests for the dashsync CLI.

Covers early exits on missing configuration (no network access at all),
result reporting, and error rendering. ``run_sync`` is patched so no
requests are made.
"""

from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from dashsync import __version__
from dashsync.cli import app
from dashsync.cli.errors import ExitCode
from dashsync.core.exceptions import ApiError, ApiErrorKind, PublishError, PublishStep
from dashsync.core.grafana.models import DashboardRecord
from dashsync.core.sync.models import PublishResult, SyncResult

runner = CliRunner()

FLAGS = [
    "--grafana", "https://grafana.example.com",
    "--owner", "acme",
    "--repo", "infra",
    "--directory", "dir",
]

CREDENTIALS = {
    "GRAFANA_USERNAME": "admin",
    "GRAFANA_PASSWORD": "secret",
    "GITHUB_TOKEN": "gh-token",
}

RECORD = DashboardRecord(filename="mydash.json", content="{}")


@pytest.fixture
def mock_run_sync():
    with patch("dashsync.cli.run_sync", new_callable=AsyncMock) as mock:
        mock.return_value = SyncResult(dashboards_checked=0)
        yield mock


@pytest.fixture
def credentials(clean_env):
    for name, value in CREDENTIALS.items():
        clean_env.setenv(name, value)
    return clean_env


class TestMissingConfiguration:
    """Configuration errors print a message and exit cleanly."""

    def test_no_arguments_prints_help(self, mock_run_sync, credentials):
        result = runner.invoke(app, [])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Usage" in result.output
        mock_run_sync.assert_not_called()

    def test_missing_grafana_flag(self, mock_run_sync, credentials):
        result = runner.invoke(app, FLAGS[2:])

        assert result.exit_code == ExitCode.SUCCESS
        assert "--grafana" in result.output
        mock_run_sync.assert_not_called()

    def test_missing_grafana_credentials(self, mock_run_sync, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "gh-token")

        result = runner.invoke(app, FLAGS)

        assert result.exit_code == ExitCode.SUCCESS
        assert "GRAFANA_USERNAME and GRAFANA_PASSWORD" in result.output
        mock_run_sync.assert_not_called()

    def test_missing_github_token(self, mock_run_sync, credentials):
        credentials.delenv("GITHUB_TOKEN")

        result = runner.invoke(app, FLAGS)

        assert result.exit_code == ExitCode.SUCCESS
        assert "GITHUB_TOKEN environment variable is required" in result.output
        mock_run_sync.assert_not_called()

    def test_invalid_value(self, mock_run_sync, credentials):
        result = runner.invoke(app, FLAGS + ["--max-concurrency", "0"])

        assert result.exit_code == ExitCode.USER_ERROR
        mock_run_sync.assert_not_called()

    def test_missing_env_file(self, mock_run_sync, credentials, tmp_path):
        result = runner.invoke(app, FLAGS + ["--env-file", str(tmp_path / "missing.env")])

        assert result.exit_code == ExitCode.USER_ERROR
        assert "not found" in result.output
        mock_run_sync.assert_not_called()


class TestRun:
    """Tests for a configured run."""

    def test_passes_config(self, mock_run_sync, credentials):
        result = runner.invoke(
            app,
            FLAGS + ["--base", "main", "--max-concurrency", "4", "--timeout", "5"],
        )

        assert result.exit_code == ExitCode.SUCCESS
        config = mock_run_sync.call_args.args[0]
        assert config.grafana_url == "https://grafana.example.com"
        assert config.owner == "acme"
        assert config.repo == "infra"
        assert config.directory == "dir"
        assert config.base_branch == "main"
        assert config.branch == "grafana-dashboards"
        assert config.max_concurrency == 4
        assert config.timeout == 5.0
        assert config.github_token.get_secret_value() == "gh-token"

    def test_base_defaults_to_repository_default_branch(self, mock_run_sync, credentials):
        result = runner.invoke(app, FLAGS)

        assert result.exit_code == ExitCode.SUCCESS
        assert mock_run_sync.call_args.args[0].base_branch is None

    def test_env_file_supplies_credentials(self, mock_run_sync, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "GRAFANA_USERNAME=admin\nGRAFANA_PASSWORD=secret\nGITHUB_TOKEN=from-file\n"
        )

        result = runner.invoke(app, FLAGS + ["--env-file", str(env_file)])

        assert result.exit_code == ExitCode.SUCCESS
        config = mock_run_sync.call_args.args[0]
        assert config.github_token.get_secret_value() == "from-file"

    def test_no_changes(self, mock_run_sync, credentials):
        result = runner.invoke(app, FLAGS)

        assert result.exit_code == ExitCode.SUCCESS
        assert "No changes" in result.output

    def test_pull_request_created(self, mock_run_sync, credentials):
        mock_run_sync.return_value = SyncResult(
            dashboards_checked=1,
            changed=[RECORD],
            published=PublishResult(
                branch="grafana-dashboards",
                tree_sha="tree",
                commit_sha="0123456789abcdef",
                pull_request_number=7,
                pull_request_url="https://github.com/acme/infra/pull/7",
                files=["dir/mydash.json"],
            ),
        )

        result = runner.invoke(app, FLAGS)

        assert result.exit_code == ExitCode.SUCCESS
        assert "Pull request created" in result.output
        assert "https://github.com/acme/infra/pull/7" in result.output

    def test_dry_run_lists_files(self, mock_run_sync, credentials):
        mock_run_sync.return_value = SyncResult(
            dashboards_checked=3, changed=[RECORD], dry_run=True
        )

        result = runner.invoke(app, FLAGS + ["--dry-run"])

        assert result.exit_code == ExitCode.SUCCESS
        assert mock_run_sync.call_args.args[0].dry_run is True
        assert "1 of 3 dashboards would be updated" in result.output
        assert "mydash.json" in result.output

    def test_api_error_exits_non_zero(self, mock_run_sync, credentials):
        mock_run_sync.side_effect = ApiError(
            "grafana", ApiErrorKind.UNAUTHORIZED, "HTTP 401", status_code=401
        )

        result = runner.invoke(app, FLAGS)

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "HTTP 401" in result.output

    def test_publish_error_lists_created_objects(self, mock_run_sync, credentials):
        mock_run_sync.side_effect = PublishError(
            PublishStep.CREATE_REF,
            "Branch grafana-dashboards already exists",
            {"tree": "tree-sha", "commit": "commit-sha"},
        )

        result = runner.invoke(app, FLAGS)

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "create_ref" in result.output
        assert "commit-sha" in result.output

    def test_unexpected_errors_propagate(self, mock_run_sync, credentials):
        mock_run_sync.side_effect = RuntimeError("bug")

        result = runner.invoke(app, FLAGS)

        assert result.exit_code != ExitCode.SUCCESS
        assert isinstance(result.exception, RuntimeError)


def test_version(mock_run_sync):
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == ExitCode.SUCCESS
    assert __version__ in result.output
    mock_run_sync.assert_not_called()
