"""
dashsync CLI - Main application entry point.

Syncs Grafana dashboards into a GitHub repository and opens a pull request
when they changed.
"""

import asyncio
import logging
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from dashsync import __version__
from dashsync.cli.errors import ExitCode, print_error, print_run_error
from dashsync.core.config import (
    DEFAULT_BRANCH,
    DEFAULT_TIMEOUT,
    SyncConfig,
    load_env_file,
)
from dashsync.core.exceptions import ConfigError, DashsyncError
from dashsync.core.sync import SyncResult, run_sync

app = typer.Typer(
    name="dashsync",
    help="Sync Grafana dashboards to a GitHub repository",
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console()


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for a run.

    Args:
        debug: If True, enable DEBUG level logging
    """
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"dashsync version {__version__}")
        raise typer.Exit(ExitCode.SUCCESS)


def report(result: SyncResult) -> None:
    """Print the outcome of a run."""
    if not result.has_changes:
        console.print("No changes")
        return

    if result.dry_run:
        console.print(
            f"[yellow]Dry run:[/yellow] {len(result.changed)} of "
            f"{result.dashboards_checked} dashboards would be updated"
        )
        for record in result.changed:
            console.print(f"  {record.filename}")
        return

    published = result.published
    if published is None:
        return
    console.print(f"[green]✓[/green] Pull request created: {published.pull_request_url}")
    console.print(
        f"[dim]{len(published.files)} dashboards on branch {published.branch} "
        f"({published.commit_sha[:8]})[/dim]"
    )


@app.command()
def sync(
    ctx: typer.Context,
    grafana: str | None = typer.Option(
        None,
        "--grafana",
        "-g",
        help="Grafana URL",
    ),
    owner: str | None = typer.Option(
        None,
        "--owner",
        "-o",
        help="GitHub repository owner",
    ),
    repo: str | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="GitHub repository",
    ),
    directory: str | None = typer.Option(
        None,
        "--directory",
        "-d",
        help="Repository directory to save dashboards to",
    ),
    branch: str = typer.Option(
        DEFAULT_BRANCH,
        "--branch",
        "-b",
        help="Branch to open the pull request from",
    ),
    base: str | None = typer.Option(
        None,
        "--base",
        help="Branch to compare against and open the pull request into "
        "(default: the repository default branch)",
    ),
    unique_branch: bool = typer.Option(
        False,
        "--unique-branch",
        help="Append a UTC timestamp to the branch name so reruns don't collide",
    ),
    timeout: float = typer.Option(
        DEFAULT_TIMEOUT,
        "--timeout",
        help="Per-request timeout in seconds",
    ),
    max_concurrency: int | None = typer.Option(
        None,
        "--max-concurrency",
        help="Maximum dashboards fetched at once (default: all at once)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Report changed dashboards without publishing",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="dotenv file with credentials (exported variables take precedence)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output with detailed logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show dashsync version and exit",
    ),
) -> None:
    """
    Sync Grafana dashboards to a GitHub repository.

    Fetches every dashboard, compares it with the copy in DIRECTORY on the
    base branch, and opens one pull request with all changed dashboards.

    Credentials are read from GRAFANA_USERNAME, GRAFANA_PASSWORD and
    GITHUB_TOKEN.

    Examples:
        dashsync -g https://grafana.example.com -o acme -r infra -d grafana/dashboards
        dashsync ... --dry-run              # Only list changed dashboards
        dashsync ... --unique-branch        # Timestamped branch per run
    """
    setup_logging(debug)

    if not grafana or not owner or not repo or not directory:
        typer.echo(ctx.get_help())
        raise typer.Exit(ExitCode.SUCCESS)

    if env_file is not None:
        try:
            load_env_file(env_file)
        except ConfigError as e:
            print_error(e.message, solution="Check the --env-file path")
            raise typer.Exit(ExitCode.USER_ERROR)

    try:
        config = SyncConfig.from_env(
            grafana_url=grafana,
            owner=owner,
            repo=repo,
            directory=directory,
            branch=branch,
            base_branch=base,
            unique_branch=unique_branch,
            timeout=timeout,
            max_concurrency=max_concurrency,
            dry_run=dry_run,
        )
    except ConfigError as e:
        console.print(e.message)
        raise typer.Exit(ExitCode.SUCCESS)
    except ValidationError as e:
        print_error("Invalid configuration", reason=str(e))
        raise typer.Exit(ExitCode.USER_ERROR)

    try:
        result = asyncio.run(run_sync(config))
    except DashsyncError as e:
        print_run_error(e)
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    report(result)


def cli_main() -> None:
    """Main CLI entry point."""
    app()


__all__ = ["app", "cli_main"]
