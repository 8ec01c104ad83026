"""
Standardized error handling and exit codes for the dashsync CLI.

Missing configuration is not a failure: the message is printed and the
process exits with ``ExitCode.SUCCESS``. Invalid values, including a
missing ``--env-file``, exit with ``ExitCode.USER_ERROR``. Remote failures
exit with ``ExitCode.GENERAL_ERROR``.
"""

from enum import IntEnum

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from dashsync.core.exceptions import DashsyncError, PublishError

console = Console(stderr=True)


class ExitCode(IntEnum):
    """Standard exit codes for dashsync."""

    SUCCESS = 0
    """Run completed, or stopped early on missing configuration."""

    GENERAL_ERROR = 1
    """A remote call failed and the run was aborted."""

    USER_ERROR = 2
    """A configuration value was present but invalid."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_run_error(error: DashsyncError) -> None:
    """
    Render an error that aborted a run, with its context.

    For a ``PublishError`` the objects already created on GitHub are listed,
    since they are not cleaned up automatically.
    """
    error_text = Text()
    error_text.append("Error: ", style="bold red")
    error_text.append(str(error))

    if error.context:
        error_text.append("\n\nContext:\n", style="dim")
        for key, value in error.context.items():
            error_text.append(f"  {key}: ", style="cyan")
            error_text.append(f"{value}\n", style="white")

    if isinstance(error, PublishError) and error.created:
        error_text.append("\nCreated before the failure (not rolled back):\n", style="yellow")
        for kind, sha in error.created.items():
            error_text.append(f"  {kind}: ", style="cyan")
            error_text.append(f"{sha}\n", style="white")

    console.print()
    console.print(Panel(error_text, title="Sync failed", border_style="red"))
