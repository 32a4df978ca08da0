"""Console reporter using Rich library for formatted CLI output.

Prints one success or failure line per step, the bucket's Object Lock
configuration, the uploaded object's lock state and a closing summary
table.
"""

from datetime import datetime
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from worm_upload.models import (
    LockConfiguration,
    ObjectLockStatus,
    RetentionMode,
    RunResult,
    StepResult,
    StepStatus,
)
from worm_upload.reporters.base import Reporter


def format_mode(mode) -> str:
    """Render a retention mode the way S3 spells it."""
    if mode is None:
        return "<none>"
    if isinstance(mode, RetentionMode):
        return mode.value
    return str(mode)


def format_timestamp(value: Optional[datetime]) -> str:
    """Render a timestamp in local time with its UTC offset."""
    if value is None:
        return "<none>"
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S %z")


class ConsoleReporter(Reporter):
    """Rich-based console reporter for CLI output.

    Args:
        quiet: If True, suppress per-step output (only show summary)
        console: Console to print to (defaults to stdout)
    """

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = console or Console(legacy_windows=True)
        self.quiet = quiet

    def on_run_start(self, bucket_name: str, object_key: str) -> None:
        self.console.print()
        self.console.print(
            Rule(
                f"[bold cyan]WORM upload: {escape(object_key)} -> {escape(bucket_name)}[/bold cyan]",
                style="cyan",
                characters="-",
            )
        )

    def on_step_complete(self, result: StepResult) -> None:
        """Displays a status indicator with the step's message."""
        if self.quiet:
            return

        if result.status == StepStatus.SUCCESS:
            status_text = "[green][OK][/green]"
        elif result.status == StepStatus.FAILED:
            status_text = "[red][FAIL][/red]"
        else:
            status_text = "[yellow][SKIP][/yellow]"

        self.console.print(
            f"  {status_text} {escape(result.message or result.step_name)}", soft_wrap=True
        )

        if result.error_message and result.status != StepStatus.SUCCESS:
            self.console.print(f"     [dim]{escape(result.error_message)}[/dim]", soft_wrap=True)

    def on_lock_configuration(self, config: LockConfiguration) -> None:
        if self.quiet:
            return

        enabled = "Enabled" if config.enabled else "Disabled"
        self.console.print(f"     ObjectLockEnabled: {enabled}")
        if config.rule is not None:
            self.console.print(f"     DefaultRetention.Mode: {format_mode(config.rule.mode)}")
            self.console.print(f"     DefaultRetention.Days: {config.rule.duration_days}")
        else:
            self.console.print("     [dim]No default retention rule is configured[/dim]")

    def on_object_status(self, key: str, status: ObjectLockStatus) -> None:
        if self.quiet:
            return

        self.console.print(f"     ObjectLockMode: {format_mode(status.lock_mode)}")
        self.console.print(
            f"     ObjectLockRetainUntilDate: {format_timestamp(status.retain_until)}"
        )

    def on_run_complete(self, result: RunResult) -> None:
        """Displays a summary table of all steps."""
        if not result.steps:
            self.console.print("[yellow]No steps were run.[/yellow]")
            return

        self.console.print()
        table = Table(
            title="",
            show_header=True,
            header_style="bold magenta",
            border_style="dim",
            box=box.ASCII,
        )
        table.add_column("Step", style="cyan", no_wrap=True)
        table.add_column("Status", justify="center", no_wrap=True)

        for step in result.steps.values():
            if step.status == StepStatus.SUCCESS:
                symbol = "[green]OK[/green]"
            elif step.status == StepStatus.FAILED:
                symbol = "[red]FAIL[/red]"
            else:
                symbol = "[yellow]SKIP[/yellow]"
            table.add_row(step.step_name, symbol)

        self.console.print(table)
        self.console.print(f"[dim]Run started {result.timestamp}[/dim]")

        if result.all_succeeded:
            self.console.print("[bold green]All steps succeeded[/bold green]")
        else:
            failed = sum(1 for s in result.steps.values() if not s.succeeded)
            self.console.print(f"[bold red]{failed} step(s) did not succeed[/bold red]")
        self.console.print()
