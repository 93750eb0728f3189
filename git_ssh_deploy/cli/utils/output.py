# git_ssh_deploy/cli/utils/output.py
"""Output formatting utilities"""

import json
from typing import Any, Optional

import click
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich import box

from ...models import DeployResult, Stage, StatusReport
from ...constants import EMOJI_ARROW, EMOJI_ERROR, EMOJI_WARNING

console = Console()


def _yes_no(value: bool) -> str:
    return "[green]yes[/green]" if value else "[red]no[/red]"


def print_stage(stage: Stage, message: str) -> None:
    """Print a deployment progress message"""
    console.print(f"[dim]{EMOJI_ARROW}[/dim] {message}")


def format_deploy_result(result: DeployResult) -> None:
    """Format and display push/push_all result"""
    run = result.run

    if result.is_success:
        lines = [f"[green]{result.message}[/green]"]
        if run.change_set is not None and not run.change_set.is_empty:
            uploads, removals = run.change_set.counts
            lines.extend([
                "",
                f"[bold]Environment:[/bold] {run.environment.name}",
                f"[bold]Commit:[/bold] {run.source_revision}",
                f"[bold]Uploaded:[/bold] {uploads} file(s)",
                f"[bold]Removed:[/bold] {removals} file(s)",
            ])
        if result.duration is not None:
            lines.append(f"[bold]Duration:[/bold] {result.duration:.1f}s")

        console.print(Panel("\n".join(lines), title="Deploy Result", border_style="green"))

    else:
        lines = [
            f"[red]{EMOJI_ERROR} Deploy failed:[/red] {result.error}",
            "",
            f"[bold]Failed stage:[/bold] {result.failed_stage.value if result.failed_stage else 'unknown'}",
        ]
        if run.completed_stages:
            done = ", ".join(stage.value for stage in run.completed_stages)
            lines.append(f"[bold]Completed stages:[/bold] {done}")
        if result.inconsistent_state:
            lines.append(f"[bold]Remote state:[/bold] {result.inconsistent_state}")
        lines.append(f"[bold]Exit code:[/bold] {result.exit_code}")

        console.print(Panel("\n".join(lines), title="Deploy Error", border_style="red"))

    for warning in result.warnings:
        print_warning(warning)


def format_status_report(report: StatusReport) -> None:
    """Format and display a status report"""
    config = Table(box=box.SIMPLE, show_header=False)
    config.add_column("Key", style="bold")
    config.add_column("Value")
    config.add_row("Environment", report.environment)
    config.add_row("SSH command", report.ssh_command)
    config.add_row("Path mapping", f"{report.local_path} {EMOJI_ARROW} {report.remote_directory}")
    console.print(Panel(config, title="Config", border_style="blue"))

    local = Table(box=box.SIMPLE, show_header=False)
    local.add_column("Key", style="bold")
    local.add_column("Value")
    local.add_row("Branch", report.branch or "unknown")
    local.add_row("HEAD commit ID", report.head_revision or "unknown")
    local.add_row("Uncommitted changes", _yes_no(report.is_dirty))
    console.print(Panel(local, title="Local State", border_style="blue"))

    remote = Table(box=box.SIMPLE, show_header=False)
    remote.add_column("Key", style="bold")
    remote.add_column("Value")
    remote.add_row("Can connect", _yes_no(report.can_connect))
    if not report.can_connect:
        if report.connection_error:
            remote.add_row("Error", report.connection_error)
        console.print(Panel(remote, title="Remote State", border_style="red"))
        return

    if report.remote_revision:
        remote.add_row("Remote commit ID", report.remote_revision)
        remote.add_row("Found locally", _yes_no(report.remote_revision_known))
    else:
        remote.add_row("Remote commit ID", "not set or invalid value")
    console.print(Panel(remote, title="Remote State", border_style="blue"))

    if report.change_set is None:
        console.print(f"[yellow]Files to upload/remove: None. {report.change_set_unavailable_reason}[/yellow]")
        return

    uploads, removals = report.change_set.counts
    console.print(f"[bold]Files to upload/remove:[/bold] {uploads}/{removals}")
    for path in report.change_set.to_upload:
        console.print(f"  [green]+ {path}[/green]", highlight=False)
    for path in report.change_set.to_remove:
        console.print(f"  [red]- {path}[/red]", highlight=False)


def format_json(data: Any, title: Optional[str] = None) -> None:
    """Format and display JSON data (plain when not writing to a terminal)"""
    json_str = json.dumps(data, indent=2, default=str)

    if not console.is_terminal:
        click.echo(json_str)
        return

    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=False)
    if title:
        console.print(Panel(syntax, title=title, border_style="blue"))
    else:
        console.print(syntax)


def format_yaml(data: Any, title: Optional[str] = None) -> None:
    """Format and display YAML data (plain when not writing to a terminal)"""
    yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)

    if not console.is_terminal:
        click.echo(yaml_str, nl=False)
        return

    syntax = Syntax(yaml_str, "yaml", theme="monokai", line_numbers=False)
    if title:
        console.print(Panel(syntax, title=title, border_style="blue"))
    else:
        console.print(syntax)


def print_error(message: str, error: Optional[Exception] = None) -> None:
    """Print error message"""
    if error:
        console.print(f"[red]{EMOJI_ERROR} Error:[/red] {message}: {str(error)}")
    else:
        console.print(f"[red]{EMOJI_ERROR} Error:[/red] {message}")


def print_warning(message: str) -> None:
    """Print warning message"""
    console.print(f"[yellow]{EMOJI_WARNING} Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    """Print success message"""
    console.print(f"[green]{message}[/green]")
