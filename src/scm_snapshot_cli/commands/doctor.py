"""
doctor.py - Environment health check command.

Checks prerequisites for fetching source snapshots.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scm_snapshot_core.config import SnapshotConfig
from scm_snapshot_core.provider import SourceControlProvider
from scm_snapshot_core.reports import CollectingReports

from ..util import build_provider, cli_errors, get_state

console = Console()


@dataclass
class CheckResult:
    """Result of a single check."""
    name: str
    passed: bool
    message: str
    details: Optional[str] = None


@dataclass
class DoctorResult:
    """Overall doctor check result."""
    all_passed: bool
    checks: List[CheckResult]


def check_python_prereqs() -> CheckResult:
    """Check that required Python packages are installed."""
    missing = []
    packages = [
        ("pydantic", "pydantic"),
        ("typer", "typer"),
        ("rich", "rich"),
    ]

    for import_name, pip_name in packages:
        try:
            __import__(import_name)
        except ImportError:
            missing.append(pip_name)

    if missing:
        return CheckResult(
            name="Python Prerequisites",
            passed=False,
            message=f"Missing packages: {', '.join(missing)}",
            details=f"Install with: pip install {' '.join(missing)}",
        )

    return CheckResult(
        name="Python Prerequisites",
        passed=True,
        message="All required packages installed",
    )


def check_config(config: SnapshotConfig) -> CheckResult:
    """Report where the effective configuration came from."""
    if config.source is None:
        return CheckResult(name="Config", passed=True, message="Using built-in defaults")
    return CheckResult(name="Config", passed=True, message=f"Loaded {config.source}")


def check_tool_installed(provider: SourceControlProvider) -> CheckResult:
    """Check that the backend tool is on the search path."""
    name = f"{provider.provider_id} installed"
    if provider.is_installed():
        return CheckResult(name=name, passed=True, message="Tool found on PATH")
    return CheckResult(
        name=name,
        passed=False,
        message="Tool not found on PATH",
        details=f"Install {provider.provider_id} or set its executable in the config file.",
    )


def check_checkout(provider: SourceControlProvider, folder: Path) -> CheckResult:
    """Check that a folder is a live checkout."""
    name = "Live checkout"
    if not folder.is_dir():
        return CheckResult(name=name, passed=False, message=f"Not a directory: {folder}")
    if provider.is_repo(folder):
        return CheckResult(name=name, passed=True, message=f"{folder} is a {provider.provider_id} checkout")
    return CheckResult(
        name=name,
        passed=False,
        message=f"{folder} is not a {provider.provider_id} checkout",
    )


def run_doctor(
    provider: SourceControlProvider,
    config: SnapshotConfig,
    folder: Optional[Path] = None,
) -> DoctorResult:
    """Run all doctor checks."""
    checks = [
        check_python_prereqs(),
        check_config(config),
        check_tool_installed(provider),
    ]
    if folder is not None:
        checks.append(check_checkout(provider, folder))

    all_passed = all(c.passed for c in checks)
    return DoctorResult(all_passed=all_passed, checks=checks)


def format_result_plain(result: DoctorResult) -> None:
    """Print result in plain text format."""
    table = Table(title="scm-snapshot doctor", show_header=True)
    table.add_column("Check", style="bold")
    table.add_column("Status")
    table.add_column("Message")

    for check in result.checks:
        status = "[green]✓ PASS[/green]" if check.passed else "[red]✗ FAIL[/red]"
        table.add_row(check.name, status, escape(check.message))
        if check.details:
            table.add_row("", "", f"[dim]{escape(check.details)}[/dim]")

    console.print(table)

    if result.all_passed:
        console.print("\n[green bold]All checks passed![/green bold]")
    else:
        console.print("\n[red bold]Some checks failed.[/red bold]")


def format_result_json(result: DoctorResult) -> None:
    """Print result in JSON format."""
    output = {
        "all_passed": result.all_passed,
        "checks": [asdict(c) for c in result.checks],
    }
    typer.echo(json.dumps(output, indent=2))


def doctor(
    ctx: typer.Context,
    folder: Optional[Path] = typer.Argument(None, help="Folder expected to be a live checkout"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Backend name (default from config)"),
    format: str = typer.Option(
        "plain", "--format", "-f",
        help="Output format: plain, json",
    ),
) -> None:
    """
    Check environment health.

    Verifies:
    - Python prerequisites are installed
    - The backend tool is installed
    - FOLDER (when given) is a live checkout
    """
    state = get_state(ctx)
    with cli_errors():
        scm = build_provider(state, provider, reports=CollectingReports())
    result = run_doctor(scm, state.config, folder)

    if format == "json":
        format_result_json(result)
    else:
        format_result_plain(result)

    raise typer.Exit(0 if result.all_passed else 1)
