"""Helpers shared by CLI commands."""

from __future__ import annotations

import json
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape

from scm_snapshot_core.config import SnapshotConfig
from scm_snapshot_core.errors import SnapshotError
from scm_snapshot_core.models import SnapshotMetadata
from scm_snapshot_core.process import CommandRunner
from scm_snapshot_core.provider import SourceControlProvider
from scm_snapshot_core.registry import resolve_provider
from scm_snapshot_core.reports import ConsoleReports, Reports

error_console = Console(stderr=True)


@dataclass
class CliState:
    config: SnapshotConfig
    verbose: bool = False


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.find_root().obj
    if not isinstance(state, CliState):
        raise RuntimeError("CLI state not initialized")
    return state


def build_runner(config: SnapshotConfig) -> CommandRunner:
    return config.build_runner()


def build_reports(state: CliState) -> Reports:
    return ConsoleReports(console=Console(stderr=True), error_console=error_console, verbose=state.verbose)


def build_provider(
    state: CliState,
    name: Optional[str] = None,
    reports: Optional[Reports] = None,
) -> SourceControlProvider:
    provider_name = name or state.config.fetch.provider
    return resolve_provider(
        provider_name,
        reports or build_reports(state),
        runner=build_runner(state.config),
        **state.config.provider_kwargs(provider_name),
    )


def load_metadata(
    url: Optional[str] = None,
    commit: Optional[str] = None,
    path: Optional[str] = None,
    from_json: Optional[Path] = None,
) -> SnapshotMetadata:
    """Metadata from a JSON file, with command line values taking precedence."""
    metadata = SnapshotMetadata()
    if from_json is not None:
        try:
            data = json.loads(from_json.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            fail(f"Cannot read snapshot JSON {from_json}: {exc}")
        if not isinstance(data, dict):
            fail(f"Snapshot JSON must be an object: {from_json}")
        try:
            metadata = SnapshotMetadata.from_mapping(data)
        except ValueError as exc:
            fail(str(exc))
    if url is not None:
        metadata.url = url
    if commit is not None:
        metadata.commit = commit
    if path is not None:
        metadata.path = path
    return metadata


def fail(message: str, code: int = 1) -> None:
    error_console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(code)


@contextmanager
def cli_errors() -> Iterator[None]:
    try:
        yield
    except SnapshotError as exc:
        fail(str(exc))
    except ValueError as exc:
        fail(str(exc))
