"""
snapshot.py - Inspect and validate snapshot metadata.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from scm_snapshot_ops.capture import capture_snapshot

from ..util import build_provider, cli_errors, get_state, load_metadata


def capture(
    ctx: typer.Context,
    folder: Path = typer.Argument(..., help="Project folder inside a live checkout"),
    url: str = typer.Option(..., "--url", help="Repository URL to record"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Backend name (default from config)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the metadata JSON to this file"),
):
    """Resolve commit and project path of a live checkout and print them as JSON."""
    state = get_state(ctx)
    with cli_errors():
        scm = build_provider(state, provider)
        metadata = capture_snapshot(scm, folder, url)

    payload = json.dumps(metadata.to_mapping(), indent=2)
    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(payload + "\n", encoding="utf-8")
        typer.echo(f"Snapshot written to: {out}")
    else:
        typer.echo(payload)


def validate(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(None, "--url", help="Repository URL"),
    commit: Optional[str] = typer.Option(None, "--commit", help="Commit hash"),
    path: Optional[str] = typer.Option(None, "--path", help="Project path inside the repository"),
    from_json: Optional[Path] = typer.Option(None, "--from-json", help="Read snapshot metadata from a JSON file"),
    minimal: bool = typer.Option(False, "--minimal", help="Only require the repository URL"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Backend name (default from config)"),
):
    """Check that snapshot metadata is complete; exit 1 listing every missing field."""
    state = get_state(ctx)
    metadata = load_metadata(url, commit, path, from_json)
    with cli_errors():
        scm = build_provider(state, provider)
    if not scm.validate_build_snapshot_information(metadata, minimal=minimal):
        raise typer.Exit(1)
    typer.echo("Snapshot information is valid.")


def folder_name(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(None, "--url", help="Repository URL"),
    commit: Optional[str] = typer.Option(None, "--commit", help="Commit hash"),
    from_json: Optional[Path] = typer.Option(None, "--from-json", help="Read snapshot metadata from a JSON file"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Backend name (default from config)"),
):
    """Print the short cache folder name for a snapshot."""
    state = get_state(ctx)
    metadata = load_metadata(url, commit, None, from_json)
    with cli_errors():
        scm = build_provider(state, provider)
        name = scm.create_short_folder_name(metadata)
    typer.echo(name)


def source_path(
    ctx: typer.Context,
    path: Optional[str] = typer.Option(None, "--path", help="Project path inside the repository"),
    from_json: Optional[Path] = typer.Option(None, "--from-json", help="Read snapshot metadata from a JSON file"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Backend name (default from config)"),
):
    """Print the project path stored in the snapshot metadata."""
    state = get_state(ctx)
    metadata = load_metadata(None, None, path, from_json)
    with cli_errors():
        scm = build_provider(state, provider)
        value = scm.get_source_folder_path(metadata)
    typer.echo(value)
