"""
fetch.py - Materialize snapshots on disk.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from scm_snapshot_ops.restore import restore_snapshot

from ..util import build_provider, cli_errors, get_state, load_metadata


def fetch(
    ctx: typer.Context,
    destination: Path = typer.Argument(..., help="Folder to clone into"),
    url: Optional[str] = typer.Option(None, "--url", help="Repository URL"),
    commit: Optional[str] = typer.Option(None, "--commit", help="Commit hash"),
    from_json: Optional[Path] = typer.Option(None, "--from-json", help="Read snapshot metadata from a JSON file"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Backend name (default from config)"),
):
    """Clone the repository into DESTINATION and reset it to the pinned commit."""
    state = get_state(ctx)
    metadata = load_metadata(url, commit, None, from_json)
    with cli_errors():
        scm = build_provider(state, provider)
        ok = scm.get_sources(destination, metadata)
    if not ok:
        raise typer.Exit(1)
    typer.echo(f"Fetched {metadata.url} at {metadata.commit} into {destination}")


def restore(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(None, "--url", help="Repository URL"),
    commit: Optional[str] = typer.Option(None, "--commit", help="Commit hash"),
    path: Optional[str] = typer.Option(None, "--path", help="Project path inside the repository"),
    from_json: Optional[Path] = typer.Option(None, "--from-json", help="Read snapshot metadata from a JSON file"),
    cache_root: Optional[Path] = typer.Option(None, "--cache-root", help="Snapshot cache folder (default from config)"),
    atomic: Optional[bool] = typer.Option(None, "--atomic/--no-atomic", help="Fetch into a staging folder first"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Backend name (default from config)"),
):
    """Restore a snapshot into the cache and print its project source folder."""
    state = get_state(ctx)
    metadata = load_metadata(url, commit, path, from_json)
    root = cache_root or Path(state.config.fetch.cache_root)
    use_atomic = state.config.fetch.atomic if atomic is None else atomic
    with cli_errors():
        scm = build_provider(state, provider)
        result = restore_snapshot(scm, metadata, root, atomic=use_atomic)
    if not result.success:
        raise typer.Exit(1)
    if not result.fetched:
        typer.echo(f"Using cached snapshot {result.snapshot_folder}", err=True)
    typer.echo(str(result.source_folder))
