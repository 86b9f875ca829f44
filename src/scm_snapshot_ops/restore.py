"""Restore a pinned snapshot into a local cache folder."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from scm_snapshot_core.models import SnapshotMetadata
from scm_snapshot_core.provider import SourceControlProvider

logger = logging.getLogger(__name__)

COMPLETE_MARKER_SUFFIX = ".complete"


@dataclass
class RestoreResult:
    success: bool
    fetched: bool = False
    snapshot_folder: Optional[Path] = None
    source_folder: Optional[Path] = None


def marker_path(snapshot_folder: Path) -> Path:
    """Marker written next to a snapshot folder once its fetch completed."""
    return snapshot_folder.with_name(snapshot_folder.name + COMPLETE_MARKER_SUFFIX)


def _is_complete(snapshot_folder: Path) -> bool:
    return snapshot_folder.is_dir() and marker_path(snapshot_folder).is_file()


def _source_folder(snapshot_folder: Path, project_path: str) -> Path:
    parts = [p for p in project_path.split("/") if p]
    return snapshot_folder.joinpath(*parts)


def _fetch_atomically(provider: SourceControlProvider, metadata: SnapshotMetadata, target: Path) -> bool:
    staging_root = Path(tempfile.mkdtemp(prefix=f".{target.name}.", dir=target.parent))
    try:
        staging = staging_root / target.name
        if not provider.get_sources(staging, metadata):
            return False
        os.replace(staging, target)
        return True
    finally:
        shutil.rmtree(staging_root, ignore_errors=True)


def restore_snapshot(
    provider: SourceControlProvider,
    metadata: SnapshotMetadata,
    cache_root: Path,
    atomic: bool = True,
) -> RestoreResult:
    """Make the snapshot available under ``cache_root``.

    A snapshot folder is reused only when a previous fetch completed and left
    its marker; a folder without one is discarded and fetched again. With
    ``atomic`` the sources are fetched into a staging directory and moved
    into place only on success; otherwise a failed fetch leaves partial
    contents behind. Callers must not restore the same snapshot concurrently.
    """
    if not provider.validate_build_snapshot_information(metadata, minimal=False):
        return RestoreResult(success=False)

    try:
        folder_name = provider.create_short_folder_name(metadata)
    except ValueError as exc:
        provider.reports.write_error(str(exc))
        return RestoreResult(success=False)

    cache_root = Path(cache_root)
    cache_root.mkdir(parents=True, exist_ok=True)
    snapshot_folder = cache_root / folder_name
    source_folder = _source_folder(snapshot_folder, provider.get_source_folder_path(metadata))
    marker = marker_path(snapshot_folder)

    if _is_complete(snapshot_folder):
        logger.debug(f"Reusing cached snapshot {snapshot_folder}")
        return RestoreResult(
            success=True,
            fetched=False,
            snapshot_folder=snapshot_folder,
            source_folder=source_folder,
        )

    if snapshot_folder.exists() and not snapshot_folder.is_dir():
        provider.reports.write_error(f"Snapshot path {snapshot_folder} exists and is not a directory.")
        return RestoreResult(success=False, snapshot_folder=snapshot_folder)

    if marker.is_file():
        marker.unlink()
    if snapshot_folder.exists():
        provider.reports.write_verbose(f"Discarding incomplete snapshot: {snapshot_folder}")
        shutil.rmtree(snapshot_folder)

    if atomic:
        success = _fetch_atomically(provider, metadata, snapshot_folder)
    else:
        success = provider.get_sources(snapshot_folder, metadata)

    if not success:
        logger.debug(f"Fetching {metadata.url}@{metadata.commit} failed")
        return RestoreResult(success=False, snapshot_folder=snapshot_folder)

    marker.write_text(f"{metadata.url}@{metadata.commit}\n", encoding="utf-8")
    return RestoreResult(
        success=True,
        fetched=True,
        snapshot_folder=snapshot_folder,
        source_folder=source_folder,
    )
