"""Capture snapshot metadata from a live checkout."""

from __future__ import annotations

import logging
from pathlib import Path

from scm_snapshot_core.errors import BackendFailureError
from scm_snapshot_core.models import SnapshotMetadata
from scm_snapshot_core.provider import SourceControlProvider

logger = logging.getLogger(__name__)


def capture_snapshot(provider: SourceControlProvider, folder: Path, url: str) -> SnapshotMetadata:
    """Pin the checkout at ``folder`` to its current revision.

    The returned record has ``url`` set from the caller and ``commit``/``path``
    resolved from the checkout. Raises BackendFailureError when ``folder`` is
    not a live checkout of ``provider``.
    """
    if not provider.is_repo(folder):
        message = f"{folder} is not a {provider.provider_id} checkout."
        provider.reports.write_error(message)
        raise BackendFailureError(message)

    metadata = SnapshotMetadata(url=url)
    provider.add_missing_snapshot_information(folder, metadata)
    if not provider.validate_build_snapshot_information(metadata, minimal=False):
        raise BackendFailureError(f"Could not resolve complete snapshot information for {folder}")

    logger.debug(f"Captured {metadata.url}@{metadata.commit} (path='{metadata.path}')")
    return metadata
