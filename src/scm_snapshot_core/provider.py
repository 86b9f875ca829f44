"""Source control provider interface."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Optional

from .models import COMMIT_KEY, PATH_KEY, URL_KEY, SnapshotMetadata
from .process import CommandRunner, PathLike, SubprocessRunner
from .reports import Reports

MISSING_FIELD_MESSAGES = {
    URL_KEY: "The repository information is missing the repository URL.",
    COMMIT_KEY: "The repository information is missing the commit hash.",
    PATH_KEY: "The repository information is missing the project path.",
}


class SourceControlProvider(ABC):
    """Abstract base class for source control backends."""

    def __init__(self, reports: Reports, runner: Optional[CommandRunner] = None) -> None:
        self._reports = reports
        self._runner: CommandRunner = runner if runner is not None else SubprocessRunner()
        self._installed: Optional[bool] = None
        self._installed_lock = threading.Lock()

    @property
    def reports(self) -> Reports:
        return self._reports

    @property
    def runner(self) -> CommandRunner:
        return self._runner

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Backend name used as the registry key."""

    def is_installed(self) -> bool:
        """Whether the backend tool is available; probed once per provider."""
        if self._installed is None:
            with self._installed_lock:
                if self._installed is None:
                    self._installed = self._probe_installed()
        return self._installed

    @abstractmethod
    def _probe_installed(self) -> bool:
        """Check tool availability (uncached)."""

    @abstractmethod
    def is_repo(self, folder: PathLike) -> bool:
        """Whether ``folder`` is a live checkout of this backend."""

    @abstractmethod
    def add_missing_snapshot_information(self, folder: PathLike, metadata: SnapshotMetadata) -> None:
        """Fill missing commit/path of ``metadata`` from the checkout at ``folder``.

        Raises:
            MissingInputError: ``metadata.url`` is absent or empty.
            BackendFailureError: the checkout could not be introspected.
        """

    @abstractmethod
    def create_short_folder_name(self, metadata: SnapshotMetadata) -> str:
        """Deterministic cache folder name derived from ``metadata`` only."""

    @abstractmethod
    def get_sources(self, destination_folder: PathLike, metadata: SnapshotMetadata) -> bool:
        """Materialize the pinned snapshot into ``destination_folder``.

        Fetch failures are reported and yield ``False``; only missing
        required keys raise.
        """

    @abstractmethod
    def get_source_folder_path(self, metadata: SnapshotMetadata) -> str:
        """Project path inside the snapshot, as stored in ``metadata``."""

    def validate_build_snapshot_information(self, metadata: SnapshotMetadata, minimal: bool) -> bool:
        """Report every missing required key; ``True`` when none is missing."""
        missing = metadata.missing_fields(minimal=minimal)
        for field in missing:
            self._reports.write_error(MISSING_FIELD_MESSAGES[field])
        return not missing
