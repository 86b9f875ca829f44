"""Git source control provider."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import List, Optional

from .errors import BackendFailureError, MissingInputError
from .models import COMMIT_KEY, PATH_KEY, URL_KEY, SnapshotMetadata, normalize_project_path
from .process import CommandResult, CommandRunner, PathLike
from .provider import SourceControlProvider
from .reports import Reports

logger = logging.getLogger(__name__)

GIT_EXECUTABLE = "git"
SHORT_HASH_LENGTH = 8

_URL_SEGMENT_SEPARATORS = re.compile(r"[/\\:]")


def repository_name(url: str) -> str:
    """Final path segment of ``url`` without its extension.

    ``https://example.com/org/foo.git`` and ``git@example.com:org/foo.git``
    both give ``foo``.
    """
    segment = _URL_SEGMENT_SEPARATORS.split(url.rstrip("/\\"))[-1]
    name, _ext = os.path.splitext(segment)
    if not name:
        raise ValueError(f"Cannot derive a repository name from URL: {url}")
    return name


class GitSourceControlProvider(SourceControlProvider):
    """Provider that drives the ``git`` command line tool.

    By default any stderr output from an introspection query is treated as
    failure, even when git exits with status 0. Pass
    ``strict_diagnostics=False`` to let the exit status alone decide; stderr
    on success is then only logged as a warning.
    """

    def __init__(
        self,
        reports: Reports,
        runner: Optional[CommandRunner] = None,
        executable: str = GIT_EXECUTABLE,
        strict_diagnostics: bool = True,
    ) -> None:
        super().__init__(reports, runner)
        if not executable:
            raise ValueError("executable must be non-empty")
        self._executable = executable
        self._strict_diagnostics = strict_diagnostics

    @property
    def provider_id(self) -> str:
        return "git"

    @property
    def executable(self) -> str:
        return self._executable

    @property
    def strict_diagnostics(self) -> bool:
        return self._strict_diagnostics

    def _probe_installed(self) -> bool:
        installed = self._runner.executable_exists(self._executable)
        logger.debug(f"{self._executable} installed: {installed}")
        return installed

    def _run(self, args: List[str], working_directory: Optional[PathLike] = None) -> CommandResult:
        return self._runner.run(self._executable, args, working_directory=working_directory)

    def _query(self, args: List[str], folder: PathLike) -> str:
        result = self._run(args, folder)
        stderr = result.stderr.strip()
        if not result.succeeded or (self._strict_diagnostics and stderr):
            raise BackendFailureError(result.diagnostic, result)
        if stderr:
            logger.warning(f"git {' '.join(args)} succeeded with diagnostics: {stderr}")
        output = result.stdout.strip()
        if not output:
            raise BackendFailureError(f"git {' '.join(args)} produced no output in {folder}", result)
        return output

    def head_commit(self, folder: PathLike) -> str:
        """Full revision id of HEAD in ``folder``."""
        return self._query(["rev-parse", "HEAD"], folder)

    def repository_root(self, folder: PathLike) -> str:
        """Top-level directory of the working tree containing ``folder``."""
        return self._query(["rev-parse", "--show-toplevel"], folder)

    def is_repo(self, folder: PathLike) -> bool:
        return self._run(["status"], folder).succeeded

    def add_missing_snapshot_information(self, folder: PathLike, metadata: SnapshotMetadata) -> None:
        if not metadata.has_url:
            raise MissingInputError(URL_KEY, "The repository URL must be specified.")

        if not metadata.has_commit:
            metadata.commit = self.head_commit(folder)
            logger.debug(f"Resolved HEAD of {folder} to {metadata.commit}")

        if not metadata.has_path:
            repo_root = self.repository_root(folder)
            metadata.path = _relative_project_path(folder, repo_root)
            logger.debug(f"Resolved project path of {folder} to '{metadata.path}'")

    def create_short_folder_name(self, metadata: SnapshotMetadata) -> str:
        if not metadata.has_url:
            raise MissingInputError(URL_KEY)
        if not metadata.has_commit:
            raise MissingInputError(COMMIT_KEY)
        commit = metadata.commit or ""
        if len(commit) < SHORT_HASH_LENGTH:
            raise ValueError(f"Commit hash must have at least {SHORT_HASH_LENGTH} characters: {commit}")
        return repository_name(metadata.url or "") + commit[:SHORT_HASH_LENGTH]

    def get_sources(self, destination_folder: PathLike, metadata: SnapshotMetadata) -> bool:
        if not metadata.has_url:
            raise MissingInputError(URL_KEY)
        if not metadata.has_commit:
            raise MissingInputError(COMMIT_KEY)
        repo_url = metadata.url or ""
        commit = metadata.commit or ""
        destination = str(destination_folder)

        self._reports.write_information(f"Cloning from: {repo_url}")
        cloned = self._run(["clone", repo_url, destination])
        if not cloned.succeeded:
            self._reports.write_error(cloned.diagnostic)
            return False

        self._reports.write_verbose(f"Resetting to commit hash: {commit}")
        reset = self._run(["reset", "--hard", commit], destination)
        if not reset.succeeded:
            self._reports.write_error(reset.diagnostic)
            return False

        return True

    def get_source_folder_path(self, metadata: SnapshotMetadata) -> str:
        if metadata.path is None:
            raise MissingInputError(PATH_KEY)
        return metadata.path


def _relative_project_path(folder: PathLike, repo_root: str) -> str:
    # The project folder's parent is what gets recorded, not the folder itself.
    containing = Path(folder).resolve().parent
    root = Path(repo_root).resolve()
    try:
        relative = containing.relative_to(root)
    except ValueError:
        raise BackendFailureError(f"{containing} is not inside the repository root {root}")
    text = relative.as_posix()
    if text == ".":
        return ""
    return normalize_project_path(text)
