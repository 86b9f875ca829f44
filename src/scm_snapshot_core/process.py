"""Running backend tools as external processes."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one tool invocation.

    ``exit_code`` is ``None`` when the process never started or was killed
    after a timeout.
    """

    command: Tuple[str, ...]
    exit_code: Optional[int]
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def diagnostic(self) -> str:
        """Diagnostic text for reports; synthesized when stderr is empty."""
        text = self.stderr.strip()
        if text:
            return text
        cmd = " ".join(self.command)
        if self.timed_out:
            return f"{cmd} timed out"
        if self.exit_code is None:
            return f"{cmd} could not be started"
        return f"{cmd} exited with status {self.exit_code}"


class CommandRunner(Protocol):
    """Executes backend tools and captures their output."""

    def run(
        self,
        tool: str,
        args: Sequence[str],
        working_directory: Optional[PathLike] = None,
    ) -> CommandResult:
        """Run ``tool`` with ``args``; never raises for ordinary failures."""
        ...

    def executable_exists(self, tool: str) -> bool:
        """Check whether ``tool`` is on the search path."""
        ...


class SubprocessRunner:
    """CommandRunner backed by :func:`subprocess.run`."""

    def __init__(self, timeout: Optional[float] = None, env: Optional[Dict[str, str]] = None) -> None:
        if timeout is not None and timeout <= 0:
            timeout = None
        self._timeout = timeout
        self._env = env

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    def run(
        self,
        tool: str,
        args: Sequence[str],
        working_directory: Optional[PathLike] = None,
    ) -> CommandResult:
        command = (tool, *args)
        cwd = str(working_directory) if working_directory is not None else None
        logger.debug(f"Running {' '.join(command)} (cwd={cwd})")
        try:
            completed = subprocess.run(
                list(command),
                cwd=cwd,
                env=self._env,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            logger.warning(f"{' '.join(command)} timed out after {self._timeout}s")
            return CommandResult(
                command=command,
                exit_code=None,
                stdout=_as_text(exc.stdout),
                stderr=_as_text(exc.stderr) or f"{tool} timed out after {self._timeout} seconds",
                timed_out=True,
            )
        except OSError as exc:
            logger.debug(f"Failed to start {tool}: {exc}")
            return CommandResult(command=command, exit_code=None, stderr=f"Failed to run {tool}: {exc}")

        if completed.returncode != 0:
            logger.debug(f"{' '.join(command)} exited with {completed.returncode}")
        return CommandResult(
            command=command,
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def executable_exists(self, tool: str) -> bool:
        return shutil.which(tool) is not None


def _as_text(value: Union[bytes, str, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
