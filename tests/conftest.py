import logging
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

import pytest
from hypothesis import settings

from scm_snapshot_core.log import LIBRARY_LOGGERS
from scm_snapshot_core.process import CommandResult
from scm_snapshot_core.reports import CollectingReports

# Prevent Hypothesis from writing a local example database (e.g. `.hypothesis/`) during tests.
settings.register_profile("scm-snapshot-tests", database=None)
settings.load_profile("scm-snapshot-tests")


class Call(NamedTuple):
    tool: str
    args: Tuple[str, ...]
    cwd: Optional[str]


class Response(NamedTuple):
    exit_code: Optional[int]
    stdout: str
    stderr: str
    action: Optional[Callable[[Tuple[str, ...], Optional[str]], None]]


class FakeRunner:
    """In-memory CommandRunner; responses are matched on the leading args."""

    def __init__(self, installed: bool = True) -> None:
        self.installed = installed
        self.calls: List[Call] = []
        self.probe_count = 0
        self._responses: Dict[Tuple[str, ...], Response] = {}

    def on(self, *args: str, stdout: str = "", stderr: str = "", exit_code: Optional[int] = 0, action=None) -> None:
        self._responses[tuple(args)] = Response(exit_code, stdout, stderr, action)

    def _lookup(self, args: Tuple[str, ...]) -> Optional[Response]:
        for size in range(len(args), 0, -1):
            response = self._responses.get(args[:size])
            if response is not None:
                return response
        return None

    def run(self, tool: str, args: Sequence[str], working_directory=None) -> CommandResult:
        key = tuple(args)
        cwd = str(working_directory) if working_directory is not None else None
        self.calls.append(Call(tool, key, cwd))
        response = self._lookup(key)
        if response is None:
            return CommandResult(command=(tool, *key), exit_code=0)
        if response.action is not None:
            response.action(key, cwd)
        return CommandResult(
            command=(tool, *key),
            exit_code=response.exit_code,
            stdout=response.stdout,
            stderr=response.stderr,
        )

    def executable_exists(self, tool: str) -> bool:
        self.probe_count += 1
        return self.installed

    def subcommands(self) -> List[str]:
        return [call.args[0] for call in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def reports() -> CollectingReports:
    return CollectingReports()


@pytest.fixture
def checkout(tmp_path: Path) -> Tuple[Path, Path]:
    """A fake repository root with a project folder nested two levels down."""
    repo_root = tmp_path / "repo"
    project = repo_root / "src" / "MyProject"
    project.mkdir(parents=True)
    return repo_root, project


@pytest.fixture(autouse=True)
def _restore_library_loggers():
    saved = []
    for name in LIBRARY_LOGGERS:
        logger = logging.getLogger(name)
        saved.append((logger, list(logger.handlers), logger.level, logger.propagate, logger.disabled))
    yield
    for logger, handlers, level, propagate, disabled in saved:
        logger.handlers[:] = handlers
        logger.setLevel(level)
        logger.propagate = propagate
        logger.disabled = disabled
