"""Report sinks receiving progress and error messages from providers."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from rich.console import Console
from rich.markup import escape


class Reports(Protocol):
    """Three plain-text message channels."""

    def write_information(self, message: str) -> None:
        ...

    def write_verbose(self, message: str) -> None:
        ...

    def write_error(self, message: str) -> None:
        ...


class LoggingReports:
    """Forward reports to a stdlib logger (verbose maps to DEBUG)."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("scm_snapshot.reports")

    def write_information(self, message: str) -> None:
        self._logger.info(message)

    def write_verbose(self, message: str) -> None:
        self._logger.debug(message)

    def write_error(self, message: str) -> None:
        self._logger.error(message)


class ConsoleReports:
    """Print reports with rich; errors go to stderr."""

    def __init__(
        self,
        console: Optional[Console] = None,
        error_console: Optional[Console] = None,
        verbose: bool = False,
    ) -> None:
        self._console = console or Console()
        self._error_console = error_console or Console(stderr=True)
        self._verbose = verbose

    def write_information(self, message: str) -> None:
        self._console.print(escape(message))

    def write_verbose(self, message: str) -> None:
        if self._verbose:
            self._console.print(f"[dim]{escape(message)}[/dim]")

    def write_error(self, message: str) -> None:
        self._error_console.print(f"[red]{escape(message)}[/red]")


class CollectingReports:
    """Keep every message in memory so callers can show them together."""

    def __init__(self) -> None:
        self.information: List[str] = []
        self.verbose: List[str] = []
        self.errors: List[str] = []

    def write_information(self, message: str) -> None:
        self.information.append(message)

    def write_verbose(self, message: str) -> None:
        self.verbose.append(message)

    def write_error(self, message: str) -> None:
        self.errors.append(message)

    def clear(self) -> None:
        self.information.clear()
        self.verbose.clear()
        self.errors.clear()
