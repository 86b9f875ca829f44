"""Exception types raised by snapshot providers."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .process import CommandResult


class SnapshotError(Exception):
    """Base exception for source-control snapshot operations."""


class MissingInputError(SnapshotError, ValueError):
    """A required snapshot key is absent; the caller broke the contract."""

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message or f"The snapshot information is missing the '{field}' value.")


class BackendFailureError(SnapshotError, RuntimeError):
    """An introspection command of the backend tool failed."""

    def __init__(self, diagnostic: str, result: Optional["CommandResult"] = None) -> None:
        self.diagnostic = diagnostic
        self.result = result
        super().__init__(diagnostic)


class UnknownProviderError(SnapshotError, ValueError):
    """No provider is registered under the requested name."""

    def __init__(self, name: str, known: List[str]) -> None:
        self.name = name
        self.known = known
        available = ", ".join(known) if known else "none"
        super().__init__(f"Unknown source control provider: {name} (available: {available})")


class ConfigError(SnapshotError):
    """Configuration could not be loaded or failed validation."""

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        self.errors = errors or []
        if self.errors:
            message = message + "\n" + "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(message)
