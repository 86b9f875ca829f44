from .errors import (
    BackendFailureError,
    ConfigError,
    MissingInputError,
    SnapshotError,
    UnknownProviderError,
)
from .git_provider import GitSourceControlProvider
from .models import SnapshotMetadata
from .process import CommandResult, CommandRunner, SubprocessRunner
from .provider import SourceControlProvider
from .registry import ProviderRegistry, get_default_registry, resolve_provider
from .reports import CollectingReports, ConsoleReports, LoggingReports, Reports

__all__ = [
    "BackendFailureError",
    "CollectingReports",
    "CommandResult",
    "CommandRunner",
    "ConfigError",
    "ConsoleReports",
    "GitSourceControlProvider",
    "LoggingReports",
    "MissingInputError",
    "ProviderRegistry",
    "Reports",
    "SnapshotError",
    "SnapshotMetadata",
    "SourceControlProvider",
    "SubprocessRunner",
    "UnknownProviderError",
    "get_default_registry",
    "resolve_provider",
]
