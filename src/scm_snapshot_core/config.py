"""Configuration loading for snapshot providers.

Settings come from a TOML file layered over built-in defaults::

    [log]
    verbosity = "info"

    [process]
    timeout_seconds = 600

    [git]
    executable = "git"
    strict_diagnostics = true

    [fetch]
    provider = "git"
    cache_root = ".scm-snapshots"
    atomic = true
"""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError
from .process import SubprocessRunner

CONFIG_ENV_VAR = "SCM_SNAPSHOT_CONFIG_PATH"
DEFAULT_CONFIG_FILENAME = "scm-snapshot.toml"

ALLOWED_VERBOSITY = {"debug", "info", "warn", "warning", "error", "off", "none", "disabled"}

DEFAULT_CONFIG: Dict[str, Any] = {
    "log": {
        "verbosity": "info",
    },
    "process": {
        "timeout_seconds": 600,
    },
    "git": {
        "executable": "git",
        "strict_diagnostics": True,
    },
    "fetch": {
        "provider": "git",
        "cache_root": ".scm-snapshots",
        "atomic": True,
    },
}


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class LogSettings(_Section):
    verbosity: str = "info"

    @field_validator("verbosity")
    @classmethod
    def _check_verbosity(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in ALLOWED_VERBOSITY:
            raise ValueError("must be one of: debug, info, warning, error, off")
        return normalized


class ProcessSettings(_Section):
    timeout_seconds: float = Field(default=600, ge=0)


class GitSettings(_Section):
    executable: str = Field(default="git", min_length=1)
    strict_diagnostics: bool = True


class FetchSettings(_Section):
    provider: str = Field(default="git", min_length=1)
    cache_root: str = Field(default=".scm-snapshots", min_length=1)
    atomic: bool = True


class SnapshotConfig(_Section):
    """Effective configuration."""

    log: LogSettings = Field(default_factory=LogSettings)
    process: ProcessSettings = Field(default_factory=ProcessSettings)
    git: GitSettings = Field(default_factory=GitSettings)
    fetch: FetchSettings = Field(default_factory=FetchSettings)
    source: Optional[Path] = None

    def provider_kwargs(self, name: str) -> Dict[str, Any]:
        """Constructor keyword arguments for the named provider."""
        if name.lower().strip() == "git":
            return {
                "executable": self.git.executable,
                "strict_diagnostics": self.git.strict_diagnostics,
            }
        return {}

    def build_runner(self) -> SubprocessRunner:
        timeout = self.process.timeout_seconds or None
        return SubprocessRunner(timeout=timeout)


def default_config() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_CONFIG)


def merge_defaults(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_defaults(merged[key], value)
        else:
            merged[key] = value
    return merged


def resolve_config_path(path: Optional[Path] = None, cwd: Optional[Path] = None) -> Optional[Path]:
    """Pick the config file: explicit path, env var, then the working directory."""
    explicit = path or (Path(os.environ[CONFIG_ENV_VAR]) if os.getenv(CONFIG_ENV_VAR) else None)
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Config file not found: {explicit}")
        return explicit
    candidate = (cwd or Path.cwd()) / DEFAULT_CONFIG_FILENAME
    if candidate.is_file():
        return candidate
    return None


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid config TOML: {path} ({exc})") from exc
    except OSError as exc:
        raise ConfigError(f"Cannot read config file: {path} ({exc})") from exc


def _format_errors(exc: ValidationError) -> List[str]:
    errors: List[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        errors.append(f"{location}: {error['msg']}")
    return errors


def config_from_dict(data: Dict[str, Any], source: Optional[Path] = None) -> SnapshotConfig:
    merged = merge_defaults(default_config(), data)
    try:
        return SnapshotConfig.model_validate({**merged, "source": source})
    except ValidationError as exc:
        where = f" in {source}" if source else ""
        raise ConfigError(f"Invalid configuration{where}", _format_errors(exc)) from exc


def load_config(path: Optional[Path] = None, cwd: Optional[Path] = None) -> SnapshotConfig:
    """Load the effective configuration.

    Raises:
        ConfigError: If the file is missing (when requested explicitly),
            unparsable, or contains unknown or invalid settings.
    """
    resolved = resolve_config_path(path, cwd)
    if resolved is None:
        return config_from_dict({})
    data = _read_toml(resolved)
    if "source" in data:
        raise ConfigError(f"Invalid configuration in {resolved}", ["source: unknown section"])
    return config_from_dict(data, source=resolved)
