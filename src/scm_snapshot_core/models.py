"""Snapshot metadata record."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

URL_KEY = "url"
COMMIT_KEY = "commit"
PATH_KEY = "path"

SNAPSHOT_KEYS = (URL_KEY, COMMIT_KEY, PATH_KEY)


def normalize_project_path(value: str) -> str:
    """Return ``value`` with forward slashes and no leading separator."""
    return value.replace("\\", "/").lstrip("/")


@dataclass
class SnapshotMetadata:
    """Pins a dependency to a repository, an exact revision and a sub-path.

    ``path`` may legitimately be the empty string (project folder sits
    directly under the repository root); only ``None`` means absent.
    """

    url: Optional[str] = None
    commit: Optional[str] = None  # full revision id, e.g. 40-hex for git
    path: Optional[str] = None  # relative to repo root, forward slashes

    @classmethod
    def from_mapping(cls, data: Mapping[str, str]) -> "SnapshotMetadata":
        """Build a record from its persisted key/value form."""
        values: Dict[str, str] = {}
        for key, value in data.items():
            if key not in SNAPSHOT_KEYS:
                logger.debug(f"Ignoring unrecognized snapshot key: {key}")
                continue
            if not isinstance(value, str):
                raise ValueError(f"Snapshot value for '{key}' must be a string, got {type(value).__name__}")
            values[key] = value
        return cls(**values)

    def to_mapping(self) -> Dict[str, str]:
        """Persisted form; absent keys are omitted."""
        data: Dict[str, str] = {}
        if self.url is not None:
            data[URL_KEY] = self.url
        if self.commit is not None:
            data[COMMIT_KEY] = self.commit
        if self.path is not None:
            data[PATH_KEY] = self.path
        return data

    @property
    def has_url(self) -> bool:
        return bool(self.url)

    @property
    def has_commit(self) -> bool:
        return bool(self.commit)

    @property
    def has_path(self) -> bool:
        return self.path is not None

    def missing_fields(self, minimal: bool = False) -> List[str]:
        """List every required key that is absent, in key order."""
        missing: List[str] = []
        if not self.has_url:
            missing.append(URL_KEY)
        if not minimal:
            if not self.has_commit:
                missing.append(COMMIT_KEY)
            if not self.has_path:
                missing.append(PATH_KEY)
        return missing
