"""ADTs for incremental transformation and manifest persistence failures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class IOFailure:
    """A filesystem operation failed while transforming or committing."""

    operation: Literal["read", "write", "copy", "transform", "mkdir", "delete", "commit", "scan"]
    path: str
    message: str
    kind: Literal["IOFailure"] = "IOFailure"


@dataclass(frozen=True)
class ManifestCorrupt:
    """Persisted manifest exists but cannot be read or validated.

    Never fatal on its own: the transformer treats the manifest as empty.
    """

    path: str
    message: str
    kind: Literal["ManifestCorrupt"] = "ManifestCorrupt"


SyncError = IOFailure

__all__ = ["IOFailure", "ManifestCorrupt", "SyncError"]
