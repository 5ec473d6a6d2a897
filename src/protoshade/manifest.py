"""
Fingerprint manifest and change classification.

The manifest records, for one scanned tree, the fingerprint of every file as of
the end of the last successful transformation run. It is the only input used to
decide what changed: a fresh scan is compared against it to produce a
:class:`Delta`, and it is replaced wholesale once the run has finished.

Persistence is one JSON document per cache scope, written via temp file and
rename. A manifest that is missing, unreadable, of an unknown schema version or
recorded for a different source tree is treated as empty, which can only cause
redundant work on the next run and never skipped work.

Only one process may use a given cache location at a time; concurrent runs
race on the read-modify-write of the manifest file and are not guarded here.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from protoshade.errors import ManifestCorrupt
from protoshade.log import Log
from protoshade.result import Failure, Result, Success
from protoshade.rewrite import atomic_write_bytes


MANIFEST_SCHEMA_VERSION = 1

_UNSAFE_SCOPE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class Manifest(BaseModel):
    """Fingerprints of one source tree keyed by POSIX path relative to its root."""

    schema_version: int = MANIFEST_SCHEMA_VERSION
    source_dir: str
    entries: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def empty(cls, source_dir: Path) -> Manifest:
        return cls(source_dir=canonical_dir(source_dir))


@dataclass(frozen=True)
class Delta:
    """Paths that need work since the last committed manifest.

    Attributes:
        modified: Present now and either new or with a different fingerprint.
        removed: Recorded in the manifest but absent from the current scan.
    """

    modified: frozenset[str] = frozenset()
    removed: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.modified and not self.removed


def canonical_dir(path: Path) -> str:
    return str(path.resolve())


def scope_file_stem(scope: str) -> str:
    """File name stem a scope is stored under; distinct scopes may share one."""
    return _UNSAFE_SCOPE_CHARS.sub("_", scope).strip("_") or "default"


def compute_delta(previous: Mapping[str, str], current: Mapping[str, str]) -> Delta:
    """
    Classify ``current`` against ``previous``.

    New and changed paths are both reported as modified. Paths with equal
    fingerprints appear in neither set.
    """
    modified = frozenset(path for path, digest in current.items() if previous.get(path) != digest)
    removed = frozenset(path for path in previous if path not in current)
    return Delta(modified=modified, removed=removed)


class ManifestStore:
    """
    JSON manifest persisted under ``cache_dir`` for one named scope.

    Usage:
        store = ManifestStore(Path("target/protoc/cache"), "main_protobuf")
        previous = store.load_or_empty(source_dir, log)
        ...
        store.commit(Manifest(source_dir=canonical_dir(source_dir), entries=current))
    """

    def __init__(self, cache_dir: Path, scope: str = "default") -> None:
        self.cache_dir = cache_dir
        self.scope = scope_file_stem(scope)

    @property
    def path(self) -> Path:
        return self.cache_dir / f"{self.scope}.json"

    def load(self) -> Result[Manifest | None, ManifestCorrupt]:
        """
        Read the persisted manifest.

        Returns:
            Success(None) if nothing has been committed yet,
            Success(Manifest) for a valid document,
            Failure(ManifestCorrupt) if the file is unreadable or invalid.
        """
        path = self.path
        if not path.exists():
            return Success(None)
        try:
            raw = path.read_bytes()
        except OSError as exc:
            return Failure(ManifestCorrupt(path=str(path), message=str(exc)))
        try:
            manifest = Manifest.model_validate_json(raw)
        except ValidationError as exc:
            return Failure(ManifestCorrupt(path=str(path), message=str(exc)))
        if manifest.schema_version != MANIFEST_SCHEMA_VERSION:
            return Failure(
                ManifestCorrupt(
                    path=str(path),
                    message=f"unsupported manifest schema version {manifest.schema_version}",
                )
            )
        return Success(manifest)

    def load_or_empty(self, source_dir: Path, log: Log) -> Manifest:
        """Load the manifest for ``source_dir``, degrading to empty on any problem."""
        match self.load():
            case Failure(corrupt):
                log.warn(f"Ignoring unreadable manifest {corrupt.path}: {corrupt.message}")
                return Manifest.empty(source_dir)
            case Success(None):
                return Manifest.empty(source_dir)
            case Success(Manifest() as manifest) if manifest.source_dir != canonical_dir(source_dir):
                log.info(
                    f"Manifest {self.path} was recorded for {manifest.source_dir}; starting fresh"
                )
                return Manifest.empty(source_dir)
            case Success(Manifest() as manifest):
                return manifest
            case _:
                raise AssertionError("Unreachable: manifest load result exhaustive")

    def commit(self, manifest: Manifest) -> None:
        """
        Atomically replace the persisted manifest.

        Raises:
            OSError: If the cache directory or manifest file cannot be written.
        """
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        atomic_write_bytes(self.path, manifest.model_dump_json(indent=2).encode("utf-8"))

    def clear(self) -> bool:
        """Delete the persisted manifest; returns whether one existed."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True


__all__ = [
    "Delta",
    "MANIFEST_SCHEMA_VERSION",
    "Manifest",
    "ManifestStore",
    "canonical_dir",
    "compute_delta",
    "scope_file_stem",
]
