"""
Incremental directory transformation.

Mirrors a source tree into a target tree, rewriting transformable files and
copying the rest byte for byte, while doing work only for files whose content
changed since the last successful run.

Each run:

1. loads the manifest for the cache scope (missing or corrupt means empty);
2. scans the source tree and fingerprints every file;
3. classifies paths into modified (new or changed) and removed;
4. returns early without touching the target when nothing changed;
5. deletes the target counterpart of every removed path, logging failures,
   and prunes directories that deletion left empty;
6. transforms or copies every modified path into the target;
7. commits the fresh fingerprints as the new manifest;
8. reports the target directory.

The manifest commit is the last step, so a run that fails or crashes part way
leaves the previous manifest in place and the next run redoes the work.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from protoshade.errors import IOFailure, SyncError
from protoshade.fingerprint import fingerprint_file
from protoshade.log import Log
from protoshade.manifest import Delta, Manifest, ManifestStore, canonical_dir, compute_delta
from protoshade.result import Failure, Result, Success
from protoshade.rewrite import Transform


Transformable = Callable[[Path], bool]


@dataclass(frozen=True)
class SyncReport:
    """Summary of one synchronization run.

    Attributes:
        target_dir: Directory that was brought up to date.
        delta: Classification the run acted on.
        transformed: Number of files written through the transform.
        copied: Number of files copied verbatim.
        deleted: Number of target files removed.
        delete_failures: Target files that could not be removed.
    """

    target_dir: Path
    delta: Delta
    transformed: int = 0
    copied: int = 0
    deleted: int = 0
    delete_failures: tuple[str, ...] = ()

    @property
    def written(self) -> int:
        return self.transformed + self.copied


def map_target(target_dir: Path, relative: str) -> Path:
    """Translate a POSIX path relative to the source root into the target tree."""
    return target_dir.joinpath(*relative.split("/"))


def scan_tree(source_dir: Path) -> dict[str, str]:
    """
    Fingerprint every regular file under ``source_dir``.

    Returns:
        Mapping of POSIX path relative to ``source_dir`` to SHA256 digest.
        An absent directory scans as empty.

    Raises:
        OSError: If a file cannot be read.
    """
    if not source_dir.is_dir():
        return {}
    return {
        path.relative_to(source_dir).as_posix(): fingerprint_file(path)
        for path in sorted(source_dir.rglob("*"))
        if path.is_file()
    }


def _scan(source_dir: Path) -> Result[dict[str, str], IOFailure]:
    try:
        return Success(scan_tree(source_dir))
    except OSError as exc:
        return Failure(IOFailure(operation="scan", path=str(exc.filename or source_dir), message=str(exc)))


def plan(source_dir: Path, store: ManifestStore, log: Log) -> Result[Delta, SyncError]:
    """Compute the pending delta for ``source_dir`` without changing anything."""
    previous = store.load_or_empty(source_dir, log)
    return _scan(source_dir).map(lambda current: compute_delta(previous.entries, current))


def _prune_empty_parents(target: Path, target_dir: Path) -> None:
    """Remove directories left empty below ``target_dir`` after deleting ``target``."""
    parent = target.parent
    while parent != target_dir and parent.is_relative_to(target_dir):
        try:
            parent.rmdir()
        except OSError:
            # Still holds other outputs.
            return
        parent = parent.parent


def _delete_removed(
    removed: frozenset[str], target_dir: Path, log: Log
) -> tuple[int, tuple[str, ...]]:
    deleted = 0
    failures: list[str] = []
    for relative in sorted(removed):
        target = map_target(target_dir, relative)
        try:
            target.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            log.warn(f"Could not delete {target}: {exc}")
            failures.append(str(target))
            continue
        else:
            deleted += 1
        _prune_empty_parents(target, target_dir)
    return deleted, tuple(failures)


def _write_modified(
    modified: frozenset[str],
    source_dir: Path,
    target_dir: Path,
    transformable: Transformable,
    transform: Transform,
) -> Result[tuple[int, int], IOFailure]:
    transformed = 0
    copied = 0
    for relative in sorted(modified):
        source = source_dir / relative
        target = map_target(target_dir, relative)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            return Failure(IOFailure(operation="mkdir", path=str(target.parent), message=str(exc)))

        if transformable(source):
            try:
                transform(source, target)
            except (OSError, UnicodeError) as exc:
                return Failure(IOFailure(operation="transform", path=str(source), message=str(exc)))
            transformed += 1
        else:
            try:
                shutil.copyfile(source, target)
            except OSError as exc:
                return Failure(IOFailure(operation="copy", path=str(source), message=str(exc)))
            copied += 1
    return Success((transformed, copied))


def synchronize(
    source_dir: Path,
    target_dir: Path,
    transformable: Transformable,
    transform: Transform,
    store: ManifestStore,
    log: Log,
) -> Result[SyncReport, SyncError]:
    """
    Bring ``target_dir`` up to date with ``source_dir`` and report what was done.

    Args:
        source_dir: Tree to mirror. A missing directory is treated as empty,
            which removes every previously produced output.
        target_dir: Tree receiving transformed or copied files.
        transformable: Predicate choosing transform over verbatim copy per source file.
        transform: Writes the transformed ``source`` to ``target``.
        store: Manifest persistence for this source tree.
        log: Progress sink.

    Returns:
        Success(SyncReport) after the manifest has been committed,
        Failure(IOFailure) if a write, copy or the commit failed; the manifest is
        left as it was so the next run retries.
    """
    previous = store.load_or_empty(source_dir, log)

    match _scan(source_dir):
        case Failure(scan_error):
            return Failure(scan_error)
        case Success(current):
            pass

    delta = compute_delta(previous.entries, current)
    report = SyncReport(target_dir=target_dir, delta=delta)

    if not delta.is_empty:
        log.info(f"Preprocessing directory {source_dir}...")
        deleted, delete_failures = _delete_removed(delta.removed, target_dir, log)

        match _write_modified(delta.modified, source_dir, target_dir, transformable, transform):
            case Failure(write_error):
                return Failure(write_error)
            case Success((transformed, copied)):
                report = SyncReport(
                    target_dir=target_dir,
                    delta=delta,
                    transformed=transformed,
                    copied=copied,
                    deleted=deleted,
                    delete_failures=delete_failures,
                )
        log.info(
            f"Directory preprocessed: {target_dir} "
            f"({report.transformed} transformed, {report.copied} copied, {report.deleted} deleted)"
        )

    manifest = Manifest(source_dir=canonical_dir(source_dir), entries=current)
    if delta.is_empty and manifest == previous and store.path.exists():
        return Success(report)

    try:
        store.commit(manifest)
    except OSError as exc:
        return Failure(IOFailure(operation="commit", path=str(store.path), message=str(exc)))

    return Success(report)


def sync_directory(
    source_dir: Path,
    target_dir: Path,
    transformable: Transformable,
    transform: Transform,
    store: ManifestStore,
    log: Log,
) -> Result[Path, SyncError]:
    """Run :func:`synchronize` and return ``target_dir`` on success."""
    return synchronize(source_dir, target_dir, transformable, transform, store, log).map(
        lambda report: report.target_dir
    )


__all__ = [
    "SyncReport",
    "Transformable",
    "map_target",
    "plan",
    "scan_tree",
    "sync_directory",
    "synchronize",
]
