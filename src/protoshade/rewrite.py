"""
Line-oriented file rewriting.

Generated sources are shaded by replacing one literal on every line, for
example moving ``google.protobuf`` references into a vendored namespace. The
rewrite goes to a temporary sibling file first and is renamed over the target
only once every line has been written, so a crash never leaves a half-written
output behind.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any


LineFn = Callable[[str], str]
Transform = Callable[[Path, Path], None]

# mkstemp creates 0600 files; generated sources should be world-readable.
GENERATED_FILE_MODE = 0o644


@contextmanager
def _atomic_target(target: Path, mode: str, encoding: str | None = None) -> Iterator[IO[Any]]:
    """Open a temp file next to ``target``; replace ``target`` with it on clean exit."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, mode, encoding=encoding, newline="" if encoding else None) as handle:
            yield handle
        os.chmod(tmp_path, GENERATED_FILE_MODE)
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` via temp file and rename."""
    with _atomic_target(path, "wb") as handle:
        handle.write(data)


def rewrite_file(source: Path, target: Path, line_fn: LineFn, encoding: str = "utf-8") -> None:
    """
    Apply ``line_fn`` to every line of ``source`` and write the result to ``target``.

    Each output line is terminated with ``os.linesep`` regardless of the
    terminator it had in the source.

    Raises:
        OSError: On any read or write failure; ``target`` is left untouched.
        UnicodeDecodeError: If ``source`` is not valid in ``encoding``.
    """
    with source.open("r", encoding=encoding, newline=None) as reader:
        with _atomic_target(target, "w", encoding=encoding) as writer:
            for line in reader:
                writer.write(line_fn(line.removesuffix("\n")))
                writer.write(os.linesep)


def line_transform(line_fn: LineFn) -> Transform:
    """Curry :func:`rewrite_file` into a ``(source, target)`` transform."""

    def transform(source: Path, target: Path) -> None:
        rewrite_file(source, target, line_fn)

    return transform


def replace_literal(old: str, new: str) -> LineFn:
    """Line function replacing every occurrence of ``old`` with ``new``."""

    def replace(line: str) -> str:
        return line.replace(old, new)

    return replace


__all__ = [
    "LineFn",
    "Transform",
    "atomic_write_bytes",
    "line_transform",
    "replace_literal",
    "rewrite_file",
]
