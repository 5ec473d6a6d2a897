"""Content fingerprints for change detection.

Fingerprints are SHA256 digests of file bytes. Timestamps are not part of the
fingerprint, so a fresh checkout or a touch without an edit never looks
changed.
"""

from __future__ import annotations

import hashlib
from pathlib import Path


CHUNK_SIZE = 1 << 16


def fingerprint_bytes(data: bytes) -> str:
    """SHA256 hex digest of ``data``."""
    return hashlib.sha256(data).hexdigest()


def fingerprint_file(path: Path) -> str:
    """
    Compute the SHA256 hex digest of a file, reading it in chunks.

    Returns:
        64-character hex string.

    Raises:
        OSError: If the file cannot be read.
    """
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


__all__ = ["CHUNK_SIZE", "fingerprint_bytes", "fingerprint_file"]
