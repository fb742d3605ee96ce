"""Deterministic content hashing.

All hashes in this package are SHA-256 hex digests of UTF-8 text, or of raw
bytes for files on disk.  Structural documents (snapshot content, block
preimages) are first rendered as canonical JSON -- sorted keys, no
insignificant whitespace -- so that logically equal documents always produce
byte-identical input to the digest.

Metadata that should not affect identity (file path, modification time) must
be left out of the document by the caller; this module hashes exactly what it
is given.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any


def compute_hash(content: str) -> str:
    """Return the SHA-256 digest of *content*.

    Returns
    -------
    str
        A 64-character lowercase hexadecimal digest.
    """
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def canonical_json(document: Any) -> str:
    """Serialise *document* to canonical JSON (sorted keys, compact separators)."""
    return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_document_hash(document: Any) -> str:
    """Hash a JSON-compatible structural document in canonical form."""
    return compute_hash(canonical_json(document))


def compute_file_hash(path: str | Path) -> str:
    """Return the SHA-256 digest of a file's raw bytes.

    No decoding or newline translation happens, so any byte-level edit to
    the file changes the digest.

    Raises
    ------
    OSError
        If the file cannot be read (including when it does not exist).
    """
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()
