"""Lock file persistence.

The lock file (``.omnify.lock``) records the last-known snapshot of every
schema and the history of generated migrations.  It is always replaced as a
whole: :func:`update_lock_file` builds a new document from the current
snapshots while carrying over the migration history and schema-document
checksum, and :func:`write_lock_file` swaps it into place atomically.

Reading distinguishes three outcomes:

* the file does not exist -- ``None``;
* the file parses and carries version 1 or 2 -- the matching model;
* anything else -- :class:`LockFileFormatError`.  A corrupt lock file is never
  mistaken for a fresh start.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TypeVar

from pydantic import ValidationError

from omnify_lock.config import Settings, load_settings
from omnify_lock.fileio import atomic_write_text, read_json_document, render_json_document
from omnify_lock.hashing import compute_hash
from omnify_lock.models.base import utc_now_iso
from omnify_lock.models.lock_file import (
    LOCK_FILE_ADAPTER,
    GeneratedMigration,
    LockFileV1,
    LockFileV2,
    MigrationType,
)
from omnify_lock.models.snapshot import SchemaHash, SchemaSnapshot

logger = logging.getLogger(__name__)

LOCK_FILE_NAME = ".omnify.lock"
LOCK_FILE_VERSION = 2
SUPPORTED_LOCK_FILE_VERSIONS: frozenset[int] = frozenset({1, 2})

_LockFileT = TypeVar("_LockFileT", LockFileV1, LockFileV2)


class LockFileFormatError(ValueError):
    """Raised when a lock file exists but cannot be parsed."""


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def create_empty_lock_file(driver: str | None = None) -> LockFileV2:
    """Create a new, empty v2 lock file for *driver* (default: ``Settings.driver``)."""
    return LockFileV2(updated_at=utc_now_iso(), driver=driver or load_settings().driver)


def is_lock_file_v2(lock_file: LockFileV1 | LockFileV2) -> bool:
    return isinstance(lock_file, LockFileV2)


def default_lock_file_path(project_dir: str | Path, settings: Settings | None = None) -> Path:
    """Return the configured lock file location inside *project_dir*."""
    return (settings or load_settings()).lock_file_path(project_dir)


# ---------------------------------------------------------------------------
# Read / write
# ---------------------------------------------------------------------------


def read_lock_file(path: str | Path) -> LockFileV1 | LockFileV2 | None:
    """Read a lock file from disk.

    Returns
    -------
    LockFileV1 | LockFileV2 | None
        The parsed lock file, or ``None`` if the file does not exist.

    Raises
    ------
    LockFileFormatError
        If the file is not valid JSON, has an unknown version, or does not
        match the schema of its version.
    """
    try:
        data = read_json_document(path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise LockFileFormatError(f"Lock file {path} is not valid JSON: {exc}") from exc

    if data is None:
        return None

    version = data.get("version") if isinstance(data, dict) else None
    if isinstance(version, bool) or version not in SUPPORTED_LOCK_FILE_VERSIONS:
        raise LockFileFormatError(f"Lock file version mismatch: expected 1 or 2, got {version!r}")

    try:
        return LOCK_FILE_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise LockFileFormatError(f"Lock file {path} is malformed: {exc}") from exc


def write_lock_file(path: str | Path, lock_file: LockFileV1 | LockFileV2) -> None:
    """Write *lock_file* to *path*, replacing any existing file atomically."""
    atomic_write_text(path, render_json_document(lock_file.to_document()))
    logger.info(
        "Lock file written: %s (v%d, %d schemas, %d migrations)",
        path,
        lock_file.version,
        len(lock_file.schemas),
        len(lock_file.migrations),
    )


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


def update_lock_file(
    existing: LockFileV1 | LockFileV2 | None,
    current_snapshots: Mapping[str, SchemaSnapshot],
    driver: str | None = None,
) -> LockFileV2:
    """Build a new v2 lock file from the current snapshots.

    Migration records and ``hcl_checksum`` are carried over from *existing*.
    Snapshots hold no rename hints, so nothing transient reaches the file.
    *driver* defaults to ``Settings.driver``.
    """
    return LockFileV2(
        updated_at=utc_now_iso(),
        driver=driver or load_settings().driver,
        schemas=dict(current_snapshots),
        migrations=list(existing.migrations) if existing else [],
        hcl_checksum=existing.hcl_checksum if existing else None,
    )


def update_lock_file_v1(
    existing: LockFileV1 | LockFileV2 | None,
    current_hashes: Mapping[str, SchemaHash],
    driver: str | None = None,
) -> LockFileV1:
    """Build a new legacy v1 lock file from hash-only records."""
    return LockFileV1(
        updated_at=utc_now_iso(),
        driver=driver or load_settings().driver,
        schemas=dict(current_hashes),
        migrations=list(existing.migrations) if existing else [],
        hcl_checksum=existing.hcl_checksum if existing else None,
    )


# ---------------------------------------------------------------------------
# Migration records
# ---------------------------------------------------------------------------


def append_migration_record(lock_file: _LockFileT, record: GeneratedMigration) -> _LockFileT:
    """Return a copy of *lock_file* with *record* appended to its history."""
    return lock_file.model_copy(
        update={
            "updated_at": utc_now_iso(),
            "migrations": [*lock_file.migrations, record],
        }
    )


def add_migration_record(
    lock_file: _LockFileT,
    file_name: str,
    schemas: Sequence[str],
    migration_content: str,
) -> _LockFileT:
    """Append a basic migration record (file name, schemas, checksum)."""
    record = GeneratedMigration(
        file_name=file_name,
        generated_at=utc_now_iso(),
        schemas=list(schemas),
        checksum=compute_hash(migration_content),
    )
    return append_migration_record(lock_file, record)


def add_enhanced_migration_record(
    lock_file: _LockFileT,
    *,
    file_name: str,
    timestamp: str,
    table_name: str,
    type: MigrationType,
    schemas: Sequence[str],
    content: str,
) -> _LockFileT:
    """Append a migration record carrying timestamp, table and type for regeneration."""
    record = GeneratedMigration(
        file_name=file_name,
        timestamp=timestamp,
        table_name=table_name,
        type=type,
        generated_at=utc_now_iso(),
        schemas=list(schemas),
        checksum=compute_hash(content),
    )
    return append_migration_record(lock_file, record)
