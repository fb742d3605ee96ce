"""Migration history tracking against files on disk.

Generated migrations are named ``<YYYY_MM_DD_HHMMSS>_<action>_<table>_table.php``.
Newer lock file records store the timestamp, table and type explicitly;
older ones only have the file name, so every reader here falls back to
parsing the name when a field is missing.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from omnify_lock.config import load_settings
from omnify_lock.hashing import compute_file_hash
from omnify_lock.models.lock_file import (
    GeneratedMigration,
    LockFileV1,
    LockFileV2,
    MigrationType,
    MigrationValidation,
    RegenerationTarget,
)

logger = logging.getLogger(__name__)

_TIMESTAMP_PATTERN = re.compile(r"^(\d{4}_\d{2}_\d{2}_\d{6})_")

# Checked in order; the first match wins.
_TABLE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"_create_(.+)_table\.php$"),
    re.compile(r"_update_(.+)_table\.php$"),
    re.compile(r"_drop_(.+)_table\.php$"),
)

_TYPE_MARKERS: tuple[tuple[str, MigrationType], ...] = (
    ("_create_", MigrationType.CREATE),
    ("_update_", MigrationType.ALTER),
    ("_drop_", MigrationType.DROP),
)


# ---------------------------------------------------------------------------
# File name parsing
# ---------------------------------------------------------------------------


def extract_timestamp_from_filename(file_name: str) -> str | None:
    """Return the ``YYYY_MM_DD_HHMMSS`` prefix of a migration file name.

    >>> extract_timestamp_from_filename("2026_01_13_100000_create_users_table.php")
    '2026_01_13_100000'
    """
    match = _TIMESTAMP_PATTERN.match(file_name)
    return match.group(1) if match else None


def extract_table_name_from_filename(file_name: str) -> str | None:
    """Return the table name encoded in a migration file name.

    >>> extract_table_name_from_filename("2026_01_13_100000_create_users_table.php")
    'users'
    """
    for pattern in _TABLE_PATTERNS:
        match = pattern.search(file_name)
        if match:
            return match.group(1)
    return None


def _infer_type_from_filename(file_name: str) -> MigrationType:
    for marker, migration_type in _TYPE_MARKERS:
        if marker in file_name:
            return migration_type
    return MigrationType.CREATE


def _timestamp_to_date(timestamp: str) -> datetime | None:
    try:
        year, month, day = (int(part) for part in timestamp.split("_")[:3])
        return datetime(year, month, day)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def find_migration_by_table(
    lock_file: LockFileV1 | LockFileV2,
    table_name: str,
    type: MigrationType | None = None,
) -> GeneratedMigration | None:
    """Return the first migration record for *table_name*.

    Records with an explicit ``table_name`` also honour the optional *type*
    filter; legacy records are matched on the table parsed from their file
    name.
    """
    for record in lock_file.migrations:
        if record.table_name:
            if record.table_name == table_name and (type is None or record.type == type):
                return record
        elif extract_table_name_from_filename(record.file_name) == table_name:
            return record
    return None


def get_migrations_to_regenerate(
    lock_file: LockFileV1 | LockFileV2,
    missing_files: Iterable[str],
) -> list[RegenerationTarget]:
    """Return regeneration details for every tracked migration in *missing_files*.

    Records whose timestamp or table cannot be determined, either from
    their own fields or from the file name, are skipped.
    """
    missing = set(missing_files)
    targets: list[RegenerationTarget] = []

    for record in lock_file.migrations:
        if record.file_name not in missing:
            continue

        timestamp = record.timestamp or extract_timestamp_from_filename(record.file_name)
        if not timestamp:
            continue

        table_name = record.table_name or extract_table_name_from_filename(record.file_name)
        if not table_name:
            continue

        targets.append(
            RegenerationTarget(
                file_name=record.file_name,
                timestamp=timestamp,
                table_name=table_name,
                type=record.type or _infer_type_from_filename(record.file_name),
                schemas=list(record.schemas),
            )
        )

    return targets


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_migrations(
    lock_file: LockFileV1 | LockFileV2,
    migrations_dir: str | Path,
    *,
    stale_after_days: int | None = None,
    suffix: str | None = None,
    now: datetime | None = None,
) -> MigrationValidation:
    """Check migration files on disk against the lock file history.

    Parameters
    ----------
    lock_file:
        Lock file holding the migration history.
    migrations_dir:
        Directory containing generated migration files.  A missing directory
        is treated as empty.
    stale_after_days:
        Untracked files whose timestamp prefix is more than this many days
        old are reported as stale (typically brought in by a merge).
        Defaults to ``Settings.stale_migration_days``.
    suffix:
        File suffix identifying migration files.  Defaults to
        ``Settings.migration_suffix``.
    now:
        Reference time for staleness, local and naive; defaults to now.

    Returns
    -------
    MigrationValidation
        ``valid`` is ``True`` when no tracked file is missing or modified.
        Stale files are advisory and do not affect validity.
    """
    if stale_after_days is None or suffix is None:
        settings = load_settings()
        if stale_after_days is None:
            stale_after_days = settings.stale_migration_days
        if suffix is None:
            suffix = settings.migration_suffix

    directory = Path(migrations_dir)
    if directory.is_dir():
        files_on_disk = sorted(p.name for p in directory.iterdir() if p.is_file() and p.name.endswith(suffix))
    else:
        logger.debug("Migrations directory %s does not exist", directory)
        files_on_disk = []
    on_disk = set(files_on_disk)

    missing_files: list[str] = []
    modified_files: list[str] = []

    for record in lock_file.migrations:
        if record.file_name not in on_disk:
            missing_files.append(record.file_name)
            continue
        if not record.checksum:
            continue
        if compute_file_hash(directory / record.file_name) != record.checksum:
            modified_files.append(record.file_name)

    tracked = {record.file_name for record in lock_file.migrations}
    reference = now or datetime.now()
    stale_files: list[str] = []

    for file_name in files_on_disk:
        if file_name in tracked:
            continue
        timestamp = extract_timestamp_from_filename(file_name)
        file_date = _timestamp_to_date(timestamp) if timestamp else None
        if file_date is None:
            continue
        age_days = (reference - file_date).total_seconds() / 86400
        if age_days > stale_after_days:
            stale_files.append(file_name)

    if missing_files or modified_files:
        logger.warning(
            "Migration validation failed: %d missing, %d modified",
            len(missing_files),
            len(modified_files),
        )

    return MigrationValidation(
        valid=not missing_files and not modified_files,
        missing_files=missing_files,
        modified_files=modified_files,
        stale_files=stale_files,
        total_tracked=len(lock_file.migrations),
        total_on_disk=len(files_on_disk),
    )
