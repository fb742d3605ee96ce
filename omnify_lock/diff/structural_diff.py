"""Compare the current schema set against a lock file.

Both comparisons share one classification:

* names only in the current set are **added**;
* names only in the lock file are **removed**;
* names in both with equal hashes are **unchanged**;
* names in both with differing hashes are **modified**.

:func:`compare_schemas` is the *fast path* -- hash equality only, usable with
either lock file version.  :func:`compare_schemas_deep` additionally attaches
a column/index/option diff to every modified schema when the lock file holds
full snapshots.

All name lists are sorted alphabetically so identical inputs always produce
identical output.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from omnify_lock.diff.schema_diff import diff_schema_snapshots
from omnify_lock.models.diff import ChangeType, LockFileComparison, SchemaChange
from omnify_lock.models.lock_file import LockFileV1, LockFileV2
from omnify_lock.models.snapshot import SchemaHash, SchemaRenameHints, SchemaSnapshot

logger = logging.getLogger(__name__)


def _previous_records(lock_file: LockFileV1 | LockFileV2 | None) -> Mapping[str, SchemaHash | SchemaSnapshot]:
    if lock_file is None:
        return {}
    if isinstance(lock_file, LockFileV2):
        return lock_file.schemas
    if isinstance(lock_file, LockFileV1):
        return lock_file.schemas
    raise TypeError(f"Unsupported lock file type: {type(lock_file).__name__}")


def _classify(
    previous: Mapping[str, SchemaHash | SchemaSnapshot],
    current: Mapping[str, SchemaHash | SchemaSnapshot],
) -> tuple[list[str], list[str], list[str], list[str]]:
    """Split names into (added, removed, modified, unchanged), each sorted."""
    previous_keys = set(previous)
    current_keys = set(current)
    common_keys = previous_keys & current_keys

    added = sorted(current_keys - previous_keys)
    removed = sorted(previous_keys - current_keys)
    modified = sorted(name for name in common_keys if previous[name].hash != current[name].hash)
    unchanged = sorted(name for name in common_keys if previous[name].hash == current[name].hash)
    return added, removed, modified, unchanged


def compare_schemas(
    current_hashes: Mapping[str, SchemaHash | SchemaSnapshot],
    lock_file: LockFileV1 | LockFileV2 | None,
) -> LockFileComparison:
    """Compare current schemas to a lock file by content hash only.

    Parameters
    ----------
    current_hashes:
        Mapping of schema name to its current hash record (or snapshot).
    lock_file:
        The previously persisted lock file, or ``None`` on first run.

    Returns
    -------
    LockFileComparison
        Added, removed and modified schemas plus the unchanged names.
    """
    previous = _previous_records(lock_file)
    added, removed, modified, unchanged = _classify(previous, current_hashes)

    changes: list[SchemaChange] = [
        SchemaChange(schema_name=name, change_type=ChangeType.ADDED, current_hash=current_hashes[name].hash)
        for name in added
    ]
    changes.extend(
        SchemaChange(schema_name=name, change_type=ChangeType.REMOVED, previous_hash=previous[name].hash)
        for name in removed
    )
    changes.extend(
        SchemaChange(
            schema_name=name,
            change_type=ChangeType.MODIFIED,
            previous_hash=previous[name].hash,
            current_hash=current_hashes[name].hash,
        )
        for name in modified
    )

    return LockFileComparison(has_changes=bool(changes), changes=changes, unchanged=unchanged)


def compare_schemas_deep(
    current_snapshots: Mapping[str, SchemaSnapshot],
    lock_file: LockFileV1 | LockFileV2 | None,
    rename_hints: SchemaRenameHints | None = None,
) -> LockFileComparison:
    """Compare current snapshots to a lock file with column-level detail.

    A v1 lock file holds no snapshots, so modified schemas are reported
    without column detail in that case.

    Parameters
    ----------
    current_snapshots:
        Mapping of schema name to its current snapshot.
    lock_file:
        The previously persisted lock file, or ``None`` on first run.
    rename_hints:
        Optional per-schema ``{current_field: previous_field}`` hints.
    """
    if not isinstance(lock_file, LockFileV2):
        if lock_file is not None:
            logger.debug("Lock file v%d has no snapshots; falling back to hash comparison", lock_file.version)
        return compare_schemas(current_snapshots, lock_file)

    previous = lock_file.schemas
    hints = rename_hints or {}
    added, removed, modified, unchanged = _classify(previous, current_snapshots)

    changes: list[SchemaChange] = [
        SchemaChange(schema_name=name, change_type=ChangeType.ADDED, current_hash=current_snapshots[name].hash)
        for name in added
    ]
    changes.extend(
        SchemaChange(schema_name=name, change_type=ChangeType.REMOVED, previous_hash=previous[name].hash)
        for name in removed
    )

    for name in modified:
        diff = diff_schema_snapshots(previous[name], current_snapshots[name], hints.get(name))
        changes.append(
            SchemaChange(
                schema_name=name,
                change_type=ChangeType.MODIFIED,
                previous_hash=previous[name].hash,
                current_hash=current_snapshots[name].hash,
                column_changes=diff.column_changes or None,
                index_changes=diff.index_changes or None,
                option_changes=diff.option_changes,
            )
        )

    return LockFileComparison(has_changes=bool(changes), changes=changes, unchanged=unchanged)
