"""Deep diff engine for comparing two snapshots of the same schema.

Column changes are classified in four passes, in this order:

1. **renamed** -- a current field whose rename hint names a field that exists
   in the previous snapshot.  Both names are claimed and skipped by the
   remaining passes.  Attribute changes riding on the rename are reported in
   ``modifications``.
2. **added** -- current fields absent from the previous snapshot.
3. **removed** -- previous fields absent from the current snapshot.
4. **modified** -- fields present in both whose compared attributes differ.

A rename hint that names a field missing from the previous snapshot is
ignored and the field is reported as added.

Index changes are keyed by ``(ordered columns, unique)``: reordering the
columns of a composite index is a removal plus an addition.  Option changes
cover timestamps, soft-delete, auto-id and id type.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from omnify_lock.hashing import canonical_json
from omnify_lock.models.diff import (
    ColumnChange,
    ColumnChangeType,
    IndexChange,
    IndexChangeType,
    OptionChange,
    OptionChanges,
    SchemaDiff,
)
from omnify_lock.models.snapshot import IndexSnapshot, PropertySnapshot, SchemaSnapshot

logger = logging.getLogger(__name__)

# (reported name, attribute) pairs compared with ==.
_SCALAR_ATTRIBUTES: tuple[tuple[str, str], ...] = (
    ("type", "type"),
    ("nullable", "nullable"),
    ("unique", "unique"),
)

# Compared after ``default`` in the reported order.
_TRAILING_SCALAR_ATTRIBUTES: tuple[tuple[str, str], ...] = (
    ("length", "length"),
    ("unsigned", "unsigned"),
    ("precision", "precision"),
    ("scale", "scale"),
)

_ASSOCIATION_ATTRIBUTES: tuple[tuple[str, str], ...] = (
    ("relation", "relation"),
    ("target", "target"),
    ("onDelete", "on_delete"),
    ("onUpdate", "on_update"),
    ("mappedBy", "mapped_by"),
)


# ---------------------------------------------------------------------------
# Field-level comparison
# ---------------------------------------------------------------------------


def _value_differs(previous: object, current: object) -> bool:
    """Compare two JSON values structurally; ``True`` and ``1`` differ, key order does not."""
    return canonical_json(previous) != canonical_json(current)


def diff_property_snapshots(previous: PropertySnapshot, current: PropertySnapshot) -> list[str]:
    """Return the names of the compared attributes that differ, in a fixed order."""
    modifications: list[str] = []

    for label, attr in _SCALAR_ATTRIBUTES:
        if getattr(previous, attr) != getattr(current, attr):
            modifications.append(label)

    if _value_differs(previous.default, current.default):
        modifications.append("default")

    for label, attr in _TRAILING_SCALAR_ATTRIBUTES:
        if getattr(previous, attr) != getattr(current, attr):
            modifications.append(label)

    if _value_differs(previous.enum_values, current.enum_values):
        modifications.append("enum")

    for label, attr in _ASSOCIATION_ATTRIBUTES:
        if getattr(previous, attr) != getattr(current, attr):
            modifications.append(label)

    return modifications


def _diff_columns(
    previous: Mapping[str, PropertySnapshot],
    current: Mapping[str, PropertySnapshot],
    rename_hints: Mapping[str, str],
) -> list[ColumnChange]:
    changes: list[ColumnChange] = []
    renamed_new: set[str] = set()
    renamed_old: set[str] = set()

    # 1. Renames.
    for name, current_prop in current.items():
        source = rename_hints.get(name)
        if not source or source not in previous:
            continue
        previous_prop = previous[source]
        mods = diff_property_snapshots(previous_prop, current_prop)
        changes.append(
            ColumnChange(
                column=name,
                change_type=ColumnChangeType.RENAMED,
                previous_column=source,
                previous_def=previous_prop,
                current_def=current_prop,
                modifications=mods or None,
            )
        )
        renamed_new.add(name)
        renamed_old.add(source)

    claimed = renamed_new | renamed_old

    # 2. Added.
    for name, current_prop in current.items():
        if name not in previous and name not in claimed:
            changes.append(ColumnChange(column=name, change_type=ColumnChangeType.ADDED, current_def=current_prop))

    # 3. Removed.
    for name, previous_prop in previous.items():
        if name not in current and name not in claimed:
            changes.append(ColumnChange(column=name, change_type=ColumnChangeType.REMOVED, previous_def=previous_prop))

    # 4. Modified.
    for name, current_prop in current.items():
        if name not in previous or name in claimed:
            continue
        previous_prop = previous[name]
        mods = diff_property_snapshots(previous_prop, current_prop)
        if mods:
            changes.append(
                ColumnChange(
                    column=name,
                    change_type=ColumnChangeType.MODIFIED,
                    previous_def=previous_prop,
                    current_def=current_prop,
                    modifications=mods,
                )
            )

    return changes


# ---------------------------------------------------------------------------
# Indexes and options
# ---------------------------------------------------------------------------


def _index_key(index: IndexSnapshot) -> tuple[tuple[str, ...], bool]:
    return tuple(index.columns), index.unique


def diff_indexes(
    previous: list[IndexSnapshot] | None,
    current: list[IndexSnapshot] | None,
) -> list[IndexChange]:
    """Return added indexes followed by removed indexes."""
    previous_keys = {_index_key(idx): idx for idx in previous or []}
    current_keys = {_index_key(idx): idx for idx in current or []}

    changes = [
        IndexChange(change_type=IndexChangeType.ADDED, index=idx)
        for key, idx in current_keys.items()
        if key not in previous_keys
    ]
    changes.extend(
        IndexChange(change_type=IndexChangeType.REMOVED, index=idx)
        for key, idx in previous_keys.items()
        if key not in current_keys
    )
    return changes


def diff_options(previous: SchemaSnapshot, current: SchemaSnapshot) -> OptionChanges | None:
    """Compare table-level options; ``None`` when none of them changed."""
    changed: dict[str, OptionChange] = {}

    for attr in ("timestamps", "soft_delete", "auto_id", "id_type"):
        before = getattr(previous, attr)
        after = getattr(current, attr)
        if before != after:
            changed[attr] = OptionChange(from_=before, to=after)

    if not changed:
        return None
    return OptionChanges(**changed)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def diff_schema_snapshots(
    previous: SchemaSnapshot,
    current: SchemaSnapshot,
    rename_hints: Mapping[str, str] | None = None,
) -> SchemaDiff:
    """Deep-diff two snapshots of the same schema.

    Parameters
    ----------
    previous:
        Snapshot from the lock file.
    current:
        Snapshot built from the schema as it is now.
    rename_hints:
        Optional ``{current_field: previous_field}`` mapping.  Hints whose
        source field does not exist in *previous* are ignored.

    Returns
    -------
    SchemaDiff
        Column, index and option changes.  Empty lists and ``None`` options
        mean nothing changed on that axis.
    """
    column_changes = _diff_columns(previous.properties, current.properties, rename_hints or {})
    index_changes = diff_indexes(previous.indexes, current.indexes)
    option_changes = diff_options(previous, current)

    logger.debug(
        "Schema %s: %d column, %d index changes, options changed=%s",
        current.name,
        len(column_changes),
        len(index_changes),
        option_changes is not None,
    )

    return SchemaDiff(
        column_changes=column_changes,
        index_changes=index_changes,
        option_changes=option_changes,
    )
