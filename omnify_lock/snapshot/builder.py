"""Build comparable snapshots from loaded schema definitions.

The snapshot builder strips a :class:`LoadedSchema` down to its structural
content -- name, kind, fields, options and enum values -- hashes that
document, and wraps the result with location metadata that does *not*
participate in the hash.  Moving or touching a schema file therefore leaves
its hash unchanged, while any structural edit changes it.

Rename hints (``renamedFrom`` on a field) are split off here and returned
separately by :func:`extract_rename_hints`; they are neither hashed nor
stored on the snapshot.

Typical usage::

    snapshots = build_schema_snapshots(schemas)
    hints = collect_rename_hints(schemas)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from omnify_lock.hashing import compute_document_hash
from omnify_lock.models.base import utc_now_iso
from omnify_lock.models.schema_definition import LoadedSchema, PropertyDefinition
from omnify_lock.models.snapshot import (
    IndexSnapshot,
    PropertySnapshot,
    RenameHints,
    SchemaHash,
    SchemaRenameHints,
    SchemaSnapshot,
)

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA_KIND = "object"

# Field-level keys that describe how to migrate rather than what exists.
_TRANSIENT_PROPERTY_FIELDS: frozenset[str] = frozenset({"renamed_from"})


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------


def _property_document(prop: PropertyDefinition) -> dict[str, Any]:
    return prop.model_dump(
        mode="json",
        by_alias=True,
        exclude_none=True,
        exclude=set(_TRANSIENT_PROPERTY_FIELDS),
    )


def compute_schema_hash(schema: LoadedSchema) -> str:
    """Return the content hash of a schema's structural definition.

    Only ``name``, ``kind``, ``properties``, ``options`` and ``values`` are
    hashed.  ``file_path``, ``relative_path`` and rename hints are excluded.

    Returns
    -------
    str
        A 64-character lowercase hexadecimal SHA-256 digest.
    """
    properties = {name: _property_document(prop) for name, prop in (schema.properties or {}).items()}
    options = schema.options.to_document() if schema.options is not None else {}

    return compute_document_hash(
        {
            "name": schema.name,
            "kind": schema.kind or DEFAULT_SCHEMA_KIND,
            "properties": properties,
            "options": options,
            "values": schema.values or [],
        }
    )


# ---------------------------------------------------------------------------
# Snapshot conversion
# ---------------------------------------------------------------------------


def property_to_snapshot(prop: PropertyDefinition) -> PropertySnapshot:
    """Convert a loaded field definition into its normalised snapshot."""
    return PropertySnapshot.model_validate(_property_document(prop))


def _normalise_unique_constraints(unique: list[str] | list[list[str]] | None) -> list[list[str]] | None:
    """Return composite unique constraints as a list of column lists.

    A schema may declare a single constraint (``["a", "b"]``) or several
    (``[["a", "b"], ["c"]]``).
    """
    if not unique:
        return None
    if isinstance(unique[0], list):
        return [list(cols) for cols in unique]  # type: ignore[arg-type]
    return [list(unique)]  # type: ignore[arg-type]


def schema_to_snapshot(schema: LoadedSchema, hash: str, modified_at: str) -> SchemaSnapshot:
    """Create a :class:`SchemaSnapshot` from a loaded schema and its precomputed hash."""
    properties = {name: property_to_snapshot(prop) for name, prop in (schema.properties or {}).items()}

    opts = schema.options
    indexes: list[IndexSnapshot] | None = None
    unique_constraints: list[list[str]] | None = None

    if opts is not None:
        if opts.indexes:
            indexes = [
                IndexSnapshot(columns=list(idx.columns), unique=bool(idx.unique), name=idx.name)
                for idx in opts.indexes
            ]
        unique_constraints = _normalise_unique_constraints(opts.unique)

    return SchemaSnapshot(
        name=schema.name,
        kind=schema.kind or DEFAULT_SCHEMA_KIND,
        hash=hash,
        relative_path=schema.relative_path,
        modified_at=modified_at,
        properties=properties,
        auto_id=opts.auto_id if opts else None,
        id_type=opts.id_type if opts else None,
        timestamps=opts.timestamps if opts else None,
        soft_delete=opts.soft_delete if opts else None,
        indexes=indexes,
        unique_constraints=unique_constraints,
        values=list(schema.values) if schema.values is not None else None,
    )


def _file_modified_at(file_path: str) -> str:
    """Return the file's mtime as ISO-8601, or the current time if stat fails."""
    try:
        mtime = os.stat(file_path).st_mtime
    except OSError as exc:
        logger.debug("Cannot stat %s (%s); using current time", file_path, exc)
        return utc_now_iso()
    stamp = datetime.fromtimestamp(mtime, UTC)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_snapshot(schema: LoadedSchema) -> SchemaSnapshot:
    """Hash one schema and wrap it as a snapshot with file metadata."""
    return schema_to_snapshot(schema, compute_schema_hash(schema), _file_modified_at(schema.file_path))


def build_schema_snapshots(schemas: Mapping[str, LoadedSchema]) -> dict[str, SchemaSnapshot]:
    """Build full snapshots (lock file v2) for every schema, keyed by name."""
    return {name: build_snapshot(schema) for name, schema in schemas.items()}


def build_schema_hashes(schemas: Mapping[str, LoadedSchema]) -> dict[str, SchemaHash]:
    """Build hash-only records (lock file v1) for every schema, keyed by name."""
    return {
        name: SchemaHash(
            name=name,
            hash=compute_schema_hash(schema),
            relative_path=schema.relative_path,
            modified_at=_file_modified_at(schema.file_path),
        )
        for name, schema in schemas.items()
    }


# ---------------------------------------------------------------------------
# Rename hints
# ---------------------------------------------------------------------------


def extract_rename_hints(schema: LoadedSchema) -> RenameHints:
    """Return ``{current_field: previous_field}`` for every field with a rename hint."""
    return {
        name: prop.renamed_from
        for name, prop in (schema.properties or {}).items()
        if prop.renamed_from
    }


def collect_rename_hints(schemas: Mapping[str, LoadedSchema]) -> SchemaRenameHints:
    """Return rename hints for every schema that declares at least one."""
    hints: SchemaRenameHints = {}
    for name, schema in schemas.items():
        schema_hints = extract_rename_hints(schema)
        if schema_hints:
            hints[name] = schema_hints
    return hints
