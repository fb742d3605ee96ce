"""Deterministic diff engine for schema snapshots."""

from omnify_lock.diff.schema_diff import (
    diff_indexes,
    diff_options,
    diff_property_snapshots,
    diff_schema_snapshots,
)
from omnify_lock.diff.structural_diff import compare_schemas, compare_schemas_deep
from omnify_lock.models.diff import SchemaDiff

__all__ = [
    "SchemaDiff",
    "compare_schemas",
    "compare_schemas_deep",
    "diff_indexes",
    "diff_options",
    "diff_property_snapshots",
    "diff_schema_snapshots",
]
