"""Snapshot builder: loaded schemas to hashable, comparable snapshots."""

from omnify_lock.snapshot.builder import (
    build_schema_hashes,
    build_schema_snapshots,
    build_snapshot,
    collect_rename_hints,
    compute_schema_hash,
    extract_rename_hints,
    property_to_snapshot,
    schema_to_snapshot,
)

__all__ = [
    "build_schema_hashes",
    "build_schema_snapshots",
    "build_snapshot",
    "collect_rename_hints",
    "compute_schema_hash",
    "extract_rename_hints",
    "property_to_snapshot",
    "schema_to_snapshot",
]
