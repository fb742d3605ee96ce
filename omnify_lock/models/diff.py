"""Diff models for comparing schema snapshots.

These models represent the output of comparing the current schema set
against the last-known state held in a lock file, down to individual
columns, indexes and table-level options.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field

from omnify_lock.models.base import LockModel
from omnify_lock.models.snapshot import IndexSnapshot, PropertySnapshot


class ChangeType(str, Enum):
    """Classification of a schema-level change."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


class ColumnChangeType(str, Enum):
    """Classification of a column-level change."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    RENAMED = "renamed"


class IndexChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"


class ColumnChange(LockModel):
    """A single column-level difference between two snapshots."""

    column: str = Field(..., description="Column name in the current snapshot (or previous, for removals).")
    change_type: ColumnChangeType
    previous_def: PropertySnapshot | None = None
    current_def: PropertySnapshot | None = None
    modifications: list[str] | None = Field(
        default=None,
        description="Attribute names that differ, for 'modified' and 'renamed' changes.",
    )
    previous_column: str | None = Field(
        default=None,
        description="Previous column name, for 'renamed' changes.",
    )


class IndexChange(LockModel):
    change_type: IndexChangeType
    index: IndexSnapshot


class OptionChange(LockModel):
    """Before/after value of one table-level option."""

    from_: Any = Field(default=None, alias="from")
    to: Any = None


class OptionChanges(LockModel):
    """Table-level option changes; only differing options are populated."""

    timestamps: OptionChange | None = None
    soft_delete: OptionChange | None = None
    auto_id: OptionChange | None = Field(default=None, alias="id")
    id_type: OptionChange | None = None

    def changed_options(self) -> list[str]:
        """Return the (camelCase) names of the options that changed."""
        return sorted(self.to_document().keys())


class SchemaDiff(LockModel):
    """Result of deep-diffing two snapshots of the same schema."""

    column_changes: list[ColumnChange] = Field(default_factory=list)
    index_changes: list[IndexChange] = Field(default_factory=list)
    option_changes: OptionChanges | None = None

    @property
    def is_empty(self) -> bool:
        return not self.column_changes and not self.index_changes and self.option_changes is None


class SchemaChange(LockModel):
    """A schema-level change, with column detail for deep comparisons."""

    schema_name: str
    change_type: ChangeType
    previous_hash: str | None = None
    current_hash: str | None = None
    column_changes: list[ColumnChange] | None = None
    index_changes: list[IndexChange] | None = None
    option_changes: OptionChanges | None = None


class LockFileComparison(LockModel):
    """Result of comparing the current schema set to a lock file."""

    has_changes: bool = False
    changes: list[SchemaChange] = Field(default_factory=list)
    unchanged: list[str] = Field(default_factory=list)

    def changes_of_type(self, change_type: ChangeType) -> list[SchemaChange]:
        """Return changes filtered to a single :class:`ChangeType`."""
        return [c for c in self.changes if c.change_type == change_type]
