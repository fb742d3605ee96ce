"""Snapshot models for capturing point-in-time schema state.

A :class:`SchemaSnapshot` records the normalised structure of one schema so
that a later run can diff against it field by field.  ``relative_path`` and
``modified_at`` are stored for human inspection only and are **not** part of
the content hash.

Rename hints are absent from :class:`PropertySnapshot`.  They
travel next to the snapshots as :data:`RenameHints` and are never persisted;
an old lock file that still carries a ``renamedFrom`` key has it dropped on
parse.
"""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from omnify_lock.models.base import LockModel

# Current field name -> previous field name, for a single schema.
RenameHints = dict[str, str]

# Schema name -> rename hints for that schema.
SchemaRenameHints = dict[str, RenameHints]


class PropertySnapshot(LockModel):
    """Normalised, immutable representation of a single field."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = Field(..., description="Field type tag.")
    nullable: bool | None = None
    unique: bool | None = None
    default: Any = None
    length: int | None = None
    unsigned: bool | None = None
    precision: int | None = Field(default=None, description="Total digits for Decimal fields.")
    scale: int | None = Field(default=None, description="Decimal places for Decimal fields.")
    enum_values: list[str] | None = Field(default=None, alias="enum")

    # -- Association metadata --
    relation: str | None = None
    target: str | None = None
    on_delete: str | None = None
    on_update: str | None = None
    mapped_by: str | None = None
    join_table: str | None = None
    pivot_fields: dict[str, dict[str, Any]] | None = None

    # -- Framework serialisation hints --
    hidden: bool | None = None
    fillable: bool | None = None
    field_overrides: dict[str, dict[str, Any]] | None = Field(default=None, alias="fields")


class IndexSnapshot(LockModel):
    """A custom index as captured in a snapshot."""

    model_config = ConfigDict(frozen=True)

    columns: list[str] = Field(..., min_length=1, description="Ordered column list.")
    unique: bool = False
    name: str | None = None


class SchemaSnapshot(LockModel):
    """Full structural snapshot of one schema (lock file v2)."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    kind: str = "object"
    hash: str = Field(..., min_length=1, description="SHA-256 content hash of the structural document.")
    relative_path: str = Field(..., description="Schema file path relative to the schemas directory.")
    modified_at: str = Field(..., description="File modification time, ISO-8601 (metadata only).")
    auto_id: bool | None = Field(default=None, alias="id")
    id_type: str | None = None
    properties: dict[str, PropertySnapshot] = Field(default_factory=dict)
    timestamps: bool | None = None
    soft_delete: bool | None = None
    indexes: list[IndexSnapshot] | None = None
    unique_constraints: list[list[str]] | None = None
    values: list[str] | None = None


class SchemaHash(LockModel):
    """Lightweight hash-only record of one schema (lock file v1)."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    hash: str = Field(..., min_length=1)
    relative_path: str
    modified_at: str
