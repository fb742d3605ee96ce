"""In-memory schema definitions as supplied by the schema loader.

These models describe the *input* to the snapshot builder.  They are
produced by an external loader (YAML/JSON schema files) and are permissive:
unknown keys are retained so that framework-specific extensions survive the
trip through this package untouched.
"""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from omnify_lock.models.base import LockModel


class PropertyDefinition(LockModel):
    """A single field as written by the schema author."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1, description="Field type tag, e.g. 'String' or 'Association'.")
    nullable: bool | None = None
    unique: bool | None = None
    default: Any = None
    length: int | None = None
    unsigned: bool | None = None
    precision: int | None = None
    scale: int | None = None
    enum_values: list[str] | None = Field(default=None, alias="enum")
    relation: str | None = None
    target: str | None = None
    on_delete: str | None = None
    on_update: str | None = None
    mapped_by: str | None = None
    join_table: str | None = None
    pivot_fields: dict[str, dict[str, Any]] | None = None
    hidden: bool | None = None
    fillable: bool | None = None
    field_overrides: dict[str, dict[str, Any]] | None = Field(default=None, alias="fields")

    renamed_from: str | None = Field(
        default=None,
        description="Previous field name; a rename hint consumed by the diff engine only.",
    )


class IndexDefinition(LockModel):
    """A custom index declared in a schema's options."""

    columns: list[str] = Field(..., min_length=1)
    unique: bool | None = None
    name: str | None = None


class SchemaOptions(LockModel):
    """Table-level options of an object schema."""

    model_config = ConfigDict(extra="allow")

    auto_id: bool | None = Field(default=None, alias="id")
    id_type: str | None = None
    timestamps: bool | None = None
    soft_delete: bool | None = None
    indexes: list[IndexDefinition] | None = None
    # Either a single composite constraint or a list of them.
    unique: list[str] | list[list[str]] | None = None


class LoadedSchema(LockModel):
    """One schema definition, loaded from disk, with its location."""

    name: str = Field(..., min_length=1)
    kind: str | None = Field(default=None, description="'object' (default) or 'enum'.")
    properties: dict[str, PropertyDefinition] | None = None
    options: SchemaOptions | None = None
    values: list[str] | None = Field(default=None, description="Enum members for 'enum' schemas.")
    file_path: str = Field(..., min_length=1, description="Absolute path to the schema file.")
    relative_path: str = Field(..., min_length=1, description="Path relative to the schemas directory.")
