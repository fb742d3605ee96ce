"""Lock file models.

Two on-disk formats exist and are modelled as a tagged union on the
``version`` field:

* **v1** (legacy) -- ``schemas`` maps name to a hash-only :class:`SchemaHash`.
* **v2** -- ``schemas`` maps name to a full :class:`SchemaSnapshot`.

Both carry the same append-only list of :class:`GeneratedMigration` records
and an optional checksum of the last generated schema document.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from omnify_lock.models.base import LockModel
from omnify_lock.models.snapshot import SchemaHash, SchemaSnapshot


class MigrationType(str, Enum):
    """Kind of operation a generated migration performs."""

    CREATE = "create"
    ALTER = "alter"
    DROP = "drop"
    PIVOT = "pivot"


class GeneratedMigration(LockModel):
    """One previously generated migration artifact.

    ``timestamp``, ``table_name`` and ``type`` are optional so that records
    written before they existed still parse; readers fall back to the file
    name for those.
    """

    file_name: str = Field(..., min_length=1, description="e.g. '2026_01_13_100000_create_users_table.php'.")
    timestamp: str | None = Field(default=None, description="Timestamp prefix, e.g. '2026_01_13_100000'.")
    table_name: str | None = None
    type: MigrationType | None = None
    generated_at: str
    schemas: list[str] = Field(default_factory=list, description="Schemas involved in this migration.")
    checksum: str = Field(default="", description="SHA-256 of the migration file content.")


class LockFileV1(LockModel):
    version: Literal[1] = 1
    updated_at: str
    driver: str
    schemas: dict[str, SchemaHash] = Field(default_factory=dict)
    migrations: list[GeneratedMigration] = Field(default_factory=list)
    hcl_checksum: str | None = None


class LockFileV2(LockModel):
    version: Literal[2] = 2
    updated_at: str
    driver: str
    schemas: dict[str, SchemaSnapshot] = Field(default_factory=dict)
    migrations: list[GeneratedMigration] = Field(default_factory=list)
    hcl_checksum: str | None = None


LockFile = Annotated[LockFileV1 | LockFileV2, Field(discriminator="version")]

LOCK_FILE_ADAPTER: TypeAdapter[LockFileV1 | LockFileV2] = TypeAdapter(LockFile)


class MigrationValidation(LockModel):
    """Result of checking migration files on disk against lock file records."""

    valid: bool
    missing_files: list[str] = Field(default_factory=list)
    modified_files: list[str] = Field(default_factory=list, description="Files whose checksum changed.")
    stale_files: list[str] = Field(
        default_factory=list,
        description="Untracked files whose timestamp prefix is older than the staleness threshold.",
    )
    total_tracked: int = 0
    total_on_disk: int = 0


class RegenerationTarget(LockModel):
    """Everything needed to regenerate a deleted migration under its original name."""

    file_name: str
    timestamp: str
    table_name: str
    type: MigrationType
    schemas: list[str] = Field(default_factory=list)
