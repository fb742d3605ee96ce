"""Domain models for schema snapshots, lock files and the version chain."""

from omnify_lock.models.base import LockModel, utc_now_iso
from omnify_lock.models.chain import (
    CHAIN_TYPE,
    ChainSchemaEntry,
    ChainSummary,
    ChainVerificationResult,
    CorruptedBlockInfo,
    DeletedSchemaInfo,
    DeployOptions,
    DeployResult,
    LockAction,
    LockCheckResult,
    LockedSchemaInfo,
    LockRequest,
    SchemaFile,
    TamperedSchemaInfo,
    VersionBlock,
    VersionChain,
)
from omnify_lock.models.diff import (
    ChangeType,
    ColumnChange,
    ColumnChangeType,
    IndexChange,
    IndexChangeType,
    LockFileComparison,
    OptionChange,
    OptionChanges,
    SchemaChange,
    SchemaDiff,
)
from omnify_lock.models.lock_file import (
    LOCK_FILE_ADAPTER,
    GeneratedMigration,
    LockFile,
    LockFileV1,
    LockFileV2,
    MigrationType,
    MigrationValidation,
    RegenerationTarget,
)
from omnify_lock.models.schema_definition import (
    IndexDefinition,
    LoadedSchema,
    PropertyDefinition,
    SchemaOptions,
)
from omnify_lock.models.snapshot import (
    IndexSnapshot,
    PropertySnapshot,
    RenameHints,
    SchemaHash,
    SchemaRenameHints,
    SchemaSnapshot,
)

__all__ = [
    "CHAIN_TYPE",
    "LOCK_FILE_ADAPTER",
    "ChainSchemaEntry",
    "ChainSummary",
    "ChainVerificationResult",
    "ChangeType",
    "ColumnChange",
    "ColumnChangeType",
    "CorruptedBlockInfo",
    "DeletedSchemaInfo",
    "DeployOptions",
    "DeployResult",
    "GeneratedMigration",
    "IndexChange",
    "IndexChangeType",
    "IndexDefinition",
    "IndexSnapshot",
    "LoadedSchema",
    "LockAction",
    "LockCheckResult",
    "LockFile",
    "LockFileComparison",
    "LockFileV1",
    "LockFileV2",
    "LockModel",
    "LockRequest",
    "LockedSchemaInfo",
    "MigrationType",
    "MigrationValidation",
    "OptionChange",
    "OptionChanges",
    "PropertyDefinition",
    "PropertySnapshot",
    "RegenerationTarget",
    "RenameHints",
    "SchemaChange",
    "SchemaDiff",
    "SchemaFile",
    "SchemaHash",
    "SchemaOptions",
    "SchemaRenameHints",
    "SchemaSnapshot",
    "TamperedSchemaInfo",
    "VersionBlock",
    "VersionChain",
    "utc_now_iso",
]
