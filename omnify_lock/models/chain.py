"""Version chain models.

A :class:`VersionChain` is an append-only ledger of :class:`VersionBlock`
entries.  Each block locks the content hashes of every schema file at the
time of a deployment and links to its predecessor through
``previous_hash``, so that editing any historic block, or any locked schema
file, is detectable.

Verification and policy results are plain data: callers inspect every
violation rather than catching the first one.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import ConfigDict, Field

from omnify_lock.models.base import LockModel

CHAIN_TYPE = "omnify-version-chain"


class ChainSchemaEntry(LockModel):
    """Content hash of one schema file at lock time."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    relative_path: str
    content_hash: str = Field(..., description="SHA-256 of the raw file content.")


class VersionBlock(LockModel):
    """One locked deployment state."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(..., min_length=1, description="Version label; not guaranteed unique.")
    block_hash: str
    previous_hash: str | None = Field(default=None, description="None only for the genesis block.")
    locked_at: str
    environment: str
    deployed_by: str | None = None
    schemas: list[ChainSchemaEntry] = Field(default_factory=list)
    comment: str | None = None


class VersionChain(LockModel):
    version: Literal[1] = 1
    type: Literal["omnify-version-chain"] = CHAIN_TYPE
    genesis_hash: str | None = None
    latest_hash: str | None = None
    blocks: list[VersionBlock] = Field(default_factory=list)
    created_at: str
    updated_at: str


# ---------------------------------------------------------------------------
# Verification results
# ---------------------------------------------------------------------------


class CorruptedBlockInfo(LockModel):
    version: str
    expected_hash: str
    actual_hash: str
    reason: str


class TamperedSchemaInfo(LockModel):
    """A locked schema file whose live content no longer matches its lock."""

    schema_name: str
    file_path: str
    locked_hash: str
    current_hash: str
    locked_in_version: str


class DeletedSchemaInfo(LockModel):
    """A locked schema file that no longer exists."""

    schema_name: str
    file_path: str
    locked_in_version: str
    locked_hash: str


class ChainVerificationResult(LockModel):
    valid: bool
    block_count: int = 0
    verified_blocks: list[str] = Field(default_factory=list)
    corrupted_blocks: list[CorruptedBlockInfo] = Field(default_factory=list)
    tampered_schemas: list[TamperedSchemaInfo] = Field(default_factory=list)
    deleted_locked_schemas: list[DeletedSchemaInfo] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Deploy
# ---------------------------------------------------------------------------


class SchemaFile(LockModel):
    """Location of one schema file to be locked."""

    name: str = Field(..., min_length=1)
    relative_path: str
    file_path: str


class DeployOptions(LockModel):
    version: str | None = Field(default=None, description="Version label; generated when omitted.")
    environment: str | None = Field(
        default=None,
        min_length=1,
        description="Deploy environment; defaults to the configured environment.",
    )
    deployed_by: str | None = None
    comment: str | None = None


class DeployResult(LockModel):
    success: bool
    block: VersionBlock | None = None
    error: str | None = None
    added_schemas: list[str] = Field(default_factory=list)
    modified_schemas: list[str] = Field(
        default_factory=list,
        description="Schemas whose content changed since their last lock (advisory).",
    )
    warnings: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Lock policy
# ---------------------------------------------------------------------------


class LockAction(str, Enum):
    DELETE = "delete"
    MODIFY = "modify"


class LockRequest(LockModel):
    """One (schema, action) pair for a bulk lock check."""

    name: str
    action: LockAction


class LockCheckResult(LockModel):
    allowed: bool
    reason: str | None = None
    affected_schemas: list[str] = Field(default_factory=list)
    locked_in_versions: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


class LockedSchemaInfo(LockModel):
    """Most recent lock state of one schema across the chain."""

    hash: str
    version: str
    relative_path: str


class ChainSummary(LockModel):
    block_count: int
    schema_count: int
    first_version: str | None = None
    latest_version: str | None = None
    environments: list[str] = Field(default_factory=list)
