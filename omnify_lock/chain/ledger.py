"""Append-only version chain of deployment blocks.

Each deployment locks the raw content hash of every schema file into a
:class:`VersionBlock`.  A block's hash covers its predecessor's hash, its
version label, lock time, environment and schema entries, so the blocks form
a hash-linked chain: rewriting any historic block invalidates every hash
after it.

The chain file (``.omnify.chain``) is rewritten in full on every deploy.
Blocks are never edited or removed once appended.  Version labels are not
unique keys; two blocks may share a label and still have distinct hashes.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from omnify_lock.config import Settings, load_settings
from omnify_lock.fileio import atomic_write_text, read_json_document, render_json_document
from omnify_lock.hashing import compute_document_hash, compute_file_hash
from omnify_lock.models.base import utc_now_iso
from omnify_lock.models.chain import (
    CHAIN_TYPE,
    ChainSchemaEntry,
    ChainSummary,
    DeployOptions,
    DeployResult,
    LockedSchemaInfo,
    SchemaFile,
    VersionBlock,
    VersionChain,
)

logger = logging.getLogger(__name__)

VERSION_CHAIN_FILE = ".omnify.chain"
CHAIN_FORMAT_VERSION = 1


class ChainFormatError(ValueError):
    """Raised when a version chain file exists but cannot be parsed."""


# ---------------------------------------------------------------------------
# Hashing
# ---------------------------------------------------------------------------


def compute_block_hash(
    previous_hash: str | None,
    version: str,
    locked_at: str,
    environment: str,
    schemas: Sequence[ChainSchemaEntry],
) -> str:
    """Compute the hash of a block from exactly the fields it commits to.

    Author and comment are not covered; schema entries are reduced to name,
    relative path and content hash, ordered by name.
    """
    entries = sorted(schemas, key=lambda s: s.name)
    return compute_document_hash(
        {
            "previousHash": previous_hash,
            "version": version,
            "lockedAt": locked_at,
            "environment": environment,
            "schemas": [
                {"name": s.name, "relativePath": s.relative_path, "contentHash": s.content_hash} for s in entries
            ],
        }
    )


# ---------------------------------------------------------------------------
# Read / write
# ---------------------------------------------------------------------------


def create_empty_chain() -> VersionChain:
    now = utc_now_iso()
    return VersionChain(created_at=now, updated_at=now)


def default_chain_file_path(project_dir: str | Path, settings: Settings | None = None) -> Path:
    """Return the configured chain file location inside *project_dir*."""
    return (settings or load_settings()).chain_file_path(project_dir)


def read_version_chain(path: str | Path) -> VersionChain | None:
    """Read a version chain file.

    Returns
    -------
    VersionChain | None
        The parsed chain, or ``None`` if the file does not exist.

    Raises
    ------
    ChainFormatError
        If the file is not valid JSON, is not a version chain, or has an
        unsupported format version.
    """
    try:
        data = read_json_document(path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ChainFormatError(f"Version chain {path} is not valid JSON: {exc}") from exc

    if data is None:
        return None

    if (
        not isinstance(data, dict)
        or data.get("type") != CHAIN_TYPE
        or isinstance(data.get("version"), bool)
        or data.get("version") != CHAIN_FORMAT_VERSION
    ):
        raise ChainFormatError(f"Invalid version chain file format: {path}")

    try:
        return VersionChain.model_validate(data)
    except ValidationError as exc:
        raise ChainFormatError(f"Version chain {path} is malformed: {exc}") from exc


def write_version_chain(path: str | Path, chain: VersionChain) -> None:
    """Write *chain* to *path*, replacing any existing file atomically."""
    atomic_write_text(path, render_json_document(chain.to_document(exclude_none=False)))
    logger.info("Version chain written: %s (%d blocks)", path, len(chain.blocks))


# ---------------------------------------------------------------------------
# Block creation
# ---------------------------------------------------------------------------


def build_current_schema_entries(schema_files: Sequence[SchemaFile]) -> list[ChainSchemaEntry]:
    """Hash the live content of each schema file.

    Unreadable files are skipped.  Entries are sorted by name.
    """
    entries: list[ChainSchemaEntry] = []
    for schema in schema_files:
        try:
            content_hash = compute_file_hash(schema.file_path)
        except OSError as exc:
            logger.warning("Skipping unreadable schema file %s: %s", schema.file_path, exc)
            continue
        entries.append(
            ChainSchemaEntry(name=schema.name, relative_path=schema.relative_path, content_hash=content_hash)
        )
    return sorted(entries, key=lambda e: e.name)


def generate_version_name(now: datetime | None = None) -> str:
    """Return a version label derived from local time, e.g. ``v2026.01.13-100000``."""
    stamp = now or datetime.now()
    return f"v{stamp:%Y.%m.%d-%H%M%S}"


def create_deploy_block(
    chain: VersionChain,
    schemas: Sequence[ChainSchemaEntry],
    options: DeployOptions,
) -> tuple[VersionChain, VersionBlock]:
    """Create a block over *schemas* and return the extended chain with it.

    The input chain is not modified.  ``genesis_hash`` is set on the first
    block only.  Without an explicit environment the block is recorded under
    ``Settings.environment``.
    """
    version = options.version or generate_version_name()
    environment = options.environment or load_settings().environment
    locked_at = utc_now_iso()
    previous_hash = chain.latest_hash
    entries = sorted(schemas, key=lambda s: s.name)

    block_hash = compute_block_hash(previous_hash, version, locked_at, environment, entries)

    block = VersionBlock(
        version=version,
        block_hash=block_hash,
        previous_hash=previous_hash,
        locked_at=locked_at,
        environment=environment,
        deployed_by=options.deployed_by,
        schemas=entries,
        comment=options.comment,
    )

    updated = chain.model_copy(
        update={
            "genesis_hash": chain.genesis_hash or block_hash,
            "latest_hash": block_hash,
            "blocks": [*chain.blocks, block],
            "updated_at": locked_at,
        }
    )
    logger.info("Block created: version=%s hash=%s env=%s", version, block_hash[:12], environment)
    return updated, block


def deploy_version(
    chain_file_path: str | Path,
    schema_files: Sequence[SchemaFile],
    options: DeployOptions,
) -> DeployResult:
    """Lock the current state of *schema_files* into a new block and persist it.

    Schemas never locked before are reported as added; schemas whose content
    changed since their latest lock produce a warning but are still locked
    in their new state.  Nothing is written when no schema file could be
    hashed.

    Raises
    ------
    ChainFormatError
        If an existing chain file cannot be parsed.
    """
    chain = read_version_chain(chain_file_path) or create_empty_chain()
    current = build_current_schema_entries(schema_files)

    if not current:
        return DeployResult(success=False, error="No schema files found to lock")

    previous = {name: info.hash for name, info in get_locked_schemas(chain).items()}

    added: list[str] = []
    modified: list[str] = []
    warnings: list[str] = []

    for entry in current:
        locked_hash = previous.get(entry.name)
        if locked_hash is None:
            added.append(entry.name)
        elif locked_hash != entry.content_hash:
            modified.append(entry.name)
            warnings.append(
                f"Schema '{entry.name}' has been modified since last lock. "
                "This version will include the new state."
            )

    for warning in warnings:
        logger.warning(warning)

    updated, block = create_deploy_block(chain, current, options)
    write_version_chain(chain_file_path, updated)

    return DeployResult(
        success=True,
        block=block,
        added_schemas=added,
        modified_schemas=modified,
        warnings=warnings,
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def get_locked_schemas(chain: VersionChain) -> dict[str, LockedSchemaInfo]:
    """Return the most recent lock state of every schema across all blocks."""
    locked: dict[str, LockedSchemaInfo] = {}
    for block in chain.blocks:
        for schema in block.schemas:
            locked[schema.name] = LockedSchemaInfo(
                hash=schema.content_hash,
                version=block.version,
                relative_path=schema.relative_path,
            )
    return locked


def get_chain_summary(chain: VersionChain) -> ChainSummary:
    schema_names: set[str] = set()
    environments: list[str] = []

    for block in chain.blocks:
        if block.environment not in environments:
            environments.append(block.environment)
        schema_names.update(s.name for s in block.schemas)

    return ChainSummary(
        block_count=len(chain.blocks),
        schema_count=len(schema_names),
        first_version=chain.blocks[0].version if chain.blocks else None,
        latest_version=chain.blocks[-1].version if chain.blocks else None,
        environments=environments,
    )
