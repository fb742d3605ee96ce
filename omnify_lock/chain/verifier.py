"""Chain integrity verification and lock policy.

:func:`verify_chain` runs three independent checks:

1. **block hash** -- each block's hash is recomputed from its own fields and
   the running previous hash;
2. **linkage** -- each block's stored ``previous_hash`` must equal the hash
   of the block before it (``None`` for the genesis block);
3. **live files** -- the latest locked hash of every schema is compared with
   the schema file on disk; missing files are reported as deleted, differing
   content as tampered.

Failures are collected, never raised, and the walk never stops early.  A
locked file that exists but cannot be read is an I/O error and propagates.

The lock policy is absolute: a schema that appears in any block may not be
modified or deleted, and there is no unlock.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from omnify_lock.chain.ledger import compute_block_hash, get_locked_schemas
from omnify_lock.hashing import compute_file_hash
from omnify_lock.models.chain import (
    ChainVerificationResult,
    CorruptedBlockInfo,
    DeletedSchemaInfo,
    LockAction,
    LockCheckResult,
    LockRequest,
    TamperedSchemaInfo,
    VersionChain,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


def _verify_blocks(chain: VersionChain) -> tuple[list[str], list[CorruptedBlockInfo]]:
    verified: list[str] = []
    corrupted: list[CorruptedBlockInfo] = []
    previous_hash: str | None = None

    for block in chain.blocks:
        block_ok = True

        expected = compute_block_hash(
            previous_hash,
            block.version,
            block.locked_at,
            block.environment,
            block.schemas,
        )
        if expected != block.block_hash:
            corrupted.append(
                CorruptedBlockInfo(
                    version=block.version,
                    expected_hash=expected,
                    actual_hash=block.block_hash,
                    reason="Block hash mismatch - chain integrity compromised",
                )
            )
            block_ok = False

        if block.previous_hash != previous_hash:
            corrupted.append(
                CorruptedBlockInfo(
                    version=block.version,
                    expected_hash=previous_hash or "null",
                    actual_hash=block.previous_hash or "null",
                    reason="Previous hash chain broken",
                )
            )
            block_ok = False

        if block_ok:
            verified.append(block.version)

        previous_hash = block.block_hash

    return verified, corrupted


def verify_chain(chain: VersionChain, schemas_dir: str | Path) -> ChainVerificationResult:
    """Verify chain integrity and compare locked schemas with live files.

    Parameters
    ----------
    chain:
        The version chain to verify.
    schemas_dir:
        Directory that locked ``relative_path`` values are resolved against.

    Returns
    -------
    ChainVerificationResult
        ``valid`` is ``True`` only when there are no corrupted blocks, no
        tampered schemas and no deleted locked schemas.

    Raises
    ------
    OSError
        If a locked schema file exists but cannot be read.
    """
    verified, corrupted = _verify_blocks(chain)

    base = Path(schemas_dir)
    tampered: list[TamperedSchemaInfo] = []
    deleted: list[DeletedSchemaInfo] = []

    for name, locked in get_locked_schemas(chain).items():
        file_path = base / locked.relative_path

        if not file_path.exists():
            deleted.append(
                DeletedSchemaInfo(
                    schema_name=name,
                    file_path=locked.relative_path,
                    locked_in_version=locked.version,
                    locked_hash=locked.hash,
                )
            )
            continue

        current_hash = compute_file_hash(file_path)
        if current_hash != locked.hash:
            tampered.append(
                TamperedSchemaInfo(
                    schema_name=name,
                    file_path=locked.relative_path,
                    locked_hash=locked.hash,
                    current_hash=current_hash,
                    locked_in_version=locked.version,
                )
            )

    valid = not corrupted and not tampered and not deleted
    if not valid:
        logger.warning(
            "Version chain verification failed: %d corrupted blocks, %d tampered, %d deleted",
            len(corrupted),
            len(tampered),
            len(deleted),
        )

    return ChainVerificationResult(
        valid=valid,
        block_count=len(chain.blocks),
        verified_blocks=verified,
        corrupted_blocks=corrupted,
        tampered_schemas=tampered,
        deleted_locked_schemas=deleted,
    )


# ---------------------------------------------------------------------------
# Lock policy
# ---------------------------------------------------------------------------


def check_lock_violation(chain: VersionChain, schema_name: str, action: LockAction) -> LockCheckResult:
    """Deny *action* on *schema_name* if any block has ever locked it.

    The denial lists every version whose block contains the schema.
    """
    versions = [block.version for block in chain.blocks if any(s.name == schema_name for s in block.schemas)]

    if not versions:
        return LockCheckResult(allowed=True)

    verb = "Deletion" if LockAction(action) == LockAction.DELETE else "Modification"
    return LockCheckResult(
        allowed=False,
        reason=(
            f"Schema '{schema_name}' is locked in production version(s): {', '.join(versions)}. "
            f"{verb} is not allowed."
        ),
        affected_schemas=[schema_name],
        locked_in_versions=versions,
    )


def check_bulk_lock_violation(chain: VersionChain, requests: Sequence[LockRequest]) -> LockCheckResult:
    """Check several (schema, action) requests and aggregate every denial."""
    denied: list[str] = []
    versions: list[str] = []

    for request in requests:
        result = check_lock_violation(chain, request.name, request.action)
        if result.allowed:
            continue
        denied.append(request.name)
        versions.extend(v for v in result.locked_in_versions if v not in versions)

    if not denied:
        return LockCheckResult(allowed=True)

    return LockCheckResult(
        allowed=False,
        reason=f"The following schemas are locked: {', '.join(denied)}. They cannot be modified or deleted.",
        affected_schemas=denied,
        locked_in_versions=versions,
    )
