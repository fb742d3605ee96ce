"""Hash-linked version chain, verifier and lock policy."""

from omnify_lock.chain.ledger import (
    CHAIN_FORMAT_VERSION,
    VERSION_CHAIN_FILE,
    ChainFormatError,
    build_current_schema_entries,
    compute_block_hash,
    create_deploy_block,
    create_empty_chain,
    default_chain_file_path,
    deploy_version,
    generate_version_name,
    get_chain_summary,
    get_locked_schemas,
    read_version_chain,
    write_version_chain,
)
from omnify_lock.chain.verifier import (
    check_bulk_lock_violation,
    check_lock_violation,
    verify_chain,
)

__all__ = [
    "CHAIN_FORMAT_VERSION",
    "VERSION_CHAIN_FILE",
    "ChainFormatError",
    "build_current_schema_entries",
    "check_bulk_lock_violation",
    "check_lock_violation",
    "compute_block_hash",
    "create_deploy_block",
    "create_empty_chain",
    "default_chain_file_path",
    "deploy_version",
    "generate_version_name",
    "get_chain_summary",
    "get_locked_schemas",
    "read_version_chain",
    "verify_chain",
    "write_version_chain",
]
