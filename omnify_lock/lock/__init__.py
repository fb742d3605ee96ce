"""Lock file store and migration history tracking."""

from omnify_lock.lock.migrations import (
    extract_table_name_from_filename,
    extract_timestamp_from_filename,
    find_migration_by_table,
    get_migrations_to_regenerate,
    validate_migrations,
)
from omnify_lock.lock.store import (
    LOCK_FILE_NAME,
    LOCK_FILE_VERSION,
    LockFileFormatError,
    add_enhanced_migration_record,
    add_migration_record,
    append_migration_record,
    create_empty_lock_file,
    default_lock_file_path,
    is_lock_file_v2,
    read_lock_file,
    update_lock_file,
    update_lock_file_v1,
    write_lock_file,
)

__all__ = [
    "LOCK_FILE_NAME",
    "LOCK_FILE_VERSION",
    "LockFileFormatError",
    "add_enhanced_migration_record",
    "add_migration_record",
    "append_migration_record",
    "create_empty_lock_file",
    "default_lock_file_path",
    "extract_table_name_from_filename",
    "extract_timestamp_from_filename",
    "find_migration_by_table",
    "get_migrations_to_regenerate",
    "is_lock_file_v2",
    "read_lock_file",
    "update_lock_file",
    "update_lock_file_v1",
    "validate_migrations",
    "write_lock_file",
]
