"""Core modules for reforge.

This package contains the foundational modules used by the CLI:
- config: Agent, Package and ProjectConfig model with validation
- errors: Error taxonomy with exit codes and retryability
"""

from reforge.core.config import (
    Agent,
    Package,
    ProjectConfig,
    parse_rfc3339,
    MAX_PACKAGES,
    MAX_METADATA_ENTRIES,
)

from reforge.core.errors import (
    ReforgeError,
    FileSystemError,
    JsonParseError,
    ValidationError,
    InvalidAgentError,
    InvalidPackageError,
    FileAlreadyExistsError,
    PermissionDeniedError,
    DirectoryCreationError,
    CorruptedConfigError,
    MissingRequiredFieldError,
    UserCancelledError,
    NetworkError,
    DiskSpaceError,
    NotFoundError,
    ContextError,
    with_context,
    from_os_error,
    log_securely,
)

__all__ = [
    # Config
    "Agent",
    "Package",
    "ProjectConfig",
    "parse_rfc3339",
    "MAX_PACKAGES",
    "MAX_METADATA_ENTRIES",
    # Errors
    "ReforgeError",
    "FileSystemError",
    "JsonParseError",
    "ValidationError",
    "InvalidAgentError",
    "InvalidPackageError",
    "FileAlreadyExistsError",
    "PermissionDeniedError",
    "DirectoryCreationError",
    "CorruptedConfigError",
    "MissingRequiredFieldError",
    "UserCancelledError",
    "NetworkError",
    "DiskSpaceError",
    "NotFoundError",
    "ContextError",
    "with_context",
    "from_os_error",
    "log_securely",
]
