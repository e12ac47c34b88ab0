"""Error taxonomy for reforge.

Every failure the CLI can report is a subclass of ReforgeError. Each kind
carries a problem message, a remediation hint, a process exit code
(sysexits.h style) and a retryability flag. ContextError wraps any other
kind with the operation that was in progress and delegates its behavior
to the wrapped cause.
"""

import errno
import getpass
import logging
import os
import re
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

# Exit codes (see sysexits.h)
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_UNAVAILABLE = 69
EX_CANTCREAT = 73
EX_IOERR = 74
EX_NOPERM = 77
EX_INTERRUPTED = 130

_RETRYABLE_ERRNOS = {errno.EINTR, errno.EAGAIN, errno.ETIMEDOUT}

PathLike = Union[str, Path]


# =============================================================================
# Base
# =============================================================================

class ReforgeError(Exception):
    """Base exception for reforge operations."""

    EXIT_CODE = 1
    HINT = "Run 'reforge --help' for usage information."

    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.hint = hint or self.HINT

    def __str__(self) -> str:
        return f"{self.message}\nHint: {self.hint}"

    def exit_code(self) -> int:
        return self.EXIT_CODE

    def is_retryable(self) -> bool:
        return False


# =============================================================================
# I/O
# =============================================================================

class FileSystemError(ReforgeError):
    """Wraps an OSError raised while touching the filesystem."""

    EXIT_CODE = EX_IOERR
    HINT = "Check that the path is correct and the disk is accessible."

    def __init__(self, message: str, os_error: Optional[OSError] = None, hint: Optional[str] = None):
        super().__init__(message, hint)
        self.os_error = os_error
        if os_error is not None:
            self.__cause__ = os_error

    def is_retryable(self) -> bool:
        if self.os_error is None:
            return False
        if isinstance(self.os_error, (InterruptedError, TimeoutError, BlockingIOError)):
            return True
        return self.os_error.errno in _RETRYABLE_ERRNOS


class PermissionDeniedError(ReforgeError):
    """No permission to read or write a path."""

    EXIT_CODE = EX_NOPERM
    HINT = "Check the permissions of the path or choose another output directory."

    def __init__(self, path: PathLike):
        super().__init__(f"Permission denied: '{path}'")
        self.path = Path(path)


class FileAlreadyExistsError(ReforgeError):
    """Target file exists and overwriting was not allowed."""

    EXIT_CODE = EX_CANTCREAT
    HINT = "Use --force to overwrite the existing file."

    def __init__(self, path: PathLike):
        super().__init__(f"File already exists: '{path}'")
        self.path = Path(path)


class DirectoryCreationError(ReforgeError):
    """A directory could not be created."""

    EXIT_CODE = EX_CANTCREAT
    HINT = "Check that the parent directory exists and is writable."

    def __init__(self, path: PathLike, os_error: Optional[OSError] = None):
        reason = f": {os_error.strerror or os_error}" if os_error is not None else ""
        super().__init__(f"Failed to create directory '{path}'{reason}")
        self.path = Path(path)
        self.os_error = os_error
        if os_error is not None:
            self.__cause__ = os_error


class DiskSpaceError(ReforgeError):
    """The device ran out of space or quota."""

    EXIT_CODE = EX_IOERR
    HINT = "Free up disk space and run the command again."

    def __init__(self, path: Optional[PathLike] = None):
        where = f" while writing '{path}'" if path is not None else ""
        super().__init__(f"Not enough disk space{where}")
        self.path = Path(path) if path is not None else None


class NotFoundError(ReforgeError):
    """A required file or directory does not exist."""

    EXIT_CODE = EX_NOINPUT
    HINT = "Check the path, or run 'reforge init' to create a configuration."

    def __init__(self, what: str):
        super().__init__(f"Not found: {what}")


class NetworkError(ReforgeError):
    """A remote resource could not be reached."""

    EXIT_CODE = EX_UNAVAILABLE
    HINT = "Check your network connection and try again."

    def is_retryable(self) -> bool:
        return True


# =============================================================================
# Data
# =============================================================================

class JsonParseError(ReforgeError):
    """Malformed JSON or a JSON document of the wrong shape."""

    EXIT_CODE = EX_DATAERR
    HINT = "Fix the JSON syntax or delete the file and run 'reforge init --force'."

    def __init__(self, detail: str):
        super().__init__(f"JSON parsing error: {detail}")


class ValidationError(ReforgeError):
    """Free-text configuration validation failure."""

    EXIT_CODE = EX_DATAERR
    HINT = "Correct the reported value and run the command again."

    def __init__(self, detail: str, hint: Optional[str] = None):
        super().__init__(f"Configuration validation error: {detail}", hint)
        self.detail = detail


class InvalidAgentError(ReforgeError):
    """Unknown agent name."""

    EXIT_CODE = EX_USAGE
    HINT = "Pass --agent copilot or --agent claude."

    def __init__(self, agent: str):
        super().__init__(f"Invalid agent '{agent}'. Supported agents: copilot, claude")
        self.agent = agent


class InvalidPackageError(ReforgeError):
    """A package entry failed validation."""

    EXIT_CODE = EX_DATAERR
    HINT = "Package IDs must not contain whitespace and versions must look like '1.0.0'."

    def __init__(self, reason: str):
        super().__init__(f"Invalid package: {reason}")
        self.reason = reason


class CorruptedConfigError(ReforgeError):
    """The configuration file exists but cannot be loaded."""

    EXIT_CODE = EX_DATAERR
    HINT = "Restore the file from version control or re-create it with 'reforge init --force'."

    def __init__(self, path: PathLike):
        super().__init__(f"Configuration file is corrupted: '{path}'")
        self.path = Path(path)


class MissingRequiredFieldError(ReforgeError):
    """A mandatory configuration field is absent."""

    EXIT_CODE = EX_DATAERR
    HINT = "Add the missing field or re-create the file with 'reforge init --force'."

    def __init__(self, field_name: str):
        super().__init__(f"Missing required field: '{field_name}'")
        self.field_name = field_name


# =============================================================================
# Flow
# =============================================================================

class UserCancelledError(ReforgeError):
    """The user declined a prompt."""

    EXIT_CODE = EX_INTERRUPTED
    HINT = "Re-run the command and confirm, or pass --force to skip the prompt."

    def __init__(self, reason: str = "Operation cancelled by user"):
        super().__init__(reason)


class ContextError(ReforgeError):
    """Adds the operation in progress to another reforge error."""

    def __init__(self, cause: ReforgeError, operation: str, context: str):
        super().__init__(f"Failed to {operation}: {context}", cause.hint)
        self.cause = cause
        self.operation = operation
        self.context = context
        self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.message}\n  Caused by: {self.cause}"

    def exit_code(self) -> int:
        return self.cause.exit_code()

    def is_retryable(self) -> bool:
        return self.cause.is_retryable()

    def root_cause(self) -> ReforgeError:
        cause = self.cause
        while isinstance(cause, ContextError):
            cause = cause.cause
        return cause


# =============================================================================
# Helpers
# =============================================================================

def with_context(error: ReforgeError, operation: str, context: str) -> ContextError:
    """Wrap ``error`` with the operation and context it occurred in."""
    return ContextError(error, operation, context)


def from_os_error(err: OSError, path: Optional[PathLike] = None) -> ReforgeError:
    """Classify an OSError into the matching reforge error."""
    target = path if path is not None else (err.filename or "<unknown path>")
    if isinstance(err, PermissionError):
        error: ReforgeError = PermissionDeniedError(target)
    elif isinstance(err, FileNotFoundError):
        error = NotFoundError(f"'{target}'")
    elif isinstance(err, FileExistsError):
        error = FileAlreadyExistsError(target)
    elif err.errno in (errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)):
        error = DiskSpaceError(target)
    else:
        return FileSystemError(f"File system error on '{target}': {err.strerror or err}", err)
    error.__cause__ = err
    return error


def error_chain(error: BaseException) -> List[BaseException]:
    """Return ``error`` followed by each of its causes."""
    chain = []
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        chain.append(current)
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return chain


_EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")


def scrub(text: str) -> str:
    """Remove user-identifying details from a diagnostic string."""
    home = os.path.expanduser("~")
    if home and home not in ("~", "/"):
        text = text.replace(home, "~")
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = None
    if user and len(user) > 2:
        text = re.sub(rf"\b{re.escape(user)}\b", "<user>", text)
    return _EMAIL_RE.sub("<email>", text)


def log_securely(error: BaseException) -> None:
    """Log the error chain at DEBUG level with PII scrubbed."""
    for depth, link in enumerate(error_chain(error)):
        code = link.exit_code() if isinstance(link, ReforgeError) else None
        logger.debug(
            "error[%d] %s (exit_code=%s): %s",
            depth,
            type(link).__name__,
            code,
            scrub(getattr(link, "message", None) or str(link)),
        )
    if isinstance(error, ContextError):
        root = error.root_cause()
        logger.debug("root cause: %s (exit_code=%s)", type(root).__name__, root.exit_code())
