"""File operations for reforge configuration files.

Writes are atomic (temp file + fsync + os.replace) and guarded by a
filelock so two concurrent `reforge init` runs cannot interleave their
output. The lock file is left next to the config and never removed.
Every OSError is classified into a ReforgeError before it leaves this
module.
"""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

import click
from filelock import FileLock, Timeout
from rich.console import Console
from rich.markup import escape

from reforge.core.config import ProjectConfig
from reforge.core.errors import (
    CorruptedConfigError,
    DirectoryCreationError,
    FileAlreadyExistsError,
    FileSystemError,
    NotFoundError,
    PermissionDeniedError,
    ReforgeError,
    UserCancelledError,
    ValidationError,
    from_os_error,
)

logger = logging.getLogger(__name__)
console = Console()

CONFIG_FILE_NAME = ".reforge.json"
BACKUP_SUFFIX = ".backup"
LOCK_SUFFIX = ".lock"
LOCK_TIMEOUT_SECONDS = 30

PathLike = Union[str, Path]


@dataclass
class FileInfo:
    """Details shown before overwriting a file."""
    path: Path
    size: int
    modified: datetime

    @property
    def modified_display(self) -> str:
        return self.modified.strftime("%Y-%m-%d %H:%M:%S UTC")


# =============================================================================
# Directories
# =============================================================================

def ensure_directory_exists(path: PathLike) -> None:
    """Create ``path`` and any missing parents.

    Raises:
        ValidationError: If the path (or a parent) exists but is not a directory
        PermissionDeniedError: If the directory cannot be created for lack of rights
        DirectoryCreationError: For any other failure
    """
    path = Path(path)

    if path.exists():
        if not path.is_dir():
            raise ValidationError(f"Path '{path}' exists but is not a directory")
        return

    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        raise PermissionDeniedError(path) from e
    except (FileExistsError, NotADirectoryError) as e:
        raise ValidationError(
            f"Cannot create directory '{path}': a parent path is not a directory"
        ) from e
    except OSError as e:
        raise DirectoryCreationError(path, e) from e
    logger.debug("Created directory %s", path)


def check_write_permissions(dir_path: PathLike) -> None:
    """Verify that files can be created in ``dir_path``."""
    dir_path = Path(dir_path)
    ensure_directory_exists(dir_path)

    try:
        fd, probe = tempfile.mkstemp(dir=str(dir_path), prefix=".reforge_write_test_")
    except PermissionError as e:
        raise PermissionDeniedError(dir_path) from e
    except OSError as e:
        raise from_os_error(e, dir_path) from e
    os.close(fd)
    os.unlink(probe)


def canonicalize_path(path: PathLike) -> Path:
    """Return an absolute, normalized version of ``path``.

    The path does not need to exist yet.
    """
    raw = os.fspath(path)
    if "\0" in raw:
        raise ValidationError("Path contains null characters")
    return Path(os.path.abspath(os.path.expanduser(raw)))


# =============================================================================
# Config files
# =============================================================================

def get_config_path(dir_path: PathLike) -> Path:
    return Path(dir_path) / CONFIG_FILE_NAME


def config_exists_in_directory(dir_path: PathLike) -> bool:
    return get_config_path(dir_path).exists()


def write_config(config: ProjectConfig, file_path: PathLike) -> None:
    """Validate ``config`` and write it atomically to ``file_path``."""
    file_path = Path(file_path)

    config.validate()

    parent = file_path.parent
    ensure_directory_exists(parent)
    check_write_permissions(parent)

    content = config.to_json_string() + "\n"
    lock_path = file_path.with_name(file_path.name + LOCK_SUFFIX)
    lock = FileLock(str(lock_path), timeout=LOCK_TIMEOUT_SECONDS)

    try:
        with lock:
            _atomic_write(file_path, content)
    except Timeout as e:
        raise FileSystemError(f"Timed out waiting for lock on '{file_path}'", e) from e
    except OSError as e:
        raise from_os_error(e, file_path) from e

    logger.debug("Wrote configuration to %s", file_path)


def _atomic_write(file_path: Path, content: str) -> None:
    fd = None
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(file_path.parent),
            suffix=".tmp",
            prefix=".reforge_",
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fd = None  # os.fdopen takes ownership of fd
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, str(file_path))
        tmp_path = None
    finally:
        if fd is not None:
            os.close(fd)
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)


def read_config(file_path: PathLike) -> ProjectConfig:
    """Load and validate a configuration file.

    Raises:
        NotFoundError: If the file does not exist
        CorruptedConfigError: If it cannot be parsed or fails validation
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise NotFoundError(f"configuration file '{file_path}' does not exist")

    try:
        text = file_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise CorruptedConfigError(file_path) from e
    except OSError as e:
        raise from_os_error(e, file_path) from e

    try:
        return ProjectConfig.from_json_string(text)
    except ReforgeError as e:
        logger.debug("Rejected %s: %s", file_path, e.message)
        raise CorruptedConfigError(file_path) from e


def write_config_to_directory(config: ProjectConfig, dir_path: PathLike) -> Path:
    config_path = get_config_path(dir_path)
    write_config(config, config_path)
    return config_path


def read_config_from_directory(dir_path: PathLike) -> ProjectConfig:
    return read_config(get_config_path(dir_path))


def write_config_with_backup(config: ProjectConfig, file_path: PathLike) -> None:
    """Write ``config``, restoring the previous file if the write fails."""
    file_path = Path(file_path)
    backup_path = file_path.with_name(file_path.name + BACKUP_SUFFIX)

    if file_path.exists():
        try:
            shutil.copy2(str(file_path), str(backup_path))
        except OSError as e:
            raise from_os_error(e, backup_path) from e

    try:
        write_config(config, file_path)
    except ReforgeError:
        if backup_path.exists():
            try:
                shutil.copy2(str(backup_path), str(file_path))
                backup_path.unlink()
            except OSError:
                logger.warning("Could not restore %s from backup", file_path)
        raise

    if backup_path.exists():
        try:
            backup_path.unlink()
        except OSError:
            logger.warning("Could not remove backup file %s", backup_path)


# =============================================================================
# Overwrite confirmation
# =============================================================================

def get_file_info(file_path: PathLike) -> FileInfo:
    file_path = Path(file_path)
    if not file_path.exists():
        raise NotFoundError(f"file '{file_path}' does not exist")
    try:
        stat = file_path.stat()
    except OSError as e:
        raise from_os_error(e, file_path) from e
    return FileInfo(
        path=file_path,
        size=stat.st_size,
        modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
    )


def confirm_overwrite(file_path: PathLike) -> bool:
    """Describe the existing file and ask whether to overwrite it."""
    info = get_file_info(file_path)

    console.print("[yellow]⚠[/] Configuration file already exists:")
    console.print(f"   Path: {escape(str(info.path))}")
    console.print(f"   Size: {info.size} bytes")
    console.print(f"   Modified: {info.modified_display}")
    console.print()

    try:
        confirmed = click.confirm("Do you want to overwrite the existing file?", default=False)
    except click.Abort:
        confirmed = False

    if confirmed:
        console.print("[green]✓[/] File will be overwritten")
    else:
        console.print("[red]✗[/] Operation cancelled by user")
    return confirmed


def ensure_overwrite_allowed(
    config_path: PathLike,
    force: bool = False,
    interactive: bool = True,
) -> None:
    """Decide whether an existing config file may be replaced.

    Nothing to decide when the file is missing or ``force`` is set.
    Otherwise the user is asked, or the write is refused outright when
    there is no terminal to ask on.

    Raises:
        FileAlreadyExistsError: If the file exists and ``interactive`` is false
        UserCancelledError: If the user declines the overwrite
    """
    config_path = Path(config_path)
    if force or not config_path.exists():
        return
    if not interactive:
        raise FileAlreadyExistsError(config_path)
    if not confirm_overwrite(config_path):
        raise UserCancelledError("File overwrite cancelled")


def write_config_replacing(config: ProjectConfig, config_path: PathLike) -> None:
    """Write ``config``, keeping a backup while an existing file is replaced."""
    if Path(config_path).exists():
        write_config_with_backup(config, config_path)
    else:
        write_config(config, config_path)


def write_config_to_directory_with_confirmation(
    config: ProjectConfig,
    dir_path: PathLike,
    force: bool = False,
    interactive: bool = True,
) -> Path:
    """Write the config, asking before replacing an existing file.

    Raises:
        FileAlreadyExistsError: If the file exists and ``interactive`` is false
        UserCancelledError: If the user declines the overwrite
    """
    config_path = get_config_path(dir_path)
    ensure_overwrite_allowed(config_path, force=force, interactive=interactive)
    write_config_replacing(config, config_path)
    return config_path
