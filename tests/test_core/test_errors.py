"""Tests for reforge.core.errors module."""

import errno
import logging

import pytest

from reforge.core.errors import (
    ContextError,
    CorruptedConfigError,
    DirectoryCreationError,
    DiskSpaceError,
    FileAlreadyExistsError,
    FileSystemError,
    InvalidAgentError,
    InvalidPackageError,
    JsonParseError,
    MissingRequiredFieldError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    ReforgeError,
    UserCancelledError,
    ValidationError,
    error_chain,
    from_os_error,
    log_securely,
    scrub,
    with_context,
)


ALL_ERRORS = [
    FileSystemError("File system error: boom", OSError(errno.EIO, "I/O error")),
    JsonParseError("Expecting value: line 1 column 1 (char 0)"),
    ValidationError("Too many packages (max 100 allowed)"),
    InvalidAgentError("gemini"),
    InvalidPackageError("Package ID cannot be empty"),
    FileAlreadyExistsError("/tmp/project/.reforge.json"),
    PermissionDeniedError("/root/locked"),
    DirectoryCreationError("/tmp/x", OSError(errno.EIO, "I/O error")),
    CorruptedConfigError("/tmp/project/.reforge.json"),
    MissingRequiredFieldError("created_at"),
    UserCancelledError(),
    NetworkError("Connection refused"),
    DiskSpaceError("/tmp/project/.reforge.json"),
    NotFoundError("'/tmp/missing'"),
]


class TestErrorContract:
    """Every error kind renders a message with a hint and an exit code."""

    @pytest.mark.parametrize("error", ALL_ERRORS, ids=lambda e: type(e).__name__)
    def test_display_has_hint(self, error):
        text = str(error)
        assert text
        assert "\nHint: " in text
        assert error.hint

    @pytest.mark.parametrize("error", ALL_ERRORS, ids=lambda e: type(e).__name__)
    def test_exit_code_is_small_nonzero_int(self, error):
        code = error.exit_code()
        assert isinstance(code, int)
        assert 0 < code < 256

    def test_exit_codes_by_kind(self):
        assert PermissionDeniedError("/x").exit_code() == 77
        assert FileAlreadyExistsError("/x").exit_code() == 73
        assert InvalidAgentError("x").exit_code() == 64
        assert FileSystemError("x").exit_code() == 74
        assert JsonParseError("x").exit_code() == 65
        assert UserCancelledError().exit_code() == 130
        assert NotFoundError("x").exit_code() == 66

    def test_exit_code_is_stable(self):
        error = InvalidPackageError("bad")
        assert error.exit_code() == error.exit_code() == InvalidPackageError("other").exit_code()

    def test_all_are_reforge_errors(self):
        assert all(isinstance(e, ReforgeError) for e in ALL_ERRORS)


class TestRetryable:
    """Only interrupted/timed-out I/O and network errors are retryable."""

    @pytest.mark.parametrize("os_error", [
        InterruptedError(errno.EINTR, "Interrupted system call"),
        TimeoutError(errno.ETIMEDOUT, "Timed out"),
        OSError(errno.EAGAIN, "Resource temporarily unavailable"),
    ])
    def test_transient_io_is_retryable(self, os_error):
        assert FileSystemError("x", os_error).is_retryable() is True

    def test_other_io_is_not_retryable(self):
        assert FileSystemError("x", OSError(errno.EIO, "I/O error")).is_retryable() is False
        assert FileSystemError("x").is_retryable() is False

    def test_network_is_retryable(self):
        assert NetworkError("down").is_retryable() is True

    @pytest.mark.parametrize("error", [
        e for e in ALL_ERRORS if not isinstance(e, NetworkError)
    ], ids=lambda e: type(e).__name__)
    def test_everything_else_is_not_retryable(self, error):
        assert error.is_retryable() is False


class TestContextError:
    """Tests for contextual wrapping."""

    def test_wraps_and_delegates(self):
        cause = PermissionDeniedError("/srv/app")
        wrapped = with_context(cause, "write configuration", "could not save /srv/app/.reforge.json")

        assert isinstance(wrapped, ContextError)
        assert wrapped.cause is cause
        assert wrapped.__cause__ is cause
        assert wrapped.exit_code() == 77
        assert wrapped.is_retryable() is False
        text = str(wrapped)
        assert "Failed to write configuration" in text
        assert "Permission denied" in text
        assert "Hint:" in text

    def test_nested_wrapping(self):
        cause = NetworkError("Connection reset")
        inner = with_context(cause, "download package", "pkg-a")
        outer = with_context(inner, "initialize project", "/tmp/p")

        assert outer.exit_code() == cause.exit_code()
        assert outer.is_retryable() is True
        assert outer.root_cause() is cause
        assert error_chain(outer)[:3] == [outer, inner, cause]


class TestFromOsError:
    """Tests for OSError classification."""

    def test_permission(self):
        error = from_os_error(PermissionError(errno.EACCES, "Permission denied"), "/locked")
        assert isinstance(error, PermissionDeniedError)
        assert isinstance(error.__cause__, PermissionError)

    def test_not_found(self):
        error = from_os_error(FileNotFoundError(errno.ENOENT, "No such file", "/missing"))
        assert isinstance(error, NotFoundError)
        assert "/missing" in str(error)

    def test_exists(self):
        assert isinstance(
            from_os_error(FileExistsError(errno.EEXIST, "File exists"), "/x"),
            FileAlreadyExistsError,
        )

    def test_disk_full(self):
        assert isinstance(
            from_os_error(OSError(errno.ENOSPC, "No space left on device"), "/x"),
            DiskSpaceError,
        )

    def test_generic(self):
        os_error = OSError(errno.EIO, "I/O error")
        error = from_os_error(os_error, "/x")
        assert type(error) is FileSystemError
        assert error.os_error is os_error


class TestSecureLogging:
    """Tests for PII-scrubbed debug logging."""

    def test_scrub_home_and_email(self, monkeypatch):
        monkeypatch.setenv("HOME", "/home/alice")
        text = scrub("cannot write /home/alice/project for alice.smith@example.com")
        assert "/home/alice" not in text
        assert "~/project" in text
        assert "example.com" not in text
        assert "<email>" in text

    def test_log_securely_logs_chain(self, caplog, monkeypatch):
        monkeypatch.setenv("HOME", "/home/alice")
        cause = PermissionDeniedError("/home/alice/secret")
        error = with_context(cause, "write configuration", "save failed")

        with caplog.at_level(logging.DEBUG, logger="reforge"):
            log_securely(error)

        messages = [r.getMessage() for r in caplog.records]
        assert any("ContextError" in m for m in messages)
        assert any("PermissionDeniedError" in m and "exit_code=77" in m for m in messages)
        assert "root cause: PermissionDeniedError (exit_code=77)" in messages
        assert all("/home/alice" not in m for m in messages)

    def test_log_securely_is_silent_above_debug(self, caplog):
        with caplog.at_level(logging.INFO, logger="reforge"):
            log_securely(ValidationError("bad"))
        assert caplog.records == []
