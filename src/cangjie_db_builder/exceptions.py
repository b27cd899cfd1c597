"""
Exception hierarchy for the database builder.

Every error carries an ``exit_code`` used by the CLI. Storage and I/O errors
derive it from the underlying cause when one is available. Codes 1 and 2 are
reserved: 1 for generic failures, 2 for usage errors.
"""

import errno
from typing import Optional

USAGE_EXIT_CODE = 2

# sysexits.h EX_NOINPUT; ENOENT itself would read as a usage error
EX_NOINPUT = 66


def _error_code(cause: Optional[BaseException]) -> int:
    """
    Extract a process exit code from a low-level exception.

    Args:
        cause: Original exception (sqlite3/SQLAlchemy error or OSError)

    Returns:
        SQLite primary error code or errno when present, otherwise 1.
        A missing file maps to EX_NOINPUT; anything else that would
        collide with the usage code maps to 1.
    """
    if cause is None:
        return 1
    # SQLAlchemy DBAPIError wraps the driver exception in .orig
    orig = getattr(cause, 'orig', None) or cause
    code = getattr(orig, 'sqlite_errorcode', None)
    if isinstance(code, int):
        # Extended result codes keep the primary code in the low byte
        code &= 0xFF
    else:
        code = getattr(orig, 'errno', None)
        if code == errno.ENOENT:
            return EX_NOINPUT
    if not isinstance(code, int) or code <= 0 or code > 255 or code == USAGE_EXIT_CODE:
        return 1
    return code


class BuilderError(Exception):
    """Base class for all errors raised by the builder."""

    exit_code = 1

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class UsageError(BuilderError):
    """Bad command-line invocation."""

    exit_code = USAGE_EXIT_CODE


class AlreadyExistsError(BuilderError):
    """Destination database already exists."""

    def __init__(self, path: str):
        super().__init__(f"DB file already exists: {path}")
        self.path = path


class StorageError(BuilderError):
    """Base class for storage lifecycle failures."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.exit_code = _error_code(cause)


class StorageConnectionError(StorageError):
    """Opening the database failed."""


class SchemaError(StorageError):
    """Creating or migrating the schema failed."""


class CloseError(StorageError):
    """Closing the database connection failed."""


class WriteError(StorageError):
    """A batch write failed."""


class MalformedRecordError(BuilderError):
    """A table line could not be parsed into a record."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        line_no: Optional[int] = None
    ):
        super().__init__(message)
        self.path = path
        self.line_no = line_no

    def __str__(self) -> str:
        if self.path is not None and self.line_no is not None:
            return f"{self.path}:{self.line_no}: {self.message}"
        return self.message


class BadFilenameError(BuilderError):
    """Table filename does not carry a known version tag."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Bad table filename {path}: {reason}")
        self.path = path


class ReadError(BuilderError):
    """I/O failure while reading a table file."""

    def __init__(self, path: str, line_no: int, cause: BaseException):
        if line_no:
            message = f"Error reading line {line_no} of {path}: {cause}"
        else:
            message = f"Cannot read {path}: {cause}"
        super().__init__(message, cause)
        self.path = path
        self.line_no = line_no
        self.exit_code = _error_code(cause)
