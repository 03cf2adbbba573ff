"""Exception types and error formatting.

Every exception raised by filemech derives from ``FileMechError`` and carries
the name of the operation that failed plus the path(s) involved. Exceptions
that wrap an OS failure keep the original ``OSError`` as ``__cause__``.
"""

import errno
from pathlib import Path


class FileMechError(Exception):
    """Base class for filemech errors.

    Attributes:
        operation: Name of the failed operation (e.g. "open", "copy_by_io")
        paths: Paths involved, in (source, destination) order where relevant
    """

    def __init__(self, message: str, *, operation: str = "", paths: tuple[Path | str, ...] = ()):
        self.operation = operation
        self.paths = tuple(str(p) for p in paths)
        super().__init__(message)

    def __str__(self) -> str:
        # OSError.__str__ would reformat once errno/filename are set
        message = str(self.args[0]) if self.args else ""
        if not self.operation:
            return message
        detail = f"{self.operation}: {message}"
        if self.paths:
            detail += " [" + ", ".join(self.paths) + "]"
        return detail


class InvalidInputError(FileMechError, ValueError):
    """Input rejected before any OS call."""


class PermissionFormatError(InvalidInputError):
    """Malformed symbolic or octal permission value."""


class SameFileError(InvalidInputError):
    """Source and destination refer to one file."""


class SourceNotFoundError(FileMechError, FileNotFoundError):
    """Source file is absent."""

    def __init__(self, message: str, *, operation: str = "", paths: tuple[Path | str, ...] = ()):
        FileMechError.__init__(self, message, operation=operation, paths=paths)
        self.errno = errno.ENOENT
        self.filename = self.paths[0] if self.paths else None


class FileOperationError(FileMechError, OSError):
    """An OS call failed; the original error is the ``__cause__``."""

    @classmethod
    def wrap(cls, err: OSError, operation: str, *paths: Path | str) -> "FileOperationError":
        wrapped = cls(err.strerror or str(err), operation=operation, paths=paths)
        wrapped.errno = err.errno
        return wrapped


class DirectoryCreateError(FileOperationError):
    """Directory tree could not be created."""


class ByteCountMismatchError(FileMechError):
    """Fewer (or more) bytes were transferred than expected."""

    def __init__(self, expected: int, actual: int, *, operation: str = "", paths: tuple[Path | str, ...] = ()):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"expected {expected} bytes, transferred {actual}",
            operation=operation,
            paths=paths,
        )


class CopyFallbackError(FileMechError):
    """Both techniques of a composite copy failed.

    ``__cause__`` is the fallback (second) error; ``primary_error`` holds the
    error from the first technique.
    """

    def __init__(
        self,
        primary_error: BaseException,
        fallback_error: BaseException,
        *,
        operation: str = "",
        paths: tuple[Path | str, ...] = (),
    ):
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(
            f"fallback failed: {fallback_error} (first attempt: {primary_error})",
            operation=operation,
            paths=paths,
        )


class MovePartialFailureError(FileMechError):
    """Copy succeeded but the source could not be deleted.

    Both source and destination are present on disk when this is raised.
    """


def format_error(e: Exception, context: str = "") -> str:
    """Consistent error formatting for log lines.

    Args:
        e: Exception that occurred
        context: Where the error occurred (e.g. operation name)

    Returns:
        Formatted error message string
    """
    error_msg = f"Error: {type(e).__name__}"
    if context:
        error_msg += f" in {context}"
    return error_msg + f": {e}"
