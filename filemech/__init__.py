"""filemech: single-file I/O, permission conversion and copy/move strategies."""

from .constants import (
    CopyStrategy,
    EntryType,
    FileHandleState,
    FileOpenMode,
    FileOpenType,
    FileOperationCode,
)
from .core import (
    ByteCountMismatchError,
    CopyFallbackError,
    DirectoryCreateError,
    FileMechError,
    FileOperationError,
    InvalidInputError,
    MovePartialFailureError,
    PermissionFormatError,
    PermissionSpec,
    SameFileError,
    SourceNotFoundError,
    file_lock,
    format_error,
    load_config,
    save_config,
)
from .files import (
    CopyResult,
    DelimitedRead,
    DirectoryManager,
    FileInfo,
    FileManager,
    FileOperations,
    copy_by_io,
    copy_by_io_then_link,
    copy_by_io_with_buffer,
    copy_by_link,
    copy_by_link_then_io,
    copy_file,
)
from .models import CopyRequest, FileAccessConfig
from .schemas import FileMechConfig

__version__ = "0.1.0"

__all__ = [
    "ByteCountMismatchError",
    "CopyFallbackError",
    "CopyRequest",
    "CopyResult",
    "CopyStrategy",
    "DelimitedRead",
    "DirectoryCreateError",
    "DirectoryManager",
    "EntryType",
    "FileAccessConfig",
    "FileHandleState",
    "FileInfo",
    "FileManager",
    "FileMechConfig",
    "FileMechError",
    "FileOpenMode",
    "FileOpenType",
    "FileOperationCode",
    "FileOperationError",
    "FileOperations",
    "InvalidInputError",
    "MovePartialFailureError",
    "PermissionFormatError",
    "PermissionSpec",
    "SameFileError",
    "SourceNotFoundError",
    "copy_by_io",
    "copy_by_io_then_link",
    "copy_by_io_with_buffer",
    "copy_by_link",
    "copy_by_link_then_io",
    "copy_file",
    "file_lock",
    "format_error",
    "load_config",
    "save_config",
]
