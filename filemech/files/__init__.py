"""File, directory and copy operations.

- manager: FileManager, the per-file handle and I/O surface
- directory: DirectoryManager
- copy: copy strategies and the shared copy setup
- operations: FileOperations, named operations on a source/destination pair
- info: FileInfo metadata snapshots
"""

from .copy import (
    CopyResult,
    build_copy_request,
    copy_by_io,
    copy_by_io_then_link,
    copy_by_io_with_buffer,
    copy_by_link,
    copy_by_link_then_io,
    copy_file,
    prepare_copy,
)
from .directory import DirectoryManager
from .info import FileInfo
from .manager import DelimitedRead, FileManager
from .operations import FileOperations

__all__ = [
    "CopyResult",
    "DelimitedRead",
    "DirectoryManager",
    "FileInfo",
    "FileManager",
    "FileOperations",
    "build_copy_request",
    "copy_by_io",
    "copy_by_io_then_link",
    "copy_by_io_with_buffer",
    "copy_by_link",
    "copy_by_link_then_io",
    "copy_file",
    "prepare_copy",
]
