"""Core utilities for filemech.

This package contains focused modules for different utility categories:
- errors: Exception hierarchy and error formatting
- paths: Path resolution and decomposition
- permissions: Permission conversion (symbolic, octal, platform mode)
- config: Configuration file management
- security: Cross-process file locking
"""

# Configuration
from .config import load_config, save_config

# Error handling
from .errors import (
    ByteCountMismatchError,
    CopyFallbackError,
    DirectoryCreateError,
    FileMechError,
    FileOperationError,
    InvalidInputError,
    MovePartialFailureError,
    PermissionFormatError,
    SameFileError,
    SourceNotFoundError,
    format_error,
)

# Path utilities
from .paths import paths_equal, resolve_path, split_path, validate_path_boundary

# Permissions
from .permissions import PermissionSpec

# Security
from .security import file_lock

__all__ = [
    "ByteCountMismatchError",
    "CopyFallbackError",
    "DirectoryCreateError",
    "FileMechError",
    "FileOperationError",
    "InvalidInputError",
    "MovePartialFailureError",
    "PermissionFormatError",
    "PermissionSpec",
    "SameFileError",
    "SourceNotFoundError",
    "file_lock",
    "format_error",
    "load_config",
    "paths_equal",
    "resolve_path",
    "save_config",
    "split_path",
    "validate_path_boundary",
]
