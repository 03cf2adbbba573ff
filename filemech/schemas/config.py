"""Pydantic schema for the .filemech.yml configuration file.

The file is optional. Every field has a default, so an absent or empty file
yields the built-in behavior.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_DIR_PERMISSION,
    DEFAULT_FILE_PERMISSION,
    DEFAULT_READER_BUFFER_SIZE,
    DEFAULT_WRITER_BUFFER_SIZE,
    CopyStrategy,
)
from ..core.permissions import PermissionSpec


class FileMechConfig(BaseModel):
    """Schema for .filemech.yml configuration file."""

    model_config = ConfigDict(extra="allow")

    # Buffering
    reader_buffer_size: int = Field(
        default=DEFAULT_READER_BUFFER_SIZE,
        description="Buffered reader size in bytes (<= 0 means platform default)"
    )
    writer_buffer_size: int = Field(
        default=DEFAULT_WRITER_BUFFER_SIZE,
        description="Buffered writer size in bytes (<= 0 means platform default)"
    )
    copy_buffer_size: int = Field(
        default=DEFAULT_BUFFER_SIZE,
        description="Stream copy buffer size in bytes (<= 0 means platform default)"
    )

    # Copy behavior
    default_copy_strategy: CopyStrategy = Field(
        default=CopyStrategy.IO,
        description="Strategy used when copy_to() is called without one"
    )
    create_destination_dir: bool = Field(
        default=True,
        description="Create a missing destination directory before copying"
    )
    delete_existing_destination: bool = Field(
        default=True,
        description="Delete a pre-existing destination file before copying"
    )

    # Permissions
    default_file_permission: str = Field(
        default=DEFAULT_FILE_PERMISSION,
        description="Symbolic permission for newly created files"
    )
    default_dir_permission: str = Field(
        default=DEFAULT_DIR_PERMISSION,
        description="Symbolic permission for newly created directories"
    )

    @field_validator("default_file_permission")
    @classmethod
    def validate_file_permission(cls, v: str) -> str:
        """Reject malformed symbolic permission strings."""
        PermissionSpec.from_symbolic(v)
        return v

    @field_validator("default_dir_permission")
    @classmethod
    def validate_dir_permission(cls, v: str) -> str:
        """Directory permissions must carry the 'd' entry type."""
        if not PermissionSpec.from_symbolic(v).is_dir:
            raise ValueError(f"Directory permission must start with 'd', got {v!r}")
        return v

    def file_permission(self) -> PermissionSpec:
        return PermissionSpec.from_symbolic(self.default_file_permission)

    def dir_permission(self) -> PermissionSpec:
        return PermissionSpec.from_symbolic(self.default_dir_permission)

    @staticmethod
    def effective_buffer_size(size: int | None) -> int:
        """Substitute the platform default for a missing or non-positive size."""
        if size is None or size <= 0:
            return DEFAULT_BUFFER_SIZE
        return size
