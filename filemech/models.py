"""Pydantic models for file access and copy requests."""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import DEFAULT_FILE_PERMISSION, CopyStrategy, FileOpenMode, FileOpenType
from .core.paths import paths_equal, resolve_path
from .core.permissions import PermissionSpec


def _default_file_permission() -> PermissionSpec:
    return PermissionSpec.from_symbolic(DEFAULT_FILE_PERMISSION)


class FileAccessConfig(BaseModel):
    """How a file is opened: one open type, zero or more modes, creation permission."""
    model_config = ConfigDict(
        frozen=True,
        extra='forbid'
    )

    open_type: FileOpenType = Field(
        ...,
        description="Exactly one of read_only, write_only, read_write"
    )
    open_modes: tuple[FileOpenMode, ...] = Field(
        default=(),
        description="Modifiers: append, create, exclusive, sync, truncate"
    )
    permission: PermissionSpec = Field(
        default_factory=_default_file_permission,
        description="Permission applied when the open creates the file"
    )

    @field_validator('open_modes', mode='before')
    @classmethod
    def dedupe_open_modes(cls, v):
        """Drop repeated modes, keeping first-seen order."""
        if v is None:
            return ()
        if isinstance(v, (str, FileOpenMode)):
            v = [v]
        seen = []
        for mode in v:
            mode = FileOpenMode(mode)
            if mode not in seen:
                seen.append(mode)
        return tuple(seen)

    @field_validator('permission', mode='before')
    @classmethod
    def parse_permission(cls, v):
        """Accept symbolic strings for the permission field."""
        if isinstance(v, str):
            return PermissionSpec.from_symbolic(v)
        return v

    @model_validator(mode='after')
    def validate_combination(self) -> "FileAccessConfig":
        """Read-only access cannot append or truncate."""
        if self.open_type == FileOpenType.READ_ONLY:
            conflicting = {FileOpenMode.APPEND, FileOpenMode.TRUNCATE} & set(self.open_modes)
            if conflicting:
                names = ", ".join(sorted(m.value for m in conflicting))
                raise ValueError(f"read_only access cannot be combined with: {names}")
        return self

    @property
    def flags(self) -> int:
        """Platform os.open() flags."""
        flags = self.open_type.flag
        for mode in self.open_modes:
            flags |= mode.flag
        # Windows opens in text mode unless told otherwise
        return flags | getattr(os, "O_BINARY", 0)

    @property
    def readable(self) -> bool:
        return self.open_type in (FileOpenType.READ_ONLY, FileOpenType.READ_WRITE)

    @property
    def writable(self) -> bool:
        return self.open_type in (FileOpenType.WRITE_ONLY, FileOpenType.READ_WRITE)

    @property
    def creates(self) -> bool:
        return FileOpenMode.CREATE in self.open_modes

    def with_permission(self, permission: PermissionSpec) -> "FileAccessConfig":
        return self.model_copy(update={"permission": permission})

    @classmethod
    def read_only(cls) -> "FileAccessConfig":
        return cls(open_type=FileOpenType.READ_ONLY)

    @classmethod
    def write_only(cls) -> "FileAccessConfig":
        return cls(open_type=FileOpenType.WRITE_ONLY, open_modes=(FileOpenMode.CREATE,))

    @classmethod
    def write_only_append(cls) -> "FileAccessConfig":
        return cls(
            open_type=FileOpenType.WRITE_ONLY,
            open_modes=(FileOpenMode.CREATE, FileOpenMode.APPEND),
        )

    @classmethod
    def write_only_truncate(cls) -> "FileAccessConfig":
        return cls(
            open_type=FileOpenType.WRITE_ONLY,
            open_modes=(FileOpenMode.CREATE, FileOpenMode.TRUNCATE),
        )

    @classmethod
    def read_write(cls) -> "FileAccessConfig":
        return cls(open_type=FileOpenType.READ_WRITE, open_modes=(FileOpenMode.CREATE,))

    @classmethod
    def read_write_create_truncate(cls) -> "FileAccessConfig":
        return cls(
            open_type=FileOpenType.READ_WRITE,
            open_modes=(FileOpenMode.CREATE, FileOpenMode.TRUNCATE),
        )


class CopyRequest(BaseModel):
    """Source/destination pair plus the options governing one copy."""
    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid'
    )

    source: Path = Field(..., description="File to copy")
    destination: Path = Field(..., description="Destination path file name")
    create_destination_dir: bool = Field(
        default=True,
        description="Create the destination directory tree if missing"
    )
    delete_existing_destination: bool = Field(
        default=True,
        description="Delete a pre-existing destination file before copying"
    )
    strategy: CopyStrategy = Field(
        default=CopyStrategy.IO,
        description="Copy technique and fallback order"
    )
    buffer_size: int = Field(
        default=0,
        description="Stream copy buffer size in bytes; <= 0 means platform default"
    )

    @field_validator('source', 'destination', mode='before')
    @classmethod
    def validate_path(cls, v):
        """Resolve to an absolute path; empty paths are rejected."""
        if not isinstance(v, (str, os.PathLike)):
            raise ValueError(f"Expected a path, got {type(v).__name__}")
        if isinstance(v, str) and not v.strip():
            raise ValueError("Path cannot be empty")
        return resolve_path(v)

    @model_validator(mode='after')
    def validate_distinct(self) -> "CopyRequest":
        if paths_equal(self.source, self.destination):
            raise ValueError(
                f"Source and destination are the same file: {self.source}"
            )
        return self
