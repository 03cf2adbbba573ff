"""Constants and enums for filemech."""

import io
import os
import stat
from enum import Enum

# Buffer sizes (non-positive values fall back to these)
DEFAULT_BUFFER_SIZE = io.DEFAULT_BUFFER_SIZE
DEFAULT_READER_BUFFER_SIZE = 4096
DEFAULT_WRITER_BUFFER_SIZE = 4096

# Permission defaults, symbolic form
DEFAULT_FILE_PERMISSION = "-rw-rw-rw-"
DEFAULT_DIR_PERMISSION = "drwxrwxrwx"

# Per-directory configuration file
CONFIG_FILE_NAME = ".filemech.yml"

# Lock file defaults (see core.security.file_lock)
LOCK_FILE_SUFFIX = ".lock"
LOCK_RETRIES = 3
LOCK_RETRY_DELAY = 1.0

PERMISSION_MASK = 0o777


class EntryType(str, Enum):
    """Entry-type component of a file mode."""
    NONE = "none"
    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    NAMED_PIPE = "named_pipe"
    SOCKET = "socket"
    CHAR_DEVICE = "char_device"
    BLOCK_DEVICE = "block_device"

    @property
    def bits(self) -> int:
        return _ENTRY_TYPE_BITS[self]

    @property
    def letter(self) -> str:
        return _ENTRY_TYPE_LETTERS[self]

    @classmethod
    def from_bits(cls, bits: int) -> "EntryType | None":
        """Return the entry type whose bits equal ``bits`` exactly, if any."""
        for member, member_bits in _ENTRY_TYPE_BITS.items():
            if member_bits == bits:
                return member
        return None

    @classmethod
    def from_letter(cls, letter: str) -> "EntryType | None":
        # '-' is shared by NONE and REGULAR; NONE wins so '-rwxr--r--' is 0o744
        for member, member_letter in _ENTRY_TYPE_LETTERS.items():
            if member_letter == letter:
                return member
        return None


_ENTRY_TYPE_BITS = {
    EntryType.NONE: 0,
    EntryType.REGULAR: stat.S_IFREG,
    EntryType.DIRECTORY: stat.S_IFDIR,
    EntryType.SYMLINK: stat.S_IFLNK,
    EntryType.NAMED_PIPE: stat.S_IFIFO,
    EntryType.SOCKET: stat.S_IFSOCK,
    EntryType.CHAR_DEVICE: stat.S_IFCHR,
    EntryType.BLOCK_DEVICE: stat.S_IFBLK,
}

_ENTRY_TYPE_LETTERS = {
    EntryType.NONE: "-",
    EntryType.REGULAR: "-",
    EntryType.DIRECTORY: "d",
    EntryType.SYMLINK: "l",
    EntryType.NAMED_PIPE: "p",
    EntryType.SOCKET: "s",
    EntryType.CHAR_DEVICE: "c",
    EntryType.BLOCK_DEVICE: "b",
}


class FileOpenType(str, Enum):
    """Exactly one of these is part of every open request."""
    READ_ONLY = "read_only"
    WRITE_ONLY = "write_only"
    READ_WRITE = "read_write"

    @property
    def flag(self) -> int:
        return _OPEN_TYPE_FLAGS[self]


_OPEN_TYPE_FLAGS = {
    FileOpenType.READ_ONLY: os.O_RDONLY,
    FileOpenType.WRITE_ONLY: os.O_WRONLY,
    FileOpenType.READ_WRITE: os.O_RDWR,
}


class FileOpenMode(str, Enum):
    """Modifiers combined with a FileOpenType."""
    APPEND = "append"
    CREATE = "create"
    EXCLUSIVE = "exclusive"
    SYNC = "sync"
    TRUNCATE = "truncate"

    @property
    def flag(self) -> int:
        # O_SYNC is missing on Windows
        return getattr(os, _OPEN_MODE_FLAG_NAMES[self], 0)


_OPEN_MODE_FLAG_NAMES = {
    FileOpenMode.APPEND: "O_APPEND",
    FileOpenMode.CREATE: "O_CREAT",
    FileOpenMode.EXCLUSIVE: "O_EXCL",
    FileOpenMode.SYNC: "O_SYNC",
    FileOpenMode.TRUNCATE: "O_TRUNC",
}


class FileHandleState(str, Enum):
    """Lifecycle of the handle held by a FileManager."""
    UNOPENED = "unopened"
    OPEN_FOR_READ = "open_for_read"
    OPEN_FOR_WRITE = "open_for_write"
    OPEN_FOR_READ_WRITE = "open_for_read_write"
    CLOSED = "closed"


class CopyStrategy(str, Enum):
    """Copy techniques and their fallback ordering."""
    IO = "io"
    IO_BUFFERED = "io_buffered"
    LINK = "link"
    IO_THEN_LINK = "io_then_link"
    LINK_THEN_IO = "link_then_io"


class FileOperationCode(str, Enum):
    """Operations runnable on a source/destination file pair."""
    NONE = "none"
    MOVE_SOURCE_FILE_TO_DESTINATION_FILE = "move_source_file_to_destination_file"
    MOVE_SOURCE_FILE_TO_DESTINATION_DIR = "move_source_file_to_destination_dir"
    DELETE_DESTINATION_FILE = "delete_destination_file"
    DELETE_SOURCE_FILE = "delete_source_file"
    DELETE_SOURCE_AND_DESTINATION_FILES = "delete_source_and_destination_files"
    COPY_SOURCE_TO_DESTINATION_BY_HARD_LINK_BY_IO = "copy_source_to_destination_by_hard_link_by_io"
    COPY_SOURCE_TO_DESTINATION_BY_IO_BY_HARD_LINK = "copy_source_to_destination_by_io_by_hard_link"
    COPY_SOURCE_TO_DESTINATION_BY_HARD_LINK = "copy_source_to_destination_by_hard_link"
    COPY_SOURCE_TO_DESTINATION_BY_IO = "copy_source_to_destination_by_io"
    CREATE_SOURCE_DIR = "create_source_dir"
    CREATE_SOURCE_DIR_AND_FILE = "create_source_dir_and_file"
    CREATE_SOURCE_FILE = "create_source_file"
    CREATE_DESTINATION_DIR = "create_destination_dir"
    CREATE_DESTINATION_DIR_AND_FILE = "create_destination_dir_and_file"
    CREATE_DESTINATION_FILE = "create_destination_file"
