"""File manager: one file path and all I/O against it.

A FileManager holds the decomposed path of one file, an optional open handle
with buffered reader/writer wrappers, and a cumulative bytes-written counter.

Handle lifecycle::

    UNOPENED --open--> OPEN_FOR_READ | OPEN_FOR_WRITE | OPEN_FOR_READ_WRITE
    OPEN_*   --close--> CLOSED --open--> OPEN_*

Every public method holds the instance lock for its duration. The lock does
not coordinate separate FileManager instances or processes pointed at the
same path; use ``filemech.core.security.file_lock`` for that.
"""

import io
import logging
import os
import threading
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import NamedTuple

from ..constants import CopyStrategy, FileHandleState, FileOpenType
from ..core.errors import (
    ByteCountMismatchError,
    FileOperationError,
    InvalidInputError,
    MovePartialFailureError,
    SourceNotFoundError,
)
from ..core.paths import paths_equal, resolve_path, split_path, validate_path_boundary
from ..core.permissions import PermissionSpec
from ..models import FileAccessConfig
from ..schemas.config import FileMechConfig
from .copy import CopyResult, build_copy_request, copy_file
from .directory import DirectoryManager
from .info import FileInfo

_logger = logging.getLogger(__name__)

_OPEN_STATES = {
    FileOpenType.READ_ONLY: FileHandleState.OPEN_FOR_READ,
    FileOpenType.WRITE_ONLY: FileHandleState.OPEN_FOR_WRITE,
    FileOpenType.READ_WRITE: FileHandleState.OPEN_FOR_READ_WRITE,
}

_RAW_MODES = {
    FileOpenType.READ_ONLY: "rb",
    FileOpenType.WRITE_ONLY: "wb",
    FileOpenType.READ_WRITE: "r+b",
}


class DelimitedRead(NamedTuple):
    """Result of a delimited read.

    ``eof`` is True when the stream ended before the delimiter was found;
    ``data`` then holds the final fragment, which may be non-empty.
    """
    data: bytes
    eof: bool


def _locked(method):
    """Run the method while holding the instance lock."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


def _delimiter_byte(delimiter: bytes | int | str) -> bytes:
    if isinstance(delimiter, int) and not isinstance(delimiter, bool) and 0 <= delimiter <= 255:
        return bytes([delimiter])
    if isinstance(delimiter, str):
        delimiter = delimiter.encode("utf-8")
    if isinstance(delimiter, (bytes, bytearray)) and len(delimiter) == 1:
        return bytes(delimiter)
    raise InvalidInputError(
        f"Delimiter must be a single byte, got {delimiter!r}",
        operation="read_delimited",
    )


class FileManager:
    """Represents one file and mediates open/read/write/copy/move/delete.

    Args:
        path: Path of the file; need not exist yet
        config: Buffer sizes, default permissions and copy defaults

    Examples:
        >>> fm = FileManager('/tmp/out/report.txt')
        >>> fm.write_bytes(b'hello', truncate_first=True)
        5
        >>> fm.read_all()
        b'hello'
        >>> fm.close()
    """

    def __init__(self, path: str | os.PathLike, *, config: FileMechConfig | None = None):
        self._lock = threading.RLock()
        self._config = config or FileMechConfig()

        self._original_path = os.fspath(path)
        directory, file_name, file_ext = split_path(path)
        self._directory = DirectoryManager(directory)
        self._file_name = file_name
        self._file_ext = file_ext
        self._absolute_path = directory / (file_name + file_ext)

        self._reader_buffer_size = FileMechConfig.effective_buffer_size(self._config.reader_buffer_size)
        self._writer_buffer_size = FileMechConfig.effective_buffer_size(self._config.writer_buffer_size)

        self._handle: io.BufferedIOBase | None = None
        self._reader: io.BufferedReader | io.BufferedRandom | None = None
        self._writer: io.BufferedWriter | io.BufferedRandom | None = None
        self._access: FileAccessConfig | None = None
        self._state = FileHandleState.UNOPENED
        self._bytes_written = 0

    @classmethod
    def from_directory(
        cls,
        directory: DirectoryManager | str | os.PathLike,
        file_name_ext: str,
        *,
        config: FileMechConfig | None = None,
    ) -> "FileManager":
        """Build from a directory plus a file name that must stay inside it."""
        if not isinstance(directory, DirectoryManager):
            directory = DirectoryManager(directory)
        if not file_name_ext or not file_name_ext.strip():
            raise InvalidInputError(
                "File name cannot be empty",
                operation="from_directory",
                paths=(directory.path,),
            )
        path = validate_path_boundary(directory.path / file_name_ext, directory.path)
        return cls(path, config=config)

    # ------------------------------------------------------------------
    # Path facts
    # ------------------------------------------------------------------

    @property
    def directory(self) -> DirectoryManager:
        return self._directory

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def file_ext(self) -> str:
        return self._file_ext

    @property
    def file_name_ext(self) -> str:
        return self._file_name + self._file_ext

    @property
    def absolute_path(self) -> Path:
        return self._absolute_path

    @property
    def original_path(self) -> str:
        return self._original_path

    @property
    def config(self) -> FileMechConfig:
        return self._config

    @property
    def state(self) -> FileHandleState:
        with self._lock:
            return self._state

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._handle is not None

    @property
    def bytes_written(self) -> int:
        """Bytes written through this instance since construction."""
        with self._lock:
            return self._bytes_written

    @property
    def reader_buffer_size(self) -> int:
        return self._reader_buffer_size

    @property
    def writer_buffer_size(self) -> int:
        return self._writer_buffer_size

    @_locked
    def set_reader_buffer_size(self, size: int) -> None:
        """Applies from the next open; <= 0 means platform default."""
        self._reader_buffer_size = FileMechConfig.effective_buffer_size(size)

    @_locked
    def set_writer_buffer_size(self, size: int) -> None:
        """Applies from the next open; <= 0 means platform default."""
        self._writer_buffer_size = FileMechConfig.effective_buffer_size(size)

    @_locked
    def exists(self) -> bool:
        """True if the path exists. Never raises: stat errors read as absent."""
        try:
            os.stat(self._absolute_path)
        except OSError:
            return False
        return True

    @_locked
    def is_absolute_path_populated(self) -> bool:
        """True only if the path resolved and the file exists right now."""
        return bool(str(self._absolute_path)) and self.exists()

    @_locked
    def is_file_name_populated(self) -> bool:
        """True only if the file name is non-empty and the file exists right now."""
        return bool(self._file_name) and self.exists()

    @_locked
    def file_info(self) -> FileInfo:
        return FileInfo.from_path(self._absolute_path)

    def _stat(self, operation: str) -> os.stat_result:
        try:
            return os.stat(self._absolute_path)
        except FileNotFoundError as e:
            raise SourceNotFoundError(
                "File does not exist", operation=operation, paths=(self._absolute_path,)
            ) from e
        except OSError as e:
            raise FileOperationError.wrap(e, operation, self._absolute_path) from e

    @_locked
    def size(self) -> int:
        return self._stat("size").st_size

    @_locked
    def modification_time(self) -> datetime:
        return datetime.fromtimestamp(self._stat("modification_time").st_mtime)

    @_locked
    def permission(self) -> PermissionSpec:
        return PermissionSpec.from_file_mode(self._stat("permission").st_mode)

    # ------------------------------------------------------------------
    # Open / close
    # ------------------------------------------------------------------

    def _open(self, access: FileAccessConfig) -> None:
        self._close()

        if access.creates and not self._directory.exists():
            self._directory.make_dirs(self._config.dir_permission())

        path = self._absolute_path
        try:
            fd = os.open(path, access.flags, access.permission.permission_bits)
        except FileNotFoundError as e:
            if not access.creates:
                raise SourceNotFoundError("File does not exist", operation="open", paths=(path,)) from e
            raise FileOperationError.wrap(e, "open", path) from e
        except OSError as e:
            raise FileOperationError.wrap(e, "open", path) from e

        try:
            raw = io.FileIO(fd, _RAW_MODES[access.open_type], closefd=True)
        except OSError as e:
            os.close(fd)
            raise FileOperationError.wrap(e, "open", path) from e

        if access.open_type == FileOpenType.READ_ONLY:
            self._reader = io.BufferedReader(raw, buffer_size=self._reader_buffer_size)
            self._handle = self._reader
        elif access.open_type == FileOpenType.WRITE_ONLY:
            self._writer = io.BufferedWriter(raw, buffer_size=self._writer_buffer_size)
            self._handle = self._writer
        else:
            buffer_size = max(self._reader_buffer_size, self._writer_buffer_size)
            self._handle = io.BufferedRandom(raw, buffer_size=buffer_size)
            self._reader = self._writer = self._handle

        self._access = access
        self._state = _OPEN_STATES[access.open_type]
        _logger.debug("Opened %s as %s", path, self._state.value)

    def _close(self) -> None:
        handle, writer = self._handle, self._writer
        if handle is None:
            return

        self._handle = self._reader = self._writer = None
        self._access = None
        self._state = FileHandleState.CLOSED

        try:
            try:
                if writer is not None:
                    writer.flush()
            finally:
                handle.close()
        except OSError as e:
            raise FileOperationError.wrap(e, "close", self._absolute_path) from e
        _logger.debug("Closed %s", self._absolute_path)

    @_locked
    def open(self, access: FileAccessConfig) -> None:
        """Open with an explicit access descriptor, closing any current handle.

        Creates the parent directory tree first when the access includes
        ``create`` and the directory is missing.

        Raises:
            SourceNotFoundError: File is missing and the access does not create
            DirectoryCreateError: Parent directory could not be created
            FileOperationError: The OS open failed
        """
        self._open(access)

    @_locked
    def open_read_only(self) -> None:
        self._open(FileAccessConfig.read_only())

    @_locked
    def open_write_only(self) -> None:
        self._open(FileAccessConfig.write_only().with_permission(self._config.file_permission()))

    @_locked
    def open_write_only_append(self) -> None:
        self._open(FileAccessConfig.write_only_append().with_permission(self._config.file_permission()))

    @_locked
    def open_write_only_truncate(self) -> None:
        self._open(FileAccessConfig.write_only_truncate().with_permission(self._config.file_permission()))

    @_locked
    def open_read_write(self) -> None:
        self._open(FileAccessConfig.read_write().with_permission(self._config.file_permission()))

    @_locked
    def close(self) -> None:
        """Flush buffered writes and release the handle. No-op when not open."""
        self._close()

    @_locked
    def flush(self) -> None:
        """Flush buffered writes and fsync them to disk."""
        if self._writer is None:
            return
        try:
            self._writer.flush()
            os.fsync(self._writer.fileno())
        except OSError as e:
            raise FileOperationError.wrap(e, "flush", self._absolute_path) from e

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def _ensure_reader(self) -> io.BufferedReader | io.BufferedRandom:
        if self._reader is None:
            self._open(FileAccessConfig.read_only())
        return self._reader

    @_locked
    def read_all(self) -> bytes:
        """Read from the current position to end of file.

        Opens read-only if not open for reading. End of file is the normal
        result, not an error. The handle stays open.
        """
        reader = self._ensure_reader()
        try:
            return reader.read()
        except OSError as e:
            raise FileOperationError.wrap(e, "read_all", self._absolute_path) from e

    @_locked
    def read_text(self, encoding: str = "utf-8") -> str:
        return self.read_all().decode(encoding)

    @_locked
    def read_delimited(self, delimiter: bytes | int | str = b"\n") -> DelimitedRead:
        """Read up to and including the next delimiter byte.

        Returns:
            DelimitedRead(data, eof). If the stream ends before the delimiter,
            eof is True and data holds whatever was read (possibly b"").
        """
        delim = _delimiter_byte(delimiter)
        reader = self._ensure_reader()
        chunks = []
        try:
            while True:
                peeked = reader.peek(1)
                if not peeked:
                    return DelimitedRead(b"".join(chunks), True)
                index = peeked.find(delim)
                if index >= 0:
                    chunks.append(reader.read(index + 1))
                    return DelimitedRead(b"".join(chunks), False)
                chunks.append(reader.read(len(peeked)))
        except OSError as e:
            raise FileOperationError.wrap(e, "read_delimited", self._absolute_path) from e

    @_locked
    def read_line(self) -> DelimitedRead:
        return self.read_delimited(b"\n")

    @_locked
    def read_bytes(self, size: int) -> bytes:
        """Read up to ``size`` bytes; b"" at end of file."""
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise InvalidInputError(
                f"Read size must be a positive integer, got {size!r}",
                operation="read_bytes",
                paths=(self._absolute_path,),
            )
        reader = self._ensure_reader()
        try:
            return reader.read(size)
        except OSError as e:
            raise FileOperationError.wrap(e, "read_bytes", self._absolute_path) from e

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @_locked
    def write_bytes(self, data: bytes, truncate_first: bool = False) -> int:
        """Write bytes, opening the file first if it is not open for writing.

        ``truncate_first`` selects create+truncate over create+append and only
        matters when this call has to open the file.

        Returns:
            Number of bytes written

        Raises:
            ByteCountMismatchError: Fewer bytes written than supplied
            FileOperationError: The OS write failed
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidInputError(
                f"Expected bytes, got {type(data).__name__}",
                operation="write_bytes",
                paths=(self._absolute_path,),
            )
        expected = memoryview(data).nbytes

        if self._writer is None:
            access = (
                FileAccessConfig.write_only_truncate()
                if truncate_first
                else FileAccessConfig.write_only_append()
            )
            self._open(access.with_permission(self._config.file_permission()))

        try:
            written = self._writer.write(data)
        except OSError as e:
            raise FileOperationError.wrap(e, "write_bytes", self._absolute_path) from e

        written = written or 0
        self._bytes_written += written
        if written != expected:
            raise ByteCountMismatchError(
                expected, written, operation="write_bytes", paths=(self._absolute_path,)
            )
        return written

    @_locked
    def write_text(self, text: str, truncate_first: bool = False, encoding: str = "utf-8") -> int:
        return self.write_bytes(text.encode(encoding), truncate_first=truncate_first)

    # ------------------------------------------------------------------
    # Create / delete / chmod
    # ------------------------------------------------------------------

    @_locked
    def create_directory(self) -> Path:
        return self._directory.make_dirs(self._config.dir_permission())

    @_locked
    def create_file(self) -> None:
        """Create the directory tree and an empty file (truncating any content)."""
        self._open(FileAccessConfig.read_write_create_truncate().with_permission(self._config.file_permission()))
        self._close()

    @_locked
    def delete(self) -> None:
        """Close and remove the file. Deleting a missing file is a no-op."""
        self._close()
        try:
            os.remove(self._absolute_path)
        except FileNotFoundError:
            _logger.debug("Delete skipped, file absent: %s", self._absolute_path)
            return
        except OSError as e:
            raise FileOperationError.wrap(e, "delete", self._absolute_path) from e
        _logger.debug("Deleted %s", self._absolute_path)

    @_locked
    def change_permission(self, permission: PermissionSpec | str) -> None:
        if isinstance(permission, str):
            permission = PermissionSpec.from_symbolic(permission)
        try:
            os.chmod(self._absolute_path, permission.permission_bits)
        except FileNotFoundError as e:
            raise SourceNotFoundError(
                "File does not exist", operation="change_permission", paths=(self._absolute_path,)
            ) from e
        except OSError as e:
            raise FileOperationError.wrap(e, "change_permission", self._absolute_path) from e

    # ------------------------------------------------------------------
    # Copy / move
    # ------------------------------------------------------------------

    def _copy(
        self,
        destination: Path,
        strategy: CopyStrategy | None,
        create_destination_dir: bool | None,
        delete_existing_destination: bool | None,
        buffer_size: int | None,
    ) -> CopyResult:
        cfg = self._config
        request = build_copy_request(
            self._absolute_path,
            destination,
            strategy=strategy or cfg.default_copy_strategy,
            create_destination_dir=(
                cfg.create_destination_dir if create_destination_dir is None else create_destination_dir
            ),
            delete_existing_destination=(
                cfg.delete_existing_destination
                if delete_existing_destination is None
                else delete_existing_destination
            ),
            buffer_size=cfg.copy_buffer_size if buffer_size is None else buffer_size,
        )
        # pending writes must reach disk before the source is read
        self._close()
        return copy_file(request)

    @staticmethod
    def _destination_path(destination: "FileManager | str | os.PathLike") -> Path:
        if isinstance(destination, FileManager):
            destination.close()
            return destination.absolute_path
        return resolve_path(destination)

    def copy_to(
        self,
        destination: "FileManager | str | os.PathLike",
        strategy: CopyStrategy | None = None,
        *,
        create_destination_dir: bool | None = None,
        delete_existing_destination: bool | None = None,
        buffer_size: int | None = None,
    ) -> CopyResult:
        """Copy this file to ``destination``.

        Arguments left as None take their values from the config.

        Raises:
            SourceNotFoundError: This file does not exist
            SameFileError: Destination is this file
            CopyFallbackError: Both techniques of a composite strategy failed
        """
        destination_path = self._destination_path(destination)
        with self._lock:
            return self._copy(
                destination_path, strategy, create_destination_dir, delete_existing_destination, buffer_size
            )

    def copy_to_directory(
        self,
        directory: DirectoryManager | str | os.PathLike,
        strategy: CopyStrategy | None = None,
        **options,
    ) -> CopyResult:
        """Copy into ``directory`` keeping this file's name."""
        if not isinstance(directory, DirectoryManager):
            directory = DirectoryManager(directory)
        return self.copy_to(directory.join(self.file_name_ext), strategy, **options)

    def move_to(
        self,
        destination: "FileManager | str | os.PathLike",
        strategy: CopyStrategy | None = None,
    ) -> "FileManager":
        """Copy to ``destination`` then delete this file.

        On success this instance describes a path that no longer exists.

        Returns:
            FileManager for the destination

        Raises:
            MovePartialFailureError: Copy succeeded but the source could not be
                deleted; source and destination both remain on disk
        """
        destination_path = self._destination_path(destination)
        with self._lock:
            self._copy(destination_path, strategy, None, None, None)
            try:
                os.remove(self._absolute_path)
            except OSError as e:
                raise MovePartialFailureError(
                    "Copied to destination but could not delete source; both files remain",
                    operation="move",
                    paths=(self._absolute_path, destination_path),
                ) from e
            _logger.debug("Moved %s -> %s", self._absolute_path, destination_path)

        if isinstance(destination, FileManager):
            return destination
        return FileManager(destination_path, config=self._config)

    def move_to_directory(
        self,
        directory: DirectoryManager | str | os.PathLike,
        strategy: CopyStrategy | None = None,
    ) -> "FileManager":
        if not isinstance(directory, DirectoryManager):
            directory = DirectoryManager(directory)
        return self.move_to(directory.join(self.file_name_ext), strategy)

    # ------------------------------------------------------------------
    # Protocols
    # ------------------------------------------------------------------

    def __enter__(self) -> "FileManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __fspath__(self) -> str:
        return str(self._absolute_path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileManager):
            return NotImplemented
        return paths_equal(self._absolute_path, other._absolute_path)

    def __hash__(self) -> int:
        return hash(os.path.normcase(self._absolute_path))

    def __repr__(self) -> str:
        return f"FileManager({str(self._absolute_path)!r}, state={self._state.value})"
