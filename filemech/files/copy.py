"""Copy a file by streaming I/O or by hard link, with optional fallback.

Every copy runs the shared setup once (``prepare_copy``), then one technique,
then (for composite strategies) the other technique if the first failed:

    IO            stream copy with the platform default buffer
    IO_BUFFERED   stream copy with the request's buffer size
    LINK          hard link
    IO_THEN_LINK  stream copy, falling back to hard link
    LINK_THEN_IO  hard link, falling back to stream copy

Setup failures (missing source, same file, destination directory cannot be
created, existing destination cannot be deleted) are fatal and never trigger
the fallback.
"""

import errno
import logging
import os
import stat
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path

from ..constants import DEFAULT_BUFFER_SIZE, CopyStrategy
from ..core.errors import (
    ByteCountMismatchError,
    CopyFallbackError,
    FileMechError,
    FileOperationError,
    InvalidInputError,
    SameFileError,
    SourceNotFoundError,
    format_error,
)
from ..core.paths import paths_equal
from ..models import CopyRequest
from .directory import DirectoryManager

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CopyResult:
    """Outcome of a successful copy."""
    technique: CopyStrategy
    size: int
    fallback_used: bool = False


def build_copy_request(
    source: str | os.PathLike,
    destination: str | os.PathLike,
    *,
    strategy: CopyStrategy = CopyStrategy.IO,
    create_destination_dir: bool = True,
    delete_existing_destination: bool = True,
    buffer_size: int = 0,
) -> CopyRequest:
    """Build a CopyRequest, reporting identical paths as SameFileError."""
    if paths_equal(source, destination):
        raise SameFileError(
            "Source and destination are the same file",
            operation="copy",
            paths=(source, destination),
        )
    return CopyRequest(
        source=source,
        destination=destination,
        strategy=strategy,
        create_destination_dir=create_destination_dir,
        delete_existing_destination=delete_existing_destination,
        buffer_size=buffer_size,
    )


def _stat_or_none(path: Path, operation: str) -> os.stat_result | None:
    try:
        return os.stat(path)
    except FileNotFoundError:
        return None
    except OSError as e:
        raise FileOperationError.wrap(e, operation, path) from e


def prepare_copy(request: CopyRequest) -> None:
    """Validate the pair and prepare the destination.

    Raises:
        SourceNotFoundError: Source does not exist
        InvalidInputError: Source or destination is not a regular file
        SameFileError: Source and destination are one file
        FileOperationError: Existing destination could not be deleted, or the
            destination directory is missing and may not be created
        DirectoryCreateError: Destination directory could not be created
    """
    source, destination = request.source, request.destination
    paths = (source, destination)

    source_stat = _stat_or_none(source, "copy")
    if source_stat is None:
        raise SourceNotFoundError("Source file does not exist", operation="copy", paths=paths)
    if stat.S_ISDIR(source_stat.st_mode):
        raise InvalidInputError("Source is a directory, not a file", operation="copy", paths=paths)
    if not stat.S_ISREG(source_stat.st_mode):
        raise InvalidInputError("Source is not a regular file", operation="copy", paths=paths)

    destination_stat = _stat_or_none(destination, "copy")
    if destination_stat is not None:
        if os.path.samestat(source_stat, destination_stat):
            raise SameFileError(
                "Source and destination are the same file",
                operation="copy",
                paths=paths,
            )
        if stat.S_ISDIR(destination_stat.st_mode):
            raise InvalidInputError("Destination is a directory", operation="copy", paths=paths)
        if not stat.S_ISREG(destination_stat.st_mode):
            raise InvalidInputError(
                "Destination exists and is not a regular file",
                operation="copy",
                paths=paths,
            )
        if request.delete_existing_destination:
            try:
                os.remove(destination)
            except OSError as e:
                raise FileOperationError.wrap(e, "delete_existing_destination", destination) from e
            _logger.debug("Deleted existing destination %s", destination)
        return

    directory = DirectoryManager(destination.parent)
    if directory.exists():
        return
    if not request.create_destination_dir:
        err = FileOperationError(
            "Destination directory does not exist",
            operation="copy",
            paths=(directory.path,),
        )
        err.errno = errno.ENOENT
        raise err
    directory.make_dirs()


def _remove_partial(destination: Path) -> None:
    try:
        os.remove(destination)
    except FileNotFoundError:
        return
    except OSError as e:
        _logger.warning(format_error(e, f"removing partial copy {destination}"))
        return
    _logger.debug("Removed partial copy %s", destination)


def _stream_copy(source: Path, destination: Path, buffer_size: int) -> CopyResult:
    if buffer_size <= 0:
        buffer_size = DEFAULT_BUFFER_SIZE
    paths = (source, destination)
    created = not os.path.lexists(destination)

    try:
        with open(source, 'rb') as src, open(destination, 'wb') as dst:
            expected = os.fstat(src.fileno()).st_size
            copied = 0
            while True:
                chunk = src.read(buffer_size)
                if not chunk:
                    break
                written = dst.write(chunk)
                if written != len(chunk):
                    raise ByteCountMismatchError(len(chunk), written, operation="copy_by_io", paths=paths)
                copied += written
            dst.flush()
            destination_size = os.fstat(dst.fileno()).st_size

        if copied != expected:
            raise ByteCountMismatchError(expected, copied, operation="copy_by_io", paths=paths)
        if destination_size != copied:
            raise ByteCountMismatchError(copied, destination_size, operation="copy_by_io", paths=paths)
    except ByteCountMismatchError:
        if created:
            _remove_partial(destination)
        raise
    except OSError as e:
        if created:
            _remove_partial(destination)
        raise FileOperationError.wrap(e, "copy_by_io", *paths) from e

    _logger.debug("Stream copied %d bytes %s -> %s", copied, source, destination)
    return CopyResult(technique=CopyStrategy.IO, size=copied)


def _link_copy(source: Path, destination: Path) -> CopyResult:
    try:
        os.link(source, destination)
    except OSError as e:
        raise FileOperationError.wrap(e, "copy_by_link", source, destination) from e

    try:
        size = os.stat(destination).st_size
    except OSError as e:
        # the stream fallback must not write through a link to the source
        _remove_partial(destination)
        raise FileOperationError.wrap(e, "copy_by_link", source, destination) from e

    _logger.debug("Hard linked %s -> %s", source, destination)
    return CopyResult(technique=CopyStrategy.LINK, size=size)


def _with_fallback(
    request: CopyRequest,
    first: Callable[[], CopyResult],
    second: Callable[[], CopyResult],
) -> CopyResult:
    try:
        return first()
    except (OSError, FileMechError) as primary_error:
        _logger.warning(
            "%s; falling back",
            format_error(primary_error, f"{request.strategy.value} first attempt"),
        )
        try:
            result = second()
        except (OSError, FileMechError) as fallback_error:
            raise CopyFallbackError(
                primary_error,
                fallback_error,
                operation=request.strategy.value,
                paths=(request.source, request.destination),
            ) from fallback_error
        return replace(result, fallback_used=True)


def copy_file(request: CopyRequest) -> CopyResult:
    """Run setup, then the request's strategy.

    Returns:
        CopyResult naming the technique that produced the destination

    Raises:
        CopyFallbackError: Both techniques of a composite strategy failed
        FileMechError: Setup failed, or a single-technique strategy failed
    """
    prepare_copy(request)

    source, destination = request.source, request.destination

    def stream() -> CopyResult:
        if request.strategy == CopyStrategy.IO:
            return _stream_copy(source, destination, DEFAULT_BUFFER_SIZE)
        return _stream_copy(source, destination, request.buffer_size)

    def link() -> CopyResult:
        return _link_copy(source, destination)

    _logger.debug("Copy %s -> %s using %s", source, destination, request.strategy.value)

    if request.strategy in (CopyStrategy.IO, CopyStrategy.IO_BUFFERED):
        return stream()
    if request.strategy == CopyStrategy.LINK:
        return link()
    if request.strategy == CopyStrategy.IO_THEN_LINK:
        return _with_fallback(request, stream, link)
    return _with_fallback(request, link, stream)


def copy_by_io(source, destination, **options) -> CopyResult:
    return copy_file(build_copy_request(source, destination, strategy=CopyStrategy.IO, **options))


def copy_by_io_with_buffer(source, destination, buffer_size: int, **options) -> CopyResult:
    """Stream copy with an explicit buffer size (<= 0 means platform default)."""
    return copy_file(build_copy_request(
        source, destination, strategy=CopyStrategy.IO_BUFFERED, buffer_size=buffer_size, **options
    ))


def copy_by_link(source, destination, **options) -> CopyResult:
    return copy_file(build_copy_request(source, destination, strategy=CopyStrategy.LINK, **options))


def copy_by_io_then_link(source, destination, **options) -> CopyResult:
    return copy_file(build_copy_request(source, destination, strategy=CopyStrategy.IO_THEN_LINK, **options))


def copy_by_link_then_io(source, destination, **options) -> CopyResult:
    return copy_file(build_copy_request(source, destination, strategy=CopyStrategy.LINK_THEN_IO, **options))
