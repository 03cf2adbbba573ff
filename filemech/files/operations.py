"""Named file operations on a source/destination pair."""

import logging
import os

from ..constants import CopyStrategy, FileOperationCode
from ..core.errors import InvalidInputError
from ..schemas.config import FileMechConfig
from .manager import FileManager

_logger = logging.getLogger(__name__)

_COPY_STRATEGIES = {
    FileOperationCode.COPY_SOURCE_TO_DESTINATION_BY_IO: CopyStrategy.IO,
    FileOperationCode.COPY_SOURCE_TO_DESTINATION_BY_HARD_LINK: CopyStrategy.LINK,
    FileOperationCode.COPY_SOURCE_TO_DESTINATION_BY_IO_BY_HARD_LINK: CopyStrategy.IO_THEN_LINK,
    FileOperationCode.COPY_SOURCE_TO_DESTINATION_BY_HARD_LINK_BY_IO: CopyStrategy.LINK_THEN_IO,
}


class FileOperations:
    """Runs a FileOperationCode against a source and destination FileManager.

    Examples:
        >>> ops = FileOperations.from_paths('/tmp/a.txt', '/tmp/b.txt')
        >>> ops.execute(FileOperationCode.CREATE_SOURCE_FILE)
    """

    def __init__(self, source: FileManager, destination: FileManager):
        self.source = source
        self.destination = destination

    @classmethod
    def from_paths(
        cls,
        source: str | os.PathLike,
        destination: str | os.PathLike,
        *,
        config: FileMechConfig | None = None,
    ) -> "FileOperations":
        return cls(FileManager(source, config=config), FileManager(destination, config=config))

    @classmethod
    def from_directories(
        cls,
        source_dir: str | os.PathLike,
        source_name: str,
        destination_dir: str | os.PathLike,
        destination_name: str,
        *,
        config: FileMechConfig | None = None,
    ) -> "FileOperations":
        return cls(
            FileManager.from_directory(source_dir, source_name, config=config),
            FileManager.from_directory(destination_dir, destination_name, config=config),
        )

    def execute(self, code: FileOperationCode | str):
        """Run one operation.

        Returns:
            CopyResult for copy codes, the destination FileManager for move
            codes, None otherwise
        """
        code = FileOperationCode(code)
        _logger.debug("Executing %s on %s -> %s", code.value, self.source, self.destination)

        if code == FileOperationCode.NONE:
            return None

        if code in _COPY_STRATEGIES:
            return self.source.copy_to(self.destination, _COPY_STRATEGIES[code])

        if code == FileOperationCode.MOVE_SOURCE_FILE_TO_DESTINATION_FILE:
            return self.source.move_to(self.destination)
        if code == FileOperationCode.MOVE_SOURCE_FILE_TO_DESTINATION_DIR:
            return self.source.move_to_directory(self.destination.directory)

        if code == FileOperationCode.DELETE_SOURCE_FILE:
            self.source.delete()
        elif code == FileOperationCode.DELETE_DESTINATION_FILE:
            self.destination.delete()
        elif code == FileOperationCode.DELETE_SOURCE_AND_DESTINATION_FILES:
            self.source.delete()
            self.destination.delete()
        elif code == FileOperationCode.CREATE_SOURCE_DIR:
            self.source.create_directory()
        elif code == FileOperationCode.CREATE_SOURCE_FILE:
            self.source.create_file()
        elif code == FileOperationCode.CREATE_SOURCE_DIR_AND_FILE:
            self.source.create_directory()
            self.source.create_file()
        elif code == FileOperationCode.CREATE_DESTINATION_DIR:
            self.destination.create_directory()
        elif code == FileOperationCode.CREATE_DESTINATION_FILE:
            self.destination.create_file()
        elif code == FileOperationCode.CREATE_DESTINATION_DIR_AND_FILE:
            self.destination.create_directory()
            self.destination.create_file()
        else:
            raise InvalidInputError(f"Unsupported operation: {code.value}", operation="execute")
        return None

