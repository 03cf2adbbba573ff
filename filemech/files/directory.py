"""Directory path resolution and creation."""

import logging
import os
from pathlib import Path

from ..core.errors import DirectoryCreateError, InvalidInputError
from ..core.paths import paths_equal, resolve_path
from ..core.permissions import PermissionSpec

_logger = logging.getLogger(__name__)


class DirectoryManager:
    """Resolved absolute directory path with existence and creation helpers."""

    def __init__(self, path: str | os.PathLike):
        self._path = resolve_path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        """True when the path exists and is a directory; never raises."""
        try:
            return self._path.is_dir()
        except OSError:
            return False

    def make_dirs(self, permission: PermissionSpec | None = None) -> Path:
        """Create the directory and any missing parents.

        Args:
            permission: Mode for created directories (subject to umask)

        Raises:
            InvalidInputError: If permission is not a directory permission
            DirectoryCreateError: If the tree cannot be created
        """
        if permission is not None and not permission.is_dir:
            raise InvalidInputError(
                f"Directory permission must have a 'd' entry type, got {permission}",
                operation="make_dirs",
                paths=(self._path,),
            )

        mode = permission.permission_bits if permission is not None else 0o777
        try:
            os.makedirs(self._path, mode=mode, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError.wrap(e, "make_dirs", self._path) from e

        _logger.debug("Directory ensured: %s", self._path)
        return self._path

    def join(self, name: str) -> Path:
        return self._path / name

    def __fspath__(self) -> str:
        return str(self._path)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DirectoryManager):
            return NotImplemented
        return paths_equal(self._path, other._path)

    def __hash__(self) -> int:
        return hash(os.path.normcase(self._path))

    def __repr__(self) -> str:
        return f"DirectoryManager({str(self._path)!r})"
