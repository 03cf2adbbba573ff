"""Path resolution and decomposition utilities.

Paths are made absolute and normalized without following symlinks, so a
FileManager pointed at a link describes the link itself.
"""

import os
from pathlib import Path

from .errors import InvalidInputError


def resolve_path(path: str | os.PathLike) -> Path:
    """Return an absolute, normalized path.

    Args:
        path: Path string or path-like object

    Returns:
        Absolute Path with '.' and '..' segments collapsed

    Raises:
        InvalidInputError: If path is empty or blank
    """
    raw = os.fspath(path)
    if isinstance(raw, bytes):
        raw = os.fsdecode(raw)
    if not raw or not raw.strip():
        raise InvalidInputError("Path cannot be empty", operation="resolve_path")

    return Path(os.path.abspath(os.path.expanduser(raw)))


def split_path(path: str | os.PathLike) -> tuple[Path, str, str]:
    """Split a path into (directory, file name, extension).

    Examples:
        >>> split_path('/tmp/data/report.tar.gz')
        (PosixPath('/tmp/data'), 'report.tar', '.gz')
    """
    resolved = resolve_path(path)
    if not resolved.name:
        raise InvalidInputError(
            "Path does not name a file",
            operation="split_path",
            paths=(resolved,),
        )
    return resolved.parent, resolved.stem, resolved.suffix


def paths_equal(first: str | os.PathLike, second: str | os.PathLike) -> bool:
    """Compare two paths after normalization (case-insensitive where the OS is)."""
    return os.path.normcase(resolve_path(first)) == os.path.normcase(resolve_path(second))


def validate_path_boundary(path: Path, root: Path) -> Path:
    """Validate path stays within root (prevents '..' escapes in file names).

    Args:
        path: Path to validate
        root: Directory that must contain the path

    Returns:
        Resolved absolute path

    Raises:
        InvalidInputError: If path escapes root
    """
    resolved = resolve_path(path)
    try:
        resolved.relative_to(resolve_path(root))
    except ValueError:
        raise InvalidInputError(
            f"Path escapes directory boundary: {path.name} is outside {root}",
            operation="validate_path_boundary",
            paths=(path, root),
        ) from None

    return resolved
