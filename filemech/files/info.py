"""Point-in-time file metadata."""

import os
import stat
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..core.permissions import PermissionSpec


@dataclass(frozen=True, slots=True)
class FileInfo:
    path: Path
    name: str
    exists: bool
    is_dir: bool
    is_regular: bool
    size: int
    modification_time: datetime | None
    permission: PermissionSpec | None

    @classmethod
    def from_path(cls, path: Path) -> "FileInfo":
        """Stat ``path``; any stat failure yields a non-existent snapshot."""
        try:
            st = os.stat(path)
        except OSError:
            return cls(
                path=path,
                name=path.name,
                exists=False,
                is_dir=False,
                is_regular=False,
                size=0,
                modification_time=None,
                permission=None,
            )

        return cls(
            path=path,
            name=path.name,
            exists=True,
            is_dir=stat.S_ISDIR(st.st_mode),
            is_regular=stat.S_ISREG(st.st_mode),
            size=st.st_size,
            modification_time=datetime.fromtimestamp(st.st_mtime),
            permission=PermissionSpec.from_file_mode(st.st_mode),
        )
