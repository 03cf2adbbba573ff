"""Cross-process advisory file locking.

FileManager only serializes calls on one instance. Callers that need mutual
exclusion across instances or processes wrap their work in ``file_lock``.
"""

import logging
import os
import platform
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..constants import LOCK_FILE_SUFFIX, LOCK_RETRIES, LOCK_RETRY_DELAY
from .errors import InvalidInputError

_logger = logging.getLogger(__name__)


@contextmanager
def file_lock(
    file_path: str | os.PathLike,
    retries: int = LOCK_RETRIES,
    retry_delay: float = LOCK_RETRY_DELAY,
) -> Iterator[Path]:
    """Acquire an exclusive lock on ``<file_path>.lock`` with retry.

    Args:
        file_path: Path of the file being protected
        retries: Number of acquisition attempts
        retry_delay: Seconds to wait between attempts

    Yields:
        Path of the lock file while the lock is held

    Raises:
        TimeoutError: If the lock cannot be acquired after all retries
        InvalidInputError: If retries is less than 1

    Example:
        with file_lock(target):
            FileManager(target).write_bytes(payload, truncate_first=True)
    """
    if retries < 1:
        raise InvalidInputError(
            f"Lock retries must be at least 1, got {retries}",
            operation="file_lock",
            paths=(file_path,),
        )

    file_path = Path(file_path)
    lock_file_path = file_path.with_name(file_path.name + LOCK_FILE_SUFFIX)
    lock_handle = None
    acquired = False

    try:
        for attempt in range(retries):
            try:
                lock_handle = open(lock_file_path, 'w')

                if platform.system() == 'Windows':
                    import msvcrt
                    msvcrt.locking(lock_handle.fileno(), msvcrt.LK_NBLCK, 1)
                else:
                    import fcntl
                    fcntl.flock(lock_handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)

                acquired = True
                break
            except OSError as e:
                if lock_handle:
                    lock_handle.close()
                    lock_handle = None
                if attempt < retries - 1:
                    _logger.debug("Lock busy on %s, retry %d/%d", file_path.name, attempt + 1, retries)
                    time.sleep(retry_delay)
                    continue
                raise TimeoutError(
                    f"Failed to acquire lock on {file_path.name} after {retries} attempts"
                ) from e

        yield lock_file_path

    finally:
        if acquired and lock_handle:
            try:
                if platform.system() == 'Windows':
                    import msvcrt
                    msvcrt.locking(lock_handle.fileno(), msvcrt.LK_UNLCK, 1)
                else:
                    import fcntl
                    fcntl.flock(lock_handle.fileno(), fcntl.LOCK_UN)
            except OSError as e:
                _logger.debug("Lock release failed on %s: %s", lock_file_path, e)

        if lock_handle:
            lock_handle.close()

        if acquired:
            try:
                lock_file_path.unlink(missing_ok=True)
            except OSError as e:
                _logger.debug("Lock file cleanup failed on %s: %s", lock_file_path, e)
