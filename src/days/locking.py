"""Lock and atomic-replace helpers for the JSON store files."""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, TextIO

import portalocker

from .errors import StorageError


def lock_path_for(path: Path) -> Path:
    return path.with_suffix(path.suffix + ".lock")


@contextmanager
def file_lock(path: Path, timeout: float = 10.0) -> Generator[None, None, None]:
    """Hold an exclusive lock on a store file for the duration of a command.

    The lock lives in a sidecar .lock file so the store itself can be
    replaced by rename while the lock is held.

    Args:
        path: Store file to lock
        timeout: Seconds to wait for the lock

    Raises:
        StorageError: If the lock cannot be acquired in time
    """
    lock_path = lock_path_for(path)
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock_path.touch(exist_ok=True)
    except OSError as e:
        raise StorageError(f"Cannot create lock file {lock_path}: {e}") from e

    try:
        lock = portalocker.Lock(lock_path, timeout=timeout)
        lock.acquire()
    except portalocker.LockException as e:
        raise StorageError(f"Could not lock {path}: another days command is running") from e

    try:
        yield
    finally:
        lock.release()


@contextmanager
def atomic_write(path: Path, encoding: str = "utf-8") -> Generator[TextIO, None, None]:
    """Replace a file's contents atomically.

    Writes to a .tmp sibling then renames over the target, so readers only
    ever see the old document or the complete new one.

    Yields:
        Text file handle for writing
    """
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(tmp_path, "w", encoding=encoding) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())

        # os.replace overwrites on Windows as well as POSIX
        os.replace(tmp_path, path)

    except Exception:
        if tmp_path.exists():
            tmp_path.unlink()
        raise
