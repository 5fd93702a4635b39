"""Whole-document JSON file store and the load/mutate/save unit of work."""

from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Generator, Generic, Optional, TextIO, TypeVar

from .errors import StorageError
from .locking import atomic_write, file_lock

logger = logging.getLogger(__name__)

TRACKER_DEFAULT = '{"start":null, "habits":[], "end": null}'
JOURNAL_DEFAULT = '{"entries":[], "createdAt":null, "updatedAt": null}'

T = TypeVar("T")


class FileStore:
    """One JSON document backed by one file."""

    def __init__(self, path: Path, handle: TextIO):
        self.path = path
        self._file: Optional[TextIO] = handle

    @classmethod
    def open(cls, path: Path, default_content: str) -> "FileStore":
        """Open a store file for read/write, creating it if absent.

        An empty file is seeded with default_content and rewound.

        Raises:
            StorageError: If the file cannot be opened or stat'd
        """
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o666)
            handle = os.fdopen(fd, "r+", encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot open {path}: {e}") from e

        store = cls(path, handle)
        try:
            if os.fstat(handle.fileno()).st_size == 0:
                logger.debug("Seeding empty store %s", path)
                handle.write(default_content)
                handle.flush()
                handle.seek(0)
        except OSError as e:
            store.close()
            raise StorageError(f"Cannot initialise {path}: {e}") from e

        return store

    def _handle(self) -> TextIO:
        if self._file is None:
            raise StorageError(f"Store {self.path} is closed")
        return self._file

    def load(self) -> dict[str, Any]:
        """Decode the whole file as a JSON object.

        Raises:
            StorageError: On read failure or malformed JSON
        """
        handle = self._handle()
        try:
            data = json.load(handle)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageError(f"Malformed JSON in {self.path}: {e}") from e
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"Expected a JSON object in {self.path}")
        return data

    def save(self, document: dict[str, Any]) -> None:
        """Replace the file with the JSON encoding of document.

        The old handle is swapped for one on the new file so the store
        stays usable after a save.

        Raises:
            StorageError: On encode or write failure
        """
        self._handle()
        self.close()
        try:
            with atomic_write(self.path) as f:
                json.dump(document, f, ensure_ascii=False)
                f.write("\n")
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Cannot write {self.path}: {e}") from e
        logger.debug("Saved %s", self.path)

        try:
            self._file = open(self.path, "r+", encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot reopen {self.path}: {e}") from e

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    @property
    def closed(self) -> bool:
        return self._file is None

    def __enter__(self) -> "FileStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class UnitOfWork(Generic[T]):
    """A loaded domain object plus a flag recording whether it changed."""

    def __init__(self, value: T):
        self.value = value
        self.changed = False

    def mark_changed(self) -> None:
        self.changed = True


@contextmanager
def unit_of_work(
    path: Path,
    default_content: str,
    factory: Callable[[dict[str, Any]], T],
    lock_timeout: float = 10.0,
) -> Generator[UnitOfWork[T], None, None]:
    """Lock, open and load a store; save on clean exit if marked changed.

    Nothing is written when the block raises, so a failed command leaves
    the file as it was.

    Args:
        path: Store file
        default_content: JSON seeded into an empty file
        factory: Builds the domain object from the decoded document;
            the object must provide to_dict()
        lock_timeout: Seconds to wait for the store lock
    """
    path = Path(path)
    with file_lock(path, timeout=lock_timeout):
        with FileStore.open(path, default_content) as store:
            try:
                work = UnitOfWork(factory(store.load()))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise StorageError(f"Unexpected document layout in {path}: {e}") from e
            yield work
            if work.changed:
                store.save(work.value.to_dict())
