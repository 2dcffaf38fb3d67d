"""Flat-file JSON record store.

Each collection is one JSON array document `{data_dir}/{collection}.json`.
Reads deserialize the whole file, writes replace it atomically (temp file +
`os.replace`). `update` and `locked` serialize read-modify-write cycles per
collection: a thread lock inside the process and an exclusive `portalocker`
lock on `{data_dir}/.{collection}.lock` across processes sharing the directory.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, TypeVar

import portalocker

from .errors import StorageError

log = logging.getLogger(__name__)

Document = dict[str, Any]
T = TypeVar("T")

USERS = "users"
DIRECTIONS = "directions"
TESTS = "tests"
RESULTS = "results"
VERIFICATION = "verification"
TELEGRAM_BINDINGS = "telegram_bindings"

COLLECTIONS = (USERS, DIRECTIONS, TESTS, RESULTS, VERIFICATION, TELEGRAM_BINDINGS)

LOCK_TIMEOUT_SECONDS = 10.0


class RecordStore:
    """Whole-collection JSON persistence with per-collection locking."""

    def __init__(self, data_dir: str | os.PathLike[str], lock_timeout: float = LOCK_TIMEOUT_SECONDS) -> None:
        """Bind the store to `data_dir`; the directory is created on first write."""
        self.data_dir = Path(data_dir)
        self.lock_timeout = lock_timeout
        self._locks: dict[str, threading.RLock] = {c: threading.RLock() for c in COLLECTIONS}
        # collection -> nesting depth of `locked` for the thread holding the RLock
        self._depth: dict[str, int] = {}
        self._guard = threading.Lock()

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _lock(self, collection: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(collection)
            if lock is None:
                lock = self._locks[collection] = threading.RLock()
            return lock

    @contextmanager
    def _file_lock(self, collection: str) -> Iterator[None]:
        path = self.data_dir / f".{collection}.lock"
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            lock = portalocker.Lock(path, mode="a", timeout=self.lock_timeout)
            lock.acquire()
        except (OSError, portalocker.LockException) as e:
            log.error(f"Could not lock {path}: {e}")
            raise StorageError(detail=str(e)) from e
        try:
            yield
        finally:
            lock.release()

    @contextmanager
    def locked(self, collection: str) -> Iterator[None]:
        """Hold `collection` exclusively for the duration of the block.

        Re-entrant within a thread. Callers that need several collections
        take them in one order: `directions` before `users` and `tests`.
        """
        with self._lock(collection):
            depth = self._depth.get(collection, 0)
            self._depth[collection] = depth + 1
            try:
                if depth:
                    yield
                else:
                    with self._file_lock(collection):
                        yield
            finally:
                self._depth[collection] = depth

    def load(self, collection: str) -> list[Document]:
        """Return every document of `collection`.

        A missing, unreadable or corrupt file yields an empty list (logged),
        so callers see an empty catalog on first use.
        """
        path = self._path(collection)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            log.error(f"Error reading {path}: {e}")
            return []
        if not isinstance(data, list):
            log.error(f"Error reading {path}: expected a JSON array, got {type(data).__name__}")
            return []
        return [d for d in data if isinstance(d, dict)]

    def save(self, collection: str, documents: list[Document]) -> None:
        """Atomically replace `collection` with `documents`.

        Raises:
            StorageError: the snapshot could not be written; the previous
                snapshot is left in place.
        """
        path = self._path(collection)
        tmp_name = None
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{collection}.", suffix=".tmp", dir=self.data_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(documents, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as e:
            log.error(f"Error writing to {path}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(detail=str(e)) from e

    def update(self, collection: str, fn: Callable[[list[Document]], T]) -> T:
        """Run a read-modify-write cycle on `collection` under its lock.

        `fn` receives the loaded documents and may mutate the list in place;
        the list is saved afterwards unless `fn` raises, in which case nothing
        is written and the exception propagates.

        Returns:
            Whatever `fn` returned.
        """
        with self.locked(collection):
            documents = self.load(collection)
            out = fn(documents)
            self.save(collection, documents)
            return out
