from __future__ import annotations

import contextlib
import fcntl
import logging
import threading
from pathlib import Path
from typing import BinaryIO, Iterator

from .errors import LockFailed

logger = logging.getLogger(__name__)


class PathLockRegistry:
    """
    Provides a stable lock per normalized file path so writers in this
    process queue up per target instead of contending globally.

    Entries are never evicted: one lock per distinct path saved during the
    life of the process. Fine for a handful of config names.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, path: Path) -> threading.Lock:
        key = str(path.resolve())
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock


GLOBAL_PATH_LOCKS = PathLockRegistry()


def _unlock(handle: BinaryIO, path: Path) -> None:
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    except OSError as e:
        logger.warning("CONFIG UNLOCK: failed to release lock on %s: %r", path, e)


@contextlib.contextmanager
def shared_lock(handle: BinaryIO, path: Path) -> Iterator[BinaryIO]:
    """
    Hold a shared (reader) lock on an already open handle. Blocks while a
    writer holds the exclusive lock.
    """
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_SH)
    except OSError as e:
        raise LockFailed(
            f"Unable to obtain a shared lock while reading the configuration file at {path}.", path
        ) from e
    try:
        yield handle
    finally:
        _unlock(handle, path)


@contextlib.contextmanager
def exclusive_lock(path: Path) -> Iterator[BinaryIO | None]:
    """
    Hold an exclusive (writer) lock on ``path`` if it exists.

    Yields the locked handle, or ``None`` when there is no file to lock yet.
    The lock is released and the handle closed on every exit path.
    """
    handle = None
    try:
        handle = path.open("rb")
    except FileNotFoundError:
        pass
    except OSError as e:
        raise LockFailed(f"Unable to open configuration file at {path} for locking.", path) from e

    if handle is None:
        # Must not yield inside the except block.
        yield None
        return

    with handle:
        try:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
        except OSError as e:
            raise LockFailed(f"Unable to obtain an exclusive lock for configuration file at {path}.", path) from e
        try:
            yield handle
        finally:
            _unlock(handle, path)
