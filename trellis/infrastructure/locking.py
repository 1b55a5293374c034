"""Per-object lock management.

Claims, completions and body edits are load-compute-save units. Running two
of them on the same id at once would let the last writer win, so every unit
runs inside a per-id lock. Different ids never contend.

``ObjectLocks`` serializes threads of one process. ``LocalRepository``
layers a ``filelock.FileLock`` per id on top of it for other processes
sharing the same planning root.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout

DEFAULT_LOCK_TIMEOUT = 10.0


class LockTimeout(Exception):
    """Lock acquisition timed out."""


class ObjectLocks:
    """In-memory table of re-entrant locks keyed by object id.

    Example:
        locks = ObjectLocks(timeout=5)
        with locks.hold("T-write-docs"):
            ...  # load, compute, save
    """

    def __init__(self, timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        self.timeout = timeout
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def _lock_for(self, object_id: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(object_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[object_id] = lock
            return lock

    @contextmanager
    def hold(self, object_id: str) -> Iterator[None]:
        """Acquire the lock for one id, yield, release on exit.

        Raises:
            LockTimeout: If the lock is not acquired within ``timeout``.
        """
        lock = self._lock_for(object_id)
        if not lock.acquire(timeout=self.timeout):
            raise LockTimeout(f"Could not acquire lock for {object_id} within {self.timeout}s")
        try:
            yield
        finally:
            lock.release()


@contextmanager
def file_lock(lock_file: Path, timeout: float, lock_name: str) -> Iterator[None]:
    """Acquire a cross-process file lock, yield, release on exit.

    Lock files are left in place after release. Deleting them would let two
    processes hold "exclusive" locks on different inodes with the same path.
    """
    lock_file.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(lock_file, timeout=timeout)
    try:
        lock.acquire()
    except Timeout as e:
        raise LockTimeout(f"Could not acquire {lock_name} within {timeout}s") from e
    try:
        yield
    finally:
        lock.release()
