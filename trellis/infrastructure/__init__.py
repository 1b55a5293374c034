"""Infrastructure layer for Trellis.

I/O lives here: repository adapters over the filesystem or memory, and the
per-object lock table.

Exports:
    Storage:
        - LocalRepository: Markdown files under a planning root
        - InMemoryRepository: Dictionary-backed store

    Locking:
        - ObjectLocks: Per-id lock table
        - LockTimeout: Raised when a lock is not acquired in time
"""

from trellis.infrastructure.locking import LockTimeout, ObjectLocks
from trellis.infrastructure.storage import InMemoryRepository, LocalRepository

__all__ = [
    # Storage
    "LocalRepository",
    "InMemoryRepository",
    # Locking
    "ObjectLocks",
    "LockTimeout",
]
