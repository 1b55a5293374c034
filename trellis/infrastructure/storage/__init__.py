"""Storage adapters for the repository port.

Both adapters raise ``StorageError`` for I/O faults and hand out value
snapshots.
"""

from trellis.infrastructure.storage.local import LocalRepository
from trellis.infrastructure.storage.memory import InMemoryRepository

__all__ = [
    "LocalRepository",
    "InMemoryRepository",
]
