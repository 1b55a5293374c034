"""Repository port for trellis objects.

The storage-agnostic contract every adapter implements. Core services only
ever see this protocol; adapters live in ``trellis.infrastructure.storage``.

Failures are raised as ``StorageError`` and never swallowed by the adapter.
Objects handed out are value snapshots: mutating one has no effect on the
store until it is passed back to ``save_object``.
"""

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from .models import ObjectFilter, TrellisObject


@runtime_checkable
class ObjectRepository(Protocol):
    """Read, list, save and delete trellis objects one at a time."""

    def get_object_by_id(self, object_id: str) -> TrellisObject | None:
        """Look up an object; absent is not an error."""
        ...

    def get_objects(self, object_filter: ObjectFilter | None = None) -> list[TrellisObject]:
        """Bulk read, optionally filtered. Order is stable for a given store state."""
        ...

    def save_object(self, obj: TrellisObject) -> None:
        """Idempotent whole-object upsert."""
        ...

    def delete_object(self, object_id: str) -> None:
        """Remove an object.

        Raises:
            StorageError: If the object does not exist or cannot be removed.
        """
        ...

    def lock(self, object_id: str) -> AbstractContextManager[None]:
        """Serialize load-compute-save units on one object id.

        Raises:
            LockTimeout: If the lock cannot be acquired in time.
        """
        ...
