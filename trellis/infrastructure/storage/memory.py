"""In-memory repository adapter.

Keeps objects in a dictionary. Every read and write copies, so callers only
ever hold snapshots, exactly as with the filesystem adapter.
"""

from contextlib import AbstractContextManager

from trellis.domain.objects import ObjectFilter, TrellisObject, children_of, filter_objects
from trellis.domain.shared import StorageError
from trellis.infrastructure.locking import DEFAULT_LOCK_TIMEOUT, ObjectLocks


class InMemoryRepository:
    """Dictionary-backed implementation of ``ObjectRepository``.

    ``children_ids`` are derived from the ``parent`` fields on every read.
    """

    def __init__(
        self,
        objects: list[TrellisObject] | None = None,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        self._objects: dict[str, TrellisObject] = {}
        self._locks = ObjectLocks(timeout=lock_timeout)
        for obj in objects or []:
            self.save_object(obj)

    def _snapshot(self, obj: TrellisObject) -> TrellisObject:
        children = children_of(obj.id, self._objects.values())
        return obj.model_copy(update={"children_ids": children}, deep=True)

    def get_object_by_id(self, object_id: str) -> TrellisObject | None:
        obj = self._objects.get(object_id)
        if obj is None:
            return None
        return self._snapshot(obj)

    def get_objects(self, object_filter: ObjectFilter | None = None) -> list[TrellisObject]:
        objects = [self._snapshot(self._objects[key]) for key in sorted(self._objects)]
        return filter_objects(objects, object_filter)

    def save_object(self, obj: TrellisObject) -> None:
        self._objects[obj.id] = obj.model_copy(deep=True)

    def delete_object(self, object_id: str) -> None:
        if object_id not in self._objects:
            raise StorageError(f"No object found with ID: {object_id}")
        del self._objects[object_id]

    def lock(self, object_id: str) -> AbstractContextManager[None]:
        return self._locks.hold(object_id)

    def __len__(self) -> int:
        return len(self._objects)
