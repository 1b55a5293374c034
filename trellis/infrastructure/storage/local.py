"""Filesystem repository adapter.

Objects are markdown files with YAML frontmatter under a planning root:

    <root>/
    ├── p/P-app/P-app.md
    │   └── e/E-api/E-api.md
    │       └── f/F-auth/F-auth.md
    │           └── t/
    │               ├── open/T-login.md
    │               └── closed/T-logout.md
    ├── f/F-standalone/F-standalone.md      (feature without epic)
    │   └── t/open/T-child.md
    └── t/open/T-standalone.md              (task without feature)

Tasks move between ``t/open`` and ``t/closed`` when their status crosses
the closed boundary. Writes go to a temp file first, then rename.
"""

import logging
import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from trellis.domain.objects import (
    TERMINAL_STATUSES,
    ObjectFilter,
    ObjectType,
    TrellisObject,
    extract_object_id,
    extract_object_ids,
    filter_objects,
    from_markdown,
    to_markdown,
)
from trellis.domain.shared import StorageError
from trellis.infrastructure.locking import (
    DEFAULT_LOCK_TIMEOUT,
    ObjectLocks,
    file_lock,
)

logger = logging.getLogger(__name__)

LOCKS_DIR = ".locks"

# Folders holding the children of each container kind, relative to its own folder
CHILD_FOLDERS: dict[ObjectType, tuple[tuple[str, ...], ...]] = {
    ObjectType.PROJECT: (("e",),),
    ObjectType.EPIC: (("f",),),
    ObjectType.FEATURE: (("t", "open"), ("t", "closed")),
    ObjectType.TASK: (),
}


def status_folder(obj: TrellisObject) -> str:
    """Return ``closed`` for terminal objects, ``open`` otherwise."""
    return "closed" if obj.status in TERMINAL_STATUSES else "open"


class LocalRepository:
    """Markdown-file implementation of ``ObjectRepository``.

    Example:
        repo = LocalRepository(Path(".trellis"))
        task = repo.get_object_by_id("T-login")
        with repo.lock("T-login"):
            ...
    """

    def __init__(
        self,
        planning_root: Path,
        lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
    ) -> None:
        """Initialize the repository.

        Args:
            planning_root: Root folder of the planning tree. Created lazily on
                first write.
            lock_timeout: Seconds to wait for a per-object lock.
        """
        self.planning_root = Path(planning_root)
        self.lock_timeout = lock_timeout
        self._locks = ObjectLocks(timeout=lock_timeout)

    # =========================================================================
    # Reading
    # =========================================================================

    def _iter_markdown_files(self) -> Iterator[Path]:
        if not self.planning_root.exists():
            return
        try:
            paths = sorted(self.planning_root.rglob("*.md"))
        except OSError as e:
            raise StorageError(f"Error scanning {self.planning_root}: {e}") from e
        for path in paths:
            if path.is_file() and extract_object_id(path.as_posix()):
                yield path

    def _children_ids(self, path: Path, object_type: ObjectType) -> list[str]:
        locations: list[str] = []
        for parts in CHILD_FOLDERS[object_type]:
            folder = path.parent.joinpath(*parts)
            if not folder.is_dir():
                continue
            for entry in folder.iterdir():
                if entry.is_dir() and (entry / f"{entry.name}.md").is_file():
                    locations.append(entry.name)
                elif entry.is_file() and entry.suffix == ".md":
                    locations.append(entry.name)
        return extract_object_ids(locations)

    def _load(self, path: Path) -> TrellisObject:
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"{path} is not UTF-8 text: {e}") from e
        except OSError as e:
            raise StorageError(f"Error reading {path}: {e}") from e
        obj = from_markdown(content)
        return obj.model_copy(update={"children_ids": self._children_ids(path, obj.type)})

    def _scan(self) -> list[tuple[Path, TrellisObject]]:
        found: list[tuple[Path, TrellisObject]] = []
        for path in self._iter_markdown_files():
            try:
                found.append((path, self._load(path)))
            except ValueError as e:
                logger.warning(f"Could not deserialize file {path}: {e}")
        return found

    def _find_path(self, object_id: str) -> Path | None:
        if not self.planning_root.exists():
            return None
        try:
            candidates = sorted(self.planning_root.rglob(f"{object_id}.md"))
        except OSError as e:
            raise StorageError(f"Error scanning {self.planning_root}: {e}") from e
        for path in candidates:
            if path.is_file():
                return path
        return None

    def get_object_by_id(self, object_id: str) -> TrellisObject | None:
        path = self._find_path(object_id)
        if path is None:
            return None
        try:
            obj = self._load(path)
        except ValueError as e:
            logger.warning(f"Could not deserialize file {path}: {e}")
            return None
        if obj.id != object_id:
            logger.warning(f"File {path} declares id {obj.id}, expected {object_id}")
            return None
        return obj

    def get_objects(self, object_filter: ObjectFilter | None = None) -> list[TrellisObject]:
        return filter_objects([obj for _, obj in self._scan()], object_filter)

    # =========================================================================
    # Writing
    # =========================================================================

    def _folder_of(self, object_id: str, expected: ObjectType, child_id: str) -> Path:
        path = self._find_path(object_id)
        if path is None:
            raise StorageError(f"Parent object with ID '{object_id}' not found (for {child_id})")
        try:
            parent = self._load(path)
        except ValueError as e:
            raise StorageError(f"Parent object {object_id} is unreadable: {e}") from e
        if parent.type != expected:
            raise StorageError(
                f"{child_id} parent must be a {expected.value}, "
                f"but {object_id} is a {parent.type.value}"
            )
        return path.parent

    def object_path(self, obj: TrellisObject) -> Path:
        """Compute where an object belongs given its kind, parent and status."""
        root = self.planning_root
        name = f"{obj.id}.md"

        if obj.type == ObjectType.PROJECT:
            return root / "p" / obj.id / name

        if obj.type == ObjectType.EPIC:
            if not obj.parent:
                raise StorageError(f"Epic {obj.id} must have a parent project")
            return self._folder_of(obj.parent, ObjectType.PROJECT, obj.id) / "e" / obj.id / name

        if obj.type == ObjectType.FEATURE:
            if not obj.parent:
                return root / "f" / obj.id / name
            return self._folder_of(obj.parent, ObjectType.EPIC, obj.id) / "f" / obj.id / name

        folder = status_folder(obj)
        if not obj.parent:
            return root / "t" / folder / name
        return self._folder_of(obj.parent, ObjectType.FEATURE, obj.id) / "t" / folder / name

    def _atomic_write(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(suffix=".tmp", prefix=path.stem + "_", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(temp_path, path)
        except BaseException:
            Path(temp_path).unlink(missing_ok=True)
            raise

    def save_object(self, obj: TrellisObject) -> None:
        target = self.object_path(obj)
        existing = self._find_path(obj.id)
        try:
            self._atomic_write(target, to_markdown(obj))
            if existing is not None and existing != target:
                existing.unlink(missing_ok=True)
                logger.debug(f"Moved {obj.id} from {existing} to {target}")
        except OSError as e:
            raise StorageError(f"Error writing {target}: {e}") from e

    def delete_object(self, object_id: str) -> None:
        path = self._find_path(object_id)
        if path is None:
            raise StorageError(f"No object found with ID: {object_id}")
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Error deleting {path}: {e}") from e

        # Projects, epics and features own the folder named after them
        if not object_id.startswith("T-") and path.parent.name == object_id:
            try:
                shutil.rmtree(path.parent)
            except OSError as e:
                logger.warning(f"Could not delete associated folder {path.parent}: {e}")

    # =========================================================================
    # Locking
    # =========================================================================

    @contextmanager
    def lock(self, object_id: str) -> Iterator[None]:
        lock_file = self.planning_root / LOCKS_DIR / f"{object_id}.lock"
        with self._locks.hold(object_id):
            with file_lock(lock_file, self.lock_timeout, f"lock for {object_id}"):
                yield
