"""Activity service: log entries and modified-file notes."""

import logging
from collections.abc import Mapping

from pydantic import BaseModel

from trellis.domain.objects import ObjectRepository
from trellis.domain.shared import Err, Ok, Result, TrellisFailure

logger = logging.getLogger(__name__)

NOTE_SEPARATOR = "; "


class LogAppendResult(BaseModel):
    """Outcome of appending one log entry."""

    id: str
    entry: str
    total_entries: int


class FilesAppendResult(BaseModel):
    """Outcome of recording modified files."""

    id: str
    files_recorded: int
    total_files: int


def merge_affected_files(
    existing: Mapping[str, str],
    files_changed: Mapping[str, str],
) -> dict[str, str]:
    """Merge new file notes into an object's affected files.

    A file already present keeps its old note with the new one appended,
    joined by ``"; "``.

    Example:
        >>> merge_affected_files({"a.py": "add x"}, {"a.py": "fix y", "b.py": "new"})
        {'a.py': 'add x; fix y', 'b.py': 'new'}
    """
    merged = dict(existing)
    for path, note in files_changed.items():
        previous = merged.get(path)
        merged[path] = f"{previous}{NOTE_SEPARATOR}{note}" if previous else note
    return merged


def append_log(
    repository: ObjectRepository,
    object_id: str,
    entry: str,
) -> Result[LogAppendResult, TrellisFailure]:
    """Append an entry to an object's log.

    Entries are opaque and duplicates are kept.

    Args:
        repository: Object store.
        object_id: Object to append to.
        entry: Log text.

    Returns:
        Ok(LogAppendResult) with the new total, or Err(TrellisFailure) if the
        object does not exist.
    """
    with repository.lock(object_id):
        obj = repository.get_object_by_id(object_id)
        if obj is None:
            return Err(TrellisFailure.not_found(object_id))
        updated = obj.touched(log=[*obj.log, entry])
        repository.save_object(updated)

    logger.debug(f"Appended log entry to {object_id}")
    return Ok(LogAppendResult(id=object_id, entry=entry, total_entries=len(updated.log)))


def append_modified_files(
    repository: ObjectRepository,
    object_id: str,
    files_changed: Mapping[str, str],
) -> Result[FilesAppendResult, TrellisFailure]:
    """Record modified files on an object, merging with existing notes."""
    with repository.lock(object_id):
        obj = repository.get_object_by_id(object_id)
        if obj is None:
            return Err(TrellisFailure.not_found(object_id))
        merged = merge_affected_files(obj.affected_files, files_changed)
        updated = obj.touched(affected_files=merged)
        repository.save_object(updated)

    logger.debug(f"Recorded {len(files_changed)} modified file(s) on {object_id}")
    return Ok(
        FilesAppendResult(
            id=object_id,
            files_recorded=len(files_changed),
            total_files=len(merged),
        )
    )
