"""Task lifecycle service.

Claims, completions, next-issue selection and pruning of closed objects.
Every load-compute-save step on one object runs inside that object's lock;
hierarchy side effects (ancestor status updates) take each ancestor's lock
in turn after the task's lock is released.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from trellis.application.activity import merge_affected_files
from trellis.domain.objects import (
    ObjectFilter,
    ObjectRepository,
    ObjectStatus,
    ObjectType,
    TrellisObject,
    is_claimable,
    is_closed,
    is_in_scope,
    sort_by_priority,
    utc_now,
)
from trellis.domain.shared import Err, ErrorKind, Ok, Result, StorageError, TrellisFailure
from trellis.domain.validation import (
    find_blocking_ancestor_prerequisite,
    find_blocking_prerequisite,
)
from trellis.infrastructure.locking import LockTimeout

logger = logging.getLogger(__name__)

CLAIM_LOG_ENTRY = "Claimed task"
COMPLETE_LOG_ENTRY = "Completed task"

# Plural child noun used in auto-completion log entries
CHILD_NOUNS = {
    ObjectType.PROJECT: "epics",
    ObjectType.EPIC: "features",
    ObjectType.FEATURE: "tasks",
}


class PruneFailure(BaseModel):
    """An object the prune pass could not delete."""

    id: str
    error: str


class PruneReport(BaseModel):
    """Outcome of one prune pass."""

    deleted: list[str] = Field(default_factory=list)
    failed: list[PruneFailure] = Field(default_factory=list)
    retained: list[str] = Field(default_factory=list)

    @property
    def summary(self) -> str:
        return (
            f"Pruned {len(self.deleted)} closed object(s), "
            f"{len(self.retained)} retained, {len(self.failed)} failed"
        )


# =============================================================================
# Availability
# =============================================================================


def _check_claimable(
    task: TrellisObject,
    repository: ObjectRepository,
    force: bool,
) -> Result[TrellisObject, TrellisFailure]:
    if not task.is_task:
        return Err(
            TrellisFailure.invalid_transition(
                task.id,
                f"Object with ID '{task.id}' is not a task (type: {task.type.value})",
            )
        )
    if force:
        return Ok(task)

    if not is_claimable(task):
        return Err(
            TrellisFailure.invalid_transition(
                task.id,
                f"Task '{task.id}' cannot be claimed (status: {task.status.value})",
            )
        )

    lookup = repository.get_object_by_id
    blocking = find_blocking_prerequisite(task, lookup)
    if blocking is not None:
        return Err(
            TrellisFailure.unmet_prerequisite(
                blocking,
                f"Task '{task.id}' cannot be claimed. Prerequisite {blocking} is not complete",
            )
        )

    blocking = find_blocking_ancestor_prerequisite(task, lookup)
    if blocking is not None:
        return Err(
            TrellisFailure.unmet_prerequisite(
                blocking,
                f"Task '{task.id}' cannot be claimed. Parent hierarchy has incomplete "
                f"prerequisites (blocked by {blocking})",
            )
        )
    return Ok(task)


def list_available_issues(
    repository: ObjectRepository,
    scope: str | None = None,
    types: Iterable[ObjectType] | None = None,
) -> list[TrellisObject]:
    """Return OPEN objects with every prerequisite met, highest priority first.

    Prerequisites of ancestors count too. Objects are loaded once and
    resolved in memory.
    """
    everything = repository.get_objects()
    by_id = {obj.id: obj for obj in everything}
    wanted = set(types or [])

    available = [
        obj
        for obj in everything
        if obj.status == ObjectStatus.OPEN
        and (not wanted or obj.type in wanted)
        and is_in_scope(obj, scope, by_id)
        and find_blocking_prerequisite(obj, by_id.get) is None
        and find_blocking_ancestor_prerequisite(obj, by_id.get) is None
    ]
    return sort_by_priority(available)


def get_next_available_issue(
    repository: ObjectRepository,
    scope: str | None = None,
    types: Iterable[ObjectType] | None = None,
) -> Result[TrellisObject, TrellisFailure]:
    """Get the highest priority object that is ready to work on.

    Args:
        repository: Object store.
        scope: Restrict to this object and its descendants.
        types: Restrict to these kinds; all kinds when empty.

    Returns:
        Ok(TrellisObject), or Err(TrellisFailure) with kind NOT_FOUND.
    """
    available = list_available_issues(repository, scope, types)
    if not available:
        return Err(
            TrellisFailure(
                kind=ErrorKind.NOT_FOUND,
                message="No available issues found matching criteria",
            )
        )
    return Ok(available[0])


# =============================================================================
# Claim
# =============================================================================


def _mark_ancestors_in_progress(task: TrellisObject, repository: ObjectRepository) -> None:
    seen = {task.id}
    parent_id = task.parent
    while parent_id and parent_id not in seen:
        seen.add(parent_id)
        try:
            with repository.lock(parent_id):
                parent = repository.get_object_by_id(parent_id)
                if parent is None:
                    return
                if parent.status != ObjectStatus.IN_PROGRESS:
                    repository.save_object(parent.touched(status=ObjectStatus.IN_PROGRESS))
                    logger.info(f"Marked {parent_id} in progress")
        except (StorageError, LockTimeout) as e:
            logger.warning(f"Could not update parent {parent_id} after claim: {e}")
            return
        parent_id = parent.parent


def claim_task(
    repository: ObjectRepository,
    task_id: str,
    force: bool = False,
) -> Result[TrellisObject, TrellisFailure]:
    """Claim a task by moving it to IN_PROGRESS.

    Status and prerequisites are checked under the task's lock, so two
    concurrent claims on one task cannot both succeed. Ancestors are then
    moved to IN_PROGRESS on a best-effort basis.

    Args:
        repository: Object store.
        task_id: Task to claim.
        force: Skip the status and prerequisite checks.

    Returns:
        Ok(claimed task), or Err(TrellisFailure) with kind NOT_FOUND,
        INVALID_TRANSITION or UNMET_PREREQUISITE.
    """
    with repository.lock(task_id):
        task = repository.get_object_by_id(task_id)
        if task is None:
            return Err(TrellisFailure.not_found(task_id, noun="Task"))

        checked = _check_claimable(task, repository, force)
        if isinstance(checked, Err):
            return checked

        claimed = task.touched(
            status=ObjectStatus.IN_PROGRESS,
            log=[*task.log, CLAIM_LOG_ENTRY],
        )
        repository.save_object(claimed)

    logger.info(f"Claimed task {task_id}")
    _mark_ancestors_in_progress(claimed, repository)
    return Ok(claimed)


def claim_next_task(
    repository: ObjectRepository,
    scope: str | None = None,
) -> Result[TrellisObject, TrellisFailure]:
    """Claim the highest priority available task.

    Candidates are tried in order; one taken by someone else between
    selection and claim is skipped.
    """
    for candidate in list_available_issues(repository, scope, [ObjectType.TASK]):
        result = claim_task(repository, candidate.id)
        if isinstance(result, Ok):
            return result
        logger.debug(f"Skipping {candidate.id}: {result.error}")

    scope_text = f" within scope {scope}" if scope else ""
    return Err(
        TrellisFailure(
            kind=ErrorKind.NOT_FOUND,
            message=f"No available tasks to claim{scope_text}",
        )
    )


# =============================================================================
# Complete
# =============================================================================


def _auto_complete_parents(task: TrellisObject, repository: ObjectRepository) -> None:
    seen = {task.id}
    parent_id = task.parent
    while parent_id and parent_id not in seen:
        seen.add(parent_id)
        try:
            with repository.lock(parent_id):
                parent = repository.get_object_by_id(parent_id)
                if parent is None or parent.status == ObjectStatus.DONE:
                    return
                children = repository.get_objects(ObjectFilter(parent=parent_id))
                if not all(is_closed(child) for child in children):
                    return
                noun = CHILD_NOUNS.get(parent.type, "children")
                repository.save_object(
                    parent.touched(
                        status=ObjectStatus.DONE,
                        log=[*parent.log, f"Auto-completed: All child {noun} are complete"],
                    )
                )
                logger.info(f"Auto-completed {parent_id}")
        except (StorageError, LockTimeout) as e:
            logger.warning(f"Could not auto-complete parent {parent_id}: {e}")
            return
        parent_id = parent.parent


def complete_task(
    repository: ObjectRepository,
    task_id: str,
    summary: str = "",
    files_changed: dict[str, str] | None = None,
    auto_complete_parent: bool = False,
) -> Result[TrellisObject, TrellisFailure]:
    """Complete an in-progress task.

    Args:
        repository: Object store.
        task_id: Task to complete.
        summary: Log entry to append; ``"Completed task"`` when empty.
        files_changed: File path to note, merged into ``affected_files``.
        auto_complete_parent: Walk up the hierarchy, completing each parent
            whose children are all closed.

    Returns:
        Ok(completed task), or Err(TrellisFailure) with kind NOT_FOUND or
        INVALID_TRANSITION.
    """
    with repository.lock(task_id):
        task = repository.get_object_by_id(task_id)
        if task is None:
            return Err(TrellisFailure.not_found(task_id, noun="Task"))
        if not task.is_task:
            return Err(
                TrellisFailure.invalid_transition(
                    task_id,
                    f"Object with ID '{task_id}' is not a task (type: {task.type.value})",
                )
            )
        if task.status != ObjectStatus.IN_PROGRESS:
            return Err(
                TrellisFailure.invalid_transition(
                    task_id,
                    f"Task '{task_id}' is not in progress (current status: {task.status.value})",
                )
            )

        completed = task.touched(
            status=ObjectStatus.DONE,
            affected_files=merge_affected_files(task.affected_files, files_changed or {}),
            log=[*task.log, summary or COMPLETE_LOG_ENTRY],
        )
        repository.save_object(completed)

    logger.info(f"Completed task {task_id}")
    if auto_complete_parent:
        _auto_complete_parents(completed, repository)
    return Ok(completed)


# =============================================================================
# Prune
# =============================================================================


def _referenced_ids(objects: Iterable[TrellisObject]) -> set[str]:
    referenced: set[str] = set()
    for obj in objects:
        if obj.parent and obj.parent != obj.id:
            referenced.add(obj.parent)
        referenced.update(ref for ref in obj.prerequisites if ref != obj.id)
    return referenced


def prune_closed(
    repository: ObjectRepository,
    age_minutes: float = 0,
    scope: str | None = None,
    now: datetime | None = None,
) -> Result[PruneReport, TrellisFailure]:
    """Delete closed objects that nothing depends on any more.

    Candidates are terminal objects in scope last updated before
    ``now - age_minutes``. Deletion repeats until no further candidate is
    free: a closed feature becomes free once its closed tasks are gone. An
    object still named as a parent or prerequisite by any remaining object
    is never deleted. Failed deletions are reported and leave earlier
    deletions in place.

    Args:
        repository: Object store.
        age_minutes: Minimum age since last update.
        scope: Restrict to this object and its descendants.
        now: Reference time; the current UTC time when omitted.

    Returns:
        Ok(PruneReport).
    """
    cutoff = (now or utc_now()) - timedelta(minutes=age_minutes)
    everything = repository.get_objects()
    by_id = {obj.id: obj for obj in everything}

    candidates = {
        obj.id
        for obj in everything
        if is_closed(obj) and obj.updated < cutoff and is_in_scope(obj, scope, by_id)
    }
    report = PruneReport()

    progress = True
    while progress:
        progress = False
        referenced = _referenced_ids(by_id.values())
        for object_id in sorted(candidates - referenced):
            candidates.discard(object_id)
            try:
                with repository.lock(object_id):
                    repository.delete_object(object_id)
            except (StorageError, LockTimeout) as e:
                logger.warning(f"Failed to prune {object_id}: {e}")
                report.failed.append(PruneFailure(id=object_id, error=str(e)))
                continue
            del by_id[object_id]
            report.deleted.append(object_id)
            progress = True

    report.retained = sorted(candidates)
    if report.deleted or report.failed:
        logger.info(report.summary)
    return Ok(report)
