"""Tests for trellis.application.objects."""

import pytest

from trellis.application import (
    create_object,
    delete_object,
    get_object,
    list_objects,
    update_object,
)
from trellis.domain.objects import ObjectPriority, ObjectStatus, ObjectType
from trellis.domain.shared import ErrorKind


class TestCreateObject:
    """Test create_object function."""

    def test_creates_with_generated_id(self, hierarchy):
        result = create_object(hierarchy, ObjectType.TASK, "Reset password", parent="F-auth")

        task = result.value
        assert task.id == "T-reset-password"
        assert task.created == task.updated
        assert hierarchy.get_object_by_id("T-reset-password") is not None
        assert "T-reset-password" in hierarchy.get_object_by_id("F-auth").children_ids

    def test_collision_gets_suffix(self, hierarchy):
        result = create_object(hierarchy, ObjectType.TASK, "Login", parent="F-auth")
        assert result.value.id == "T-login-1"

    def test_missing_parent_not_saved(self, hierarchy):
        before = len(hierarchy)
        result = create_object(hierarchy, ObjectType.TASK, "Orphan", parent="F-ghost")

        assert result.error.kind == ErrorKind.PARENT_NOT_FOUND
        assert len(hierarchy) == before

    def test_wrong_parent_type_not_saved(self, hierarchy):
        result = create_object(hierarchy, ObjectType.EPIC, "Billing", parent="F-auth")
        assert result.error.kind == ErrorKind.INVALID_PARENT_TYPE
        assert hierarchy.get_object_by_id("E-billing") is None

    def test_standalone_task(self, repo):
        result = create_object(
            repo,
            ObjectType.TASK,
            "Fix typo",
            priority=ObjectPriority.LOW,
            prerequisites=["T-x", "T-x"],
            body="Typo in README",
        )
        assert result.value.parent is None
        assert result.value.prerequisites == ["T-x"]
        assert result.value.priority == ObjectPriority.LOW

    @pytest.mark.parametrize("title", ["  ", "!!!", "--- ..."])
    def test_title_without_slug_is_refused(self, repo, title):
        result = create_object(repo, ObjectType.TASK, title)

        assert result.error.kind == ErrorKind.INVALID_TITLE
        assert result.error.field == "title"
        assert result.error.is_validation_failure
        assert repo.get_objects() == []


class TestGetAndUpdate:
    """Test get_object and update_object."""

    def test_get_missing(self, repo):
        result = get_object(repo, "T-ghost")
        assert result.error.message == "Object with ID 'T-ghost' not found"

    def test_update_fields(self, hierarchy):
        result = update_object(
            hierarchy, "T-logout", priority=ObjectPriority.LOW, body="New body"
        )

        assert result.value.priority == ObjectPriority.LOW
        stored = hierarchy.get_object_by_id("T-logout")
        assert stored.body == "New body"
        assert stored.prerequisites == ["T-login"]

    def test_status_blocked_by_prerequisite(self, hierarchy):
        result = update_object(hierarchy, "T-logout", status=ObjectStatus.DONE)

        assert result.error.kind == ErrorKind.UNMET_PREREQUISITE
        assert hierarchy.get_object_by_id("T-logout").status == ObjectStatus.OPEN

    def test_force_status(self, hierarchy):
        result = update_object(hierarchy, "T-logout", status=ObjectStatus.DONE, force=True)
        assert result.value.status == ObjectStatus.DONE

    def test_clearing_prerequisites_unblocks(self, hierarchy):
        update_object(hierarchy, "T-logout", prerequisites=[])
        result = update_object(hierarchy, "T-logout", status=ObjectStatus.IN_PROGRESS)
        assert result.value.status == ObjectStatus.IN_PROGRESS

    def test_update_missing(self, repo):
        assert update_object(repo, "T-ghost", body="x").error.kind == ErrorKind.NOT_FOUND


class TestDeleteObject:
    """Test delete_object function."""

    def test_refuses_required_prerequisite(self, hierarchy):
        result = delete_object(hierarchy, "T-login")

        assert result.error.kind == ErrorKind.DEPENDENCY_CONFLICT
        assert hierarchy.get_object_by_id("T-login") is not None

    def test_force_deletes(self, hierarchy):
        assert delete_object(hierarchy, "T-login", force=True).value.id == "T-login"
        assert hierarchy.get_object_by_id("T-login") is None

    def test_closed_dependents_do_not_block(self, repo, make_object):
        repo.save_object(make_object("T-a"))
        repo.save_object(make_object("T-b", status=ObjectStatus.DONE, prerequisites=["T-a"]))

        assert delete_object(repo, "T-a").value.id == "T-a"

    def test_missing(self, repo):
        assert delete_object(repo, "T-ghost").error.kind == ErrorKind.NOT_FOUND


class TestListObjects:
    """Test list_objects function."""

    def test_excludes_closed_by_default(self, repo, make_object):
        repo.save_object(make_object("T-open"))
        repo.save_object(make_object("T-done", status=ObjectStatus.DONE))

        ids = [summary.id for summary in list_objects(repo).value]

        assert ids == ["T-open"]

    def test_include_closed(self, repo, make_object):
        repo.save_object(make_object("T-open"))
        repo.save_object(make_object("T-done", status=ObjectStatus.DONE))

        ids = [summary.id for summary in list_objects(repo, include_closed=True).value]

        assert ids == ["T-done", "T-open"]

    def test_explicit_closed_status(self, repo, make_object):
        repo.save_object(make_object("T-done", status=ObjectStatus.DONE))
        summaries = list_objects(repo, statuses=[ObjectStatus.DONE]).value
        assert [summary.id for summary in summaries] == ["T-done"]

    def test_scope_and_type(self, hierarchy):
        summaries = list_objects(hierarchy, types=[ObjectType.TASK], scope="E-api").value
        assert [summary.id for summary in summaries] == ["T-login", "T-logout"]

    def test_priority_filter(self, hierarchy):
        summaries = list_objects(hierarchy, priorities=[ObjectPriority.HIGH]).value
        assert [summary.id for summary in summaries] == ["T-login"]
