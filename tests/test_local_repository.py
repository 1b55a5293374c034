"""Tests for trellis.infrastructure.storage.local."""

import pytest

from trellis.application import replace_body
from trellis.domain.objects import ObjectFilter, ObjectStatus, ObjectType, TrellisObject
from trellis.domain.shared import StorageError
from trellis.infrastructure import LocalRepository, LockTimeout


@pytest.fixture
def local(tmp_path):
    return LocalRepository(tmp_path / ".trellis", lock_timeout=1)


@pytest.fixture
def populated(local, make_object):
    for obj in (
        make_object("P-app"),
        make_object("E-api", parent="P-app"),
        make_object("F-auth", parent="E-api"),
        make_object("T-login", parent="F-auth", body="Build the form\n"),
        make_object("F-solo"),
        make_object("T-loose"),
    ):
        local.save_object(obj)
    return local


class TestLayout:
    """Test where objects land on disk."""

    def test_hierarchy_paths(self, populated):
        root = populated.planning_root
        assert (root / "p/P-app/P-app.md").is_file()
        assert (root / "p/P-app/e/E-api/E-api.md").is_file()
        assert (root / "p/P-app/e/E-api/f/F-auth/F-auth.md").is_file()
        assert (root / "p/P-app/e/E-api/f/F-auth/t/open/T-login.md").is_file()
        assert (root / "f/F-solo/F-solo.md").is_file()
        assert (root / "t/open/T-loose.md").is_file()

    def test_closing_task_moves_file(self, populated):
        task = populated.get_object_by_id("T-login")
        populated.save_object(task.touched(status=ObjectStatus.DONE))

        feature_dir = populated.planning_root / "p/P-app/e/E-api/f/F-auth/t"
        assert (feature_dir / "closed/T-login.md").is_file()
        assert not (feature_dir / "open/T-login.md").exists()
        assert populated.get_object_by_id("T-login").status == ObjectStatus.DONE

    def test_epic_needs_existing_project(self, local, make_object):
        with pytest.raises(StorageError):
            local.save_object(make_object("E-lost", parent="P-ghost"))

    def test_no_temp_files_left(self, populated):
        leftovers = list(populated.planning_root.rglob("*.tmp"))
        assert leftovers == []


class TestReading:
    """Test loading objects back."""

    def test_round_trip(self, populated):
        task = populated.get_object_by_id("T-login")
        assert task.parent == "F-auth"
        assert task.body == "Build the form\n"
        assert task.type == ObjectType.TASK

    def test_children_from_layout(self, populated):
        assert populated.get_object_by_id("P-app").children_ids == ["E-api"]
        assert populated.get_object_by_id("E-api").children_ids == ["F-auth"]
        assert populated.get_object_by_id("F-auth").children_ids == ["T-login"]

    def test_body_with_leading_newline_survives_replace(self, local):
        local.save_object(TrellisObject(id="T-x", title="X", body="# Title\nrest"))

        result = replace_body(local, "T-x", r"# Title", "")

        assert result.value.object.body == "\nrest"
        assert local.get_object_by_id("T-x").body == "\nrest"

    def test_missing_returns_none(self, local):
        assert local.get_object_by_id("T-ghost") is None

    def test_get_objects_with_filter(self, populated):
        tasks = populated.get_objects(ObjectFilter(types=[ObjectType.TASK]))
        assert sorted(task.id for task in tasks) == ["T-login", "T-loose"]

    def test_scope_filter(self, populated):
        scoped = populated.get_objects(ObjectFilter(scope="E-api"))
        assert sorted(obj.id for obj in scoped) == ["E-api", "F-auth", "T-login"]

    def test_corrupt_file_skipped(self, populated, caplog):
        bad = populated.planning_root / "t/open/T-broken.md"
        bad.write_text("no frontmatter here", encoding="utf-8")

        ids = [obj.id for obj in populated.get_objects()]

        assert "T-broken" not in ids
        assert "T-loose" in ids
        assert "Could not deserialize" in caplog.text
        assert populated.get_object_by_id("T-broken") is None

    def test_non_convention_files_ignored(self, populated):
        (populated.planning_root / "README.md").write_text("# Notes\n", encoding="utf-8")
        assert len(populated.get_objects()) == 6

    def test_empty_root(self, local):
        assert local.get_objects() == []


class TestDeleting:
    """Test delete_object."""

    def test_delete_task(self, populated):
        populated.delete_object("T-loose")
        assert populated.get_object_by_id("T-loose") is None

    def test_delete_feature_removes_folder(self, populated):
        populated.delete_object("F-solo")
        assert not (populated.planning_root / "f/F-solo").exists()

    def test_delete_missing_raises(self, local):
        with pytest.raises(StorageError, match="No object found with ID: T-ghost"):
            local.delete_object("T-ghost")


class TestLocking:
    """Test the per-object lock."""

    def test_different_ids_do_not_contend(self, local):
        with local.lock("T-a"):
            with local.lock("T-b"):
                pass

    def test_second_repository_times_out(self, tmp_path):
        first = LocalRepository(tmp_path, lock_timeout=0.2)
        second = LocalRepository(tmp_path, lock_timeout=0.2)

        with first.lock("T-a"):
            with pytest.raises(LockTimeout):
                with second.lock("T-a"):
                    pass

    def test_save_object_value(self, local):
        obj = TrellisObject(id="T-x", title="X")
        local.save_object(obj)
        assert local.get_object_by_id("T-x").title == "X"
