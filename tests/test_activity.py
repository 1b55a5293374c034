"""Tests for trellis.application.activity."""

from trellis.application import append_log, append_modified_files, merge_affected_files
from trellis.domain.shared import ErrorKind


def test_append_log_reports_total(repo, make_object):
    repo.save_object(make_object("T-a", log=["Claimed task"]))

    result = append_log(repo, "T-a", "Wrote the parser")

    assert result.value.id == "T-a"
    assert result.value.entry == "Wrote the parser"
    assert result.value.total_entries == 2
    assert repo.get_object_by_id("T-a").log == ["Claimed task", "Wrote the parser"]


def test_append_log_keeps_duplicates(repo, make_object):
    repo.save_object(make_object("T-a"))

    append_log(repo, "T-a", "same")
    result = append_log(repo, "T-a", "same")

    assert result.value.total_entries == 2


def test_append_log_missing_object(repo):
    result = append_log(repo, "T-ghost", "entry")
    assert result.error.kind == ErrorKind.NOT_FOUND
    assert len(repo) == 0


def test_append_log_works_on_any_kind(repo, make_object):
    repo.save_object(make_object("P-app"))
    assert append_log(repo, "P-app", "Kickoff").value.total_entries == 1


def test_merge_affected_files():
    merged = merge_affected_files({"a.py": "add x"}, {"a.py": "fix y", "b.py": "new"})
    assert merged == {"a.py": "add x; fix y", "b.py": "new"}


def test_append_modified_files(repo, make_object):
    repo.save_object(make_object("T-a", affected_files={"a.py": "first"}))

    result = append_modified_files(repo, "T-a", {"a.py": "second", "b.py": "created"})

    assert result.value.files_recorded == 2
    assert result.value.total_files == 2
    assert repo.get_object_by_id("T-a").affected_files == {
        "a.py": "first; second",
        "b.py": "created",
    }


def test_append_modified_files_missing_object(repo):
    result = append_modified_files(repo, "T-ghost", {"a.py": "x"})
    assert result.error.kind == ErrorKind.NOT_FOUND
