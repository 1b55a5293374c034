"""Tests for trellis.domain.shared.errors."""

import re

import pytest

from trellis.domain.shared import ErrorKind, StorageError, TrellisFailure


@pytest.mark.parametrize("kind", list(ErrorKind))
def test_kind_values_are_kebab_case(kind):
    assert re.fullmatch(r"[a-z]+(-[a-z]+)*", kind.value)


def test_storage_faults_are_raised_not_returned():
    assert "storage-failure" not in {kind.value for kind in ErrorKind}
    assert issubclass(StorageError, Exception)


class TestTrellisFailure:
    """Test failure constructors."""

    def test_parent_not_found(self):
        failure = TrellisFailure.parent_not_found("E-ghost")
        assert failure.kind == ErrorKind.PARENT_NOT_FOUND
        assert failure.kind.value == "parent-not-found"
        assert failure.field == "parent"
        assert failure.is_validation_failure

    def test_invalid_title(self):
        failure = TrellisFailure.invalid_title("!!!", "Title must contain a letter")
        assert failure.kind.value == "invalid-title"
        assert failure.field == "title"
        assert str(failure) == "Title must contain a letter: '!!!'"

    def test_not_found_is_not_validation_failure(self):
        assert not TrellisFailure.not_found("T-ghost").is_validation_failure
