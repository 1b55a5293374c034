"""Tests for trellis.infrastructure.locking."""

import threading

import pytest

from trellis.infrastructure.locking import LockTimeout, ObjectLocks, file_lock


class TestObjectLocks:
    """Test the in-process lock table."""

    def test_reentrant_for_same_thread(self):
        locks = ObjectLocks(timeout=0.5)
        with locks.hold("T-a"):
            with locks.hold("T-a"):
                pass

    def test_other_thread_times_out(self):
        locks = ObjectLocks(timeout=0.1)
        errors = []

        def contender():
            try:
                with locks.hold("T-a"):
                    pass
            except LockTimeout as e:
                errors.append(e)

        with locks.hold("T-a"):
            thread = threading.Thread(target=contender)
            thread.start()
            thread.join()

        assert len(errors) == 1
        assert "T-a" in str(errors[0])

    def test_released_after_exception(self):
        locks = ObjectLocks(timeout=0.1)
        with pytest.raises(RuntimeError):
            with locks.hold("T-a"):
                raise RuntimeError("boom")

        done = threading.Event()

        def later():
            with locks.hold("T-a"):
                done.set()

        thread = threading.Thread(target=later)
        thread.start()
        thread.join()
        assert done.is_set()


def test_file_lock_creates_parent_folder(tmp_path):
    lock_file = tmp_path / "locks" / "T-a.lock"
    with file_lock(lock_file, timeout=1, lock_name="lock for T-a"):
        pass
    assert lock_file.parent.is_dir()
