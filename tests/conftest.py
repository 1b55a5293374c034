"""Shared fixtures for trellis tests."""

from datetime import UTC, datetime, timedelta

import pytest

from trellis.domain.objects import ObjectStatus, TrellisObject
from trellis.infrastructure import InMemoryRepository

BASE_TIME = datetime(2025, 1, 1, tzinfo=UTC)


def build_object(
    object_id: str,
    title: str | None = None,
    status: ObjectStatus = ObjectStatus.OPEN,
    age_minutes: float = 0,
    **fields,
) -> TrellisObject:
    """Build an object with sensible defaults; the type comes from the id."""
    stamp = BASE_TIME - timedelta(minutes=age_minutes)
    return TrellisObject(
        id=object_id,
        title=title or object_id,
        status=status,
        created=stamp,
        updated=stamp,
        **fields,
    )


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the real home directory and TRELLIS_* variables."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("TRELLIS_PLANNING_ROOT", raising=False)
    monkeypatch.delenv("TRELLIS_AUTO_COMPLETE_PARENT", raising=False)


@pytest.fixture
def make_object():
    """Factory for test objects."""
    return build_object


@pytest.fixture
def repo():
    """Empty in-memory repository."""
    return InMemoryRepository(lock_timeout=2)


@pytest.fixture
def hierarchy():
    """Repository with one project > epic > feature > two tasks."""
    return InMemoryRepository(
        [
            build_object("P-app"),
            build_object("E-api", parent="P-app"),
            build_object("F-auth", parent="E-api"),
            build_object("T-login", parent="F-auth", priority="high"),
            build_object("T-logout", parent="F-auth", prerequisites=["T-login"]),
        ],
        lock_timeout=2,
    )
