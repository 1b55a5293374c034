"""Tests for trellis.config."""

import json
from datetime import timedelta
from pathlib import Path

from trellis.config import TrellisConfig, load_config, open_repository, save_config
from trellis.domain.objects import ObjectStatus, TrellisObject, utc_now
from trellis.infrastructure import LocalRepository


class TestLoadConfig:
    """Test load_config function."""

    def test_defaults_without_file(self, tmp_path):
        config = load_config(tmp_path / "missing.json")

        assert config.planning_root == Path(".trellis")
        assert config.auto_complete_parent is False
        assert config.auto_prune_days == 0
        assert config.lock_timeout == 10.0

    def test_reads_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps({"planning_root": "/work/plans", "auto_complete_parent": True})
        )

        config = load_config(config_file)

        assert config.planning_root == Path("/work/plans")
        assert config.auto_complete_parent is True

    def test_invalid_file_falls_back_to_defaults(self, tmp_path, caplog):
        config_file = tmp_path / "config.json"
        config_file.write_text("{not json")

        config = load_config(config_file)

        assert config == TrellisConfig()
        assert "Ignoring invalid config file" in caplog.text

    def test_invalid_values_fall_back_to_defaults(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"auto_prune_days": -3}))

        assert load_config(config_file).auto_prune_days == 0

    def test_environment_overrides(self, tmp_path, monkeypatch):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"planning_root": "/from/file"}))
        monkeypatch.setenv("TRELLIS_PLANNING_ROOT", "/from/env")
        monkeypatch.setenv("TRELLIS_AUTO_COMPLETE_PARENT", "yes")

        config = load_config(config_file)

        assert config.planning_root == Path("/from/env")
        assert config.auto_complete_parent is True

    def test_default_location_is_home(self, tmp_path):
        home_config = tmp_path / "home" / ".trellis" / "config.json"
        save_config(TrellisConfig(auto_prune_days=7), home_config)

        assert load_config().auto_prune_days == 7


class TestOpenRepository:
    """Test open_repository function."""

    def test_builds_local_repository(self, tmp_path):
        repository = open_repository(TrellisConfig(planning_root=tmp_path, lock_timeout=3))

        assert isinstance(repository, LocalRepository)
        assert repository.planning_root == tmp_path
        assert repository.lock_timeout == 3

    def test_startup_prune(self, tmp_path):
        old = utc_now() - timedelta(days=10)
        seed = LocalRepository(tmp_path)
        seed.save_object(
            TrellisObject(id="T-old", title="Old", status=ObjectStatus.DONE, updated=old)
        )
        seed.save_object(TrellisObject(id="T-recent", title="Recent", status=ObjectStatus.DONE))

        repository = open_repository(TrellisConfig(planning_root=tmp_path, auto_prune_days=3))

        assert repository.get_object_by_id("T-old") is None
        assert repository.get_object_by_id("T-recent") is not None

    def test_no_prune_when_disabled(self, tmp_path):
        seed = LocalRepository(tmp_path)
        seed.save_object(
            TrellisObject(
                id="T-old",
                title="Old",
                status=ObjectStatus.DONE,
                updated=utc_now() - timedelta(days=10),
            )
        )

        repository = open_repository(TrellisConfig(planning_root=tmp_path))

        assert repository.get_object_by_id("T-old") is not None
