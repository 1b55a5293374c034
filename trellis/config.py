"""Configuration for trellis.

Settings live in ``~/.trellis/config.json`` and may be overridden per
process with environment variables:

    TRELLIS_PLANNING_ROOT          planning root folder
    TRELLIS_AUTO_COMPLETE_PARENT   "1"/"true"/"yes" to enable
"""

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .application import prune_closed
from .infrastructure import LocalRepository

logger = logging.getLogger(__name__)

ENV_PLANNING_ROOT = "TRELLIS_PLANNING_ROOT"
ENV_AUTO_COMPLETE_PARENT = "TRELLIS_AUTO_COMPLETE_PARENT"

_TRUTHY = {"1", "true", "yes", "on"}


class TrellisConfig(BaseModel):
    """User settings."""

    planning_root: Path = Path(".trellis")
    auto_complete_parent: bool = False
    # Days a closed object is kept before the startup prune removes it; 0 disables
    auto_prune_days: int = Field(default=0, ge=0)
    lock_timeout: float = Field(default=10.0, gt=0)


def get_config_dir() -> Path:
    """Get the trellis config directory."""
    return Path.home() / ".trellis"


def load_config(path: Path | None = None) -> TrellisConfig:
    """Load configuration from disk, then apply environment overrides.

    A missing file yields defaults. An unreadable or invalid file is logged
    and ignored.

    Args:
        path: Config file; ``~/.trellis/config.json`` when omitted.
    """
    config_file = path or get_config_dir() / "config.json"
    data: dict = {}
    if config_file.exists():
        try:
            loaded = json.loads(config_file.read_text(encoding="utf-8"))
            TrellisConfig.model_validate(loaded)
            data = loaded
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring invalid config file {config_file}: {e}")

    planning_root = os.environ.get(ENV_PLANNING_ROOT)
    if planning_root:
        data["planning_root"] = planning_root
    auto_complete = os.environ.get(ENV_AUTO_COMPLETE_PARENT)
    if auto_complete is not None:
        data["auto_complete_parent"] = auto_complete.strip().lower() in _TRUTHY

    return TrellisConfig.model_validate(data)


def save_config(config: TrellisConfig, path: Path | None = None) -> None:
    """Save configuration as JSON."""
    config_file = path or get_config_dir() / "config.json"
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(config.model_dump_json(indent=2), encoding="utf-8")


def open_repository(config: TrellisConfig) -> LocalRepository:
    """Build the filesystem repository described by ``config``.

    When ``auto_prune_days`` is set, closed objects older than that are
    pruned once before the repository is returned.
    """
    repository = LocalRepository(config.planning_root, lock_timeout=config.lock_timeout)
    if config.auto_prune_days > 0:
        result = prune_closed(repository, age_minutes=config.auto_prune_days * 24 * 60)
        logger.debug(f"Startup prune: {result.value.summary}")
    return repository
