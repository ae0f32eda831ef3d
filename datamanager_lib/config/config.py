"""DataManager configuration loaded from `data/config/datamanager.yml`."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel

logger = logging.getLogger(__name__)

CONFIG_PATH = Path("data/config/datamanager.yml")


class StoreConfig(BaseModel):
    backend: Literal["file", "memory", "sqlite"] = "file"
    data_dir: str = "data"
    sqlite_path: Optional[str] = None
    serializer: Literal["yaml", "json"] = "yaml"
    enforce_foreign_keys: bool = False
    cascade_group_delete: bool = False
    strict_decode: bool = True
    log_level: str = "WARNING"


def load_yaml_file(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(path: Optional[Path] = None) -> StoreConfig:
    """Load and validate the store configuration.

    A missing file yields the defaults. Invalid values raise pydantic's
    ValidationError.
    """
    cfg_path = Path(path) if path is not None else CONFIG_PATH
    raw = load_yaml_file(cfg_path)
    if not isinstance(raw, dict):
        raise ValueError(f"{cfg_path} must contain a mapping, got {type(raw).__name__}")
    cfg = StoreConfig.model_validate(raw)
    logger.debug("Loaded store config from %s: backend=%s", cfg_path, cfg.backend)
    return cfg


def default_template() -> str:
    """Return the default configuration rendered as YAML."""
    return yaml.safe_dump(StoreConfig().model_dump(), sort_keys=False)
