from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from platformdirs import user_data_dir
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

APP_NAME = "idoll"

# Environment variable overrides (useful for tests and web/desktop wrappers)
ENV_SAVE_DIR = "IDOLL_SAVE_DIR"
ENV_LOG_LEVEL = "IDOLL_LOG_LEVEL"


def default_save_dir() -> Path:
    override = os.getenv(ENV_SAVE_DIR)
    if override:
        return Path(override).expanduser()
    return Path(user_data_dir(appname=APP_NAME, appauthor=False)) / "saves"


class SaveSettings(BaseModel):
    """Configuration for the save/load layer."""

    storage_key: str = Field("idoll_save_system", description="Key used in the key-value store")
    export_filename: str = Field("idoll-save.json", description="File name for exported snapshots")
    save_dir: Path = Field(
        default_factory=default_save_dir,
        validate_default=True,
        description="Directory for file-backed storage",
    )
    default_version: str = Field("UNKNOWN", description="Version tag when the host reports none")
    log_level: str = Field(
        default_factory=lambda: os.getenv(ENV_LOG_LEVEL, "INFO"),
        validate_default=True,
        description="Root log level name",
    )

    @field_validator("storage_key", "export_filename")
    @classmethod
    def ensure_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v}")
        return level

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "SaveSettings":
        """Build settings from defaults, overlaid with an optional YAML file."""
        data = {}
        if path is not None:
            path = Path(path)
            if path.exists():
                with path.open("r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
                logger.info("Loaded save settings from %s", path)
            else:
                logger.warning("Save settings file not found: %s", path)
        return cls(**data)
