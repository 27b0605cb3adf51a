"""Configuration loading utilities."""

import os
from pathlib import Path
from typing import Optional

from omegaconf import OmegaConf
from pydantic import BaseModel, field_validator

# Points to a YAML file with settings, used when no path is passed explicitly
CONFIG_PATH_ENV = "CHESS_CONFIG"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    database_url: str = "sqlite:///chess.db"
    database_echo: bool = False
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_rotation: str = "10 MB"
    log_retention: str = "1 week"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {value!r}. Pick one from {', '.join(LOG_LEVELS)}")
        return level


def load_settings(
    config_path: Optional[str | Path] = None, overrides: Optional[list[str]] = None
) -> Settings:
    """Load settings from a YAML file with optional overrides.

    Args:
        config_path: Path to the YAML configuration file. Falls back to $CHESS_CONFIG; defaults only if neither is set.
        overrides: Optional list of CLI-style overrides (e.g., ["log_level=DEBUG"]).

    Returns:
        Validated settings.
    """
    config = OmegaConf.create()

    config_path = config_path or os.environ.get(CONFIG_PATH_ENV)
    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            msg = f"Config file not found: {config_path}"
            raise FileNotFoundError(msg)
        config = OmegaConf.merge(config, OmegaConf.load(config_path))

    if overrides:
        config = OmegaConf.merge(config, OmegaConf.from_dotlist(overrides))

    return Settings.model_validate(OmegaConf.to_container(config, resolve=True))
