"""Migrator configuration loaded from YAML and the environment."""

import os
from typing import Optional
from pathlib import Path

import yaml
from loguru import logger
from pydantic import Field, BaseModel, field_validator

from qtimigrator.errors import ParsingError, InputOutputError
from qtimigrator.utils.env import expand_env_recursive, validate_env_expanded


DEFAULT_CONFIG_PATH = Path("~/.qti-migrator.yaml")

ENV_OVERRIDES = {
    "QTI_MIGRATOR_VERBOSITY": "verbosity",
    "QTI_MIGRATOR_LOG_LEVEL": "log_level",
}

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class MigratorConfig(BaseModel):
    verbosity: int = Field(1, ge=0, le=3, description="Report detail level (0-3)")
    force: bool = Field(False, description="Overwrite existing output files")
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize to an upper-case loguru level name."""
        v = v.strip().upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return v

    @field_validator("log_file")
    @classmethod
    def validate_log_file(cls, v: Optional[Path]) -> Optional[Path]:
        if v is not None:
            validate_env_expanded(str(v), "log_file")
        return v

    @classmethod
    def from_yaml(cls, path: Path) -> "MigratorConfig":
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except OSError as e:
            raise InputOutputError(f"cannot read configuration file {path}: {e}", cause=e) from e
        except yaml.YAMLError as e:
            raise ParsingError(f"invalid YAML in configuration file {path}", details=str(e), cause=e) from e
        if not isinstance(data, dict):
            raise ParsingError(f"configuration file {path} must contain a mapping")
        return cls(**expand_env_recursive(data))


def load_config(path: Optional[Path] = None) -> MigratorConfig:
    """Load configuration from ``path`` or the default file, then apply env overrides.

    Raises:
        InputOutputError: If an explicit ``path`` does not exist.
        pydantic.ValidationError: If a value is out of range.
    """
    data = {}
    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise InputOutputError(f"configuration file not found: {path}")
        data = MigratorConfig.from_yaml(path).model_dump(exclude_unset=True)
    else:
        default = DEFAULT_CONFIG_PATH.expanduser()
        if default.is_file():
            logger.debug(f"Loading configuration from {default}")
            data = MigratorConfig.from_yaml(default).model_dump(exclude_unset=True)

    for env_name, field in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            data[field] = value
    return MigratorConfig(**data)
