"""Configuration loading and validation."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from aotscan.errors import ConfigError, ConfigNotFoundError

logger = logging.getLogger(__name__)

__all__ = ["Config", "DiscoverySettings", "load_config"]


class Config:
    """Configuration accessor with dot-path key support."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-path key."""
        parts = key.split(".")
        current: Any = self._data
        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


class DiscoverySettings(BaseModel):
    """Validated settings for a discovery run."""

    unit_suffix: str = ".class"
    synthetic_markers: list[str] = Field(default_factory=lambda: ["__"])
    descriptor_name: str = "native-image.properties"
    entry_method: str = "main"
    application_annotation: str = "org.springframework.boot.autoconfigure.SpringBootApplication"
    classpath: list[str] = Field(default_factory=list)

    @field_validator("unit_suffix")
    @classmethod
    def _suffix_has_dot(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError("unit_suffix must start with '.' and name an extension")
        return value

    @field_validator("synthetic_markers")
    @classmethod
    def _markers_not_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("synthetic_markers must name at least one marker")
        if any(not marker for marker in value):
            raise ValueError("synthetic_markers must not contain empty strings")
        return value

    @classmethod
    def from_config(cls, config: Config) -> DiscoverySettings:
        """Build settings from the ``discovery`` section and ``classpath`` key of a Config."""
        raw: dict[str, Any] = dict(config.get("discovery", {}) or {})
        classpath = config.get("classpath")
        if classpath is not None:
            raw["classpath"] = classpath
        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigError(message=f"Invalid discovery settings: {e}") from e


def load_config(path: str | Path) -> Config:
    """Load a YAML configuration file.

    Raises ConfigNotFoundError if the file does not exist. An empty file yields
    an empty Config.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigNotFoundError(config_path=str(config_path))

    content = config_path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(message=f"Invalid YAML in configuration file: {config_path}") from e

    if parsed is None:
        logger.debug("Configuration file %s is empty", config_path)
        return Config()
    if not isinstance(parsed, dict):
        raise ConfigError(message=f"Configuration file must be a YAML mapping: {config_path}")
    return Config(parsed)
