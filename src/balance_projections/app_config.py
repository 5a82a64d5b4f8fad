"""Application configuration with singleton pattern.

The configuration is loaded from a YAML file and accessible throughout the code base
via ``get_config()``. It auto-initializes from ``app_config.yaml`` next to this module
when first accessed.

The projection core does not read configuration; the command-line runner does.
"""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path(__file__).parent / "app_config.yaml"

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class LoggingConfig(BaseModel):
    level: LogLevel = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def parse_level(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


class ProjectionConfig(BaseModel):
    default_horizon_days: int = Field(default=365, ge=0)
    max_window_days: int = Field(default=3660, ge=1)


class OutputConfig(BaseModel):
    folder: str = "output"
    file: str = "projection_%Y%m%d_%H%M%S.csv"

    def file_path(self) -> Path:
        return Path(self.folder) / self.file


class AppConfig(BaseModel):
    """Main application configuration loaded from YAML."""

    logging: LoggingConfig = LoggingConfig()
    projection: ProjectionConfig = ProjectionConfig()
    output: OutputConfig = OutputConfig()


# Singleton instance
_config_instance: AppConfig | None = None
_config_path: Path | None = None


def init_config(config_path: str | Path | None = None) -> AppConfig:
    """Initialize the global configuration from a YAML file.

    Parameters
    ----------
    config_path : str | Path | None
        Path to the YAML configuration file. If None, uses the default
        config file located alongside this module.

    Returns
    -------
    AppConfig
        The initialized configuration instance
    """
    global _config_instance, _config_path

    config_path = Path(DEFAULT_CONFIG_PATH if config_path is None else config_path)

    with open(config_path, encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    _config_instance = AppConfig(**config_dict)
    _config_path = config_path
    return _config_instance


def get_config() -> AppConfig:
    """Get the global configuration instance, initializing it from the default file if needed."""
    global _config_instance
    if _config_instance is None:
        init_config()
    assert _config_instance is not None
    return _config_instance


def get_config_path() -> Path | None:
    return _config_path


def is_config_initialized() -> bool:
    """Check if the configuration has been initialized."""
    return _config_instance is not None


def reset_config() -> None:
    """Reset the configuration singleton. Mainly useful for testing."""
    global _config_instance, _config_path
    _config_instance = None
    _config_path = None


class _ConfigProxy:
    """Proxy class that delegates all attribute access to the singleton AppConfig instance."""

    def __getattr__(self, name: str) -> Any:
        return getattr(get_config(), name)


# Convenience proxy - allows Config.projection syntax without calling get_config() first
Config = _ConfigProxy()
