"""
Configuration loading.

Each environment has its own TOML file under ``carbon_reporting/configs``.
"""
import logging
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from carbon_reporting.utils.constants import ConfigFile

CONFIG_DIR = Path(__file__).resolve().parent.parent / "configs"

logger = logging.getLogger(__name__)

__all__ = ["CONFIG_DIR", "Config", "ConfigFile", "get_config"]


class Config:
    """Parsed configuration file."""

    def __init__(self, data: dict[str, Any], config_file: str):
        self.data = data
        self.config_file = config_file

    def section(self, name: str) -> dict[str, Any]:
        """Return a top-level table, or an empty dict if it is missing."""
        return self.data.get(name, {})

    def __repr__(self):
        return f"<Config: {self.config_file}>"


@lru_cache
def get_config(config_file: str) -> Config:
    """
    Load configuration from a TOML file.

    Args:
        config_file: Configuration file name (e.g., "development.toml")

    Returns:
        Config instance

    Raises:
        FileNotFoundError: If the file does not exist in CONFIG_DIR
    """
    path = CONFIG_DIR / config_file
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with path.open("rb") as fp:
        data = tomllib.load(fp)

    logger.debug(f"Loaded configuration from {path}")
    return Config(data, config_file)
