"""Configuration module for foxgate."""

from foxgate.config.loader import get_config_path, load_config
from foxgate.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
