"""Configuration module."""

from .settings import (
    Config,
    get_config,
    load_json_config,
    find_config_file,
)

__all__ = [
    "Config",
    "get_config",
    "load_json_config",
    "find_config_file",
]
