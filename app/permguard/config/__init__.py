"""Daemon configuration: model and TOML persistence."""

from permguard.config.loader import (
    ConfigError,
    ConfigNotFoundError,
    ConfigParseError,
    load_config,
    load_or_create_config,
    require_config,
    save_config,
)
from permguard.config.models import GuardConfig, get_default_config, parse_mode

__all__ = [
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "GuardConfig",
    "get_default_config",
    "load_config",
    "load_or_create_config",
    "parse_mode",
    "require_config",
    "save_config",
]
