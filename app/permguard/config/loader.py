"""Configuration file I/O.

Configuration is stored as TOML in ~/.config/permguard/config.toml. When no
file exists yet, a default one is written and used for the current run.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile

import tomli_w
from pydantic import ValidationError

from permguard.config.models import GuardConfig, get_default_config
from permguard.core.paths import get_config_path

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> GuardConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated GuardConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return GuardConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: GuardConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The GuardConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        # os.replace() is atomic on POSIX
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config {config_path}: {e}") from e

    return config_path


def load_or_create_config(path: Path | None = None) -> GuardConfig:
    """Load the configuration, writing the defaults first if none exists.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        The stored configuration, or the defaults on first run.

    Raises:
        ConfigError: If an existing file is invalid or the defaults cannot
            be written.
    """
    config_path = path or get_config_path()
    try:
        return load_config(config_path)
    except ConfigNotFoundError:
        default = get_default_config()
        save_config(default, config_path)
        logger.info("No configuration found, wrote defaults to %s", config_path)
        return default


def _config_to_dict(config: GuardConfig) -> dict[str, object]:
    """Convert GuardConfig to a dictionary for TOML serialization.

    Directory lists and the permission are always written; scheduling
    knobs only when they differ from their defaults.

    Args:
        config: The GuardConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    defaults = get_default_config()
    result: dict[str, object] = {
        "watch_dirs": list(config.watch_dirs),
        "ignore_dirs": list(config.ignore_dirs),
        "desired_permission": config.desired_permission,
    }

    if config.check_interval_seconds != defaults.check_interval_seconds:
        result["check_interval_seconds"] = config.check_interval_seconds

    if config.settle_ms != defaults.settle_ms:
        result["settle_ms"] = config.settle_ms

    if config.enforce_directories:
        result["enforce_directories"] = True

    return result


def require_config(path: Path | None = None) -> GuardConfig:
    """Load (or create) the configuration, or exit with a helpful error.

    This is a convenience wrapper around load_or_create_config() for CLI
    commands: configuration problems are fatal at startup.

    Args:
        path: Optional custom config path.

    Returns:
        Loaded and validated GuardConfig.

    Raises:
        typer.Exit: If the configuration cannot be loaded.
    """
    import typer

    from permguard.utils.formatting import print_error, print_info

    config_path = path or get_config_path()
    try:
        return load_or_create_config(config_path)
    except ConfigError as e:
        print_error(str(e))
        print_info(f"Fix or remove {config_path} and try again.")
        raise typer.Exit(code=1) from e
