"""Config file location and path normalization.

The config file lives at ``$XDG_CONFIG_HOME/permguard/config.toml``, falling
back to ``~/.config/permguard/config.toml``. Watch and ignore roots are
compared as absolute, lexically normalized paths.
"""

import os
from pathlib import Path

APP_NAME = "permguard"
CONFIG_FILENAME = "config.toml"


def get_config_dir() -> Path:
    """Return the per-user config directory (not created)."""
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME", "").strip()
    base = Path(xdg_config_home) if xdg_config_home else Path.home() / ".config"
    return base / APP_NAME


def get_config_path() -> Path:
    """Return the default config file path."""
    return get_config_dir() / CONFIG_FILENAME


def normalize_path(path: str | Path) -> Path:
    """Make a path absolute and lexically normalized without touching the disk.

    ``~`` is expanded and relative paths are resolved against the current
    working directory. Symlinks are not resolved, so ``./a/../b`` becomes
    ``<cwd>/b`` even if ``a`` is a link.

    Args:
        path: Relative or absolute path.

    Returns:
        Absolute, normalized path.
    """
    return Path(os.path.abspath(os.path.expanduser(os.fspath(path))))
