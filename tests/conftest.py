"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from permguard.config.loader import save_config
from permguard.config.models import GuardConfig


@pytest.fixture
def make_config() -> Callable[..., GuardConfig]:
    """Factory for GuardConfig instances with test-friendly defaults."""

    def _make(
        watch: list[Path] | None = None,
        ignore: list[Path] | None = None,
        mode: str = "644",
        **kwargs: object,
    ) -> GuardConfig:
        return GuardConfig(
            watch_dirs=tuple(str(p) for p in (watch or [])),
            ignore_dirs=tuple(str(p) for p in (ignore or [])),
            desired_permission=mode,
            **kwargs,
        )

    return _make


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[GuardConfig], Path]:
    """Write a GuardConfig to a TOML file under tmp_path and return its path."""

    def _write(config: GuardConfig) -> Path:
        return save_config(config, tmp_path / "cfg" / "config.toml")

    return _write


@pytest.fixture
def watch_root(tmp_path: Path) -> Path:
    """An empty watch directory."""
    root = tmp_path / "watch"
    root.mkdir()
    return root


@pytest.fixture
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at a temporary directory."""
    home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    return home


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Restore root logger handlers and level after a test reconfigures them."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    watchdog_level = logging.getLogger("watchdog").level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("watchdog").setLevel(watchdog_level)


def make_file(path: Path, mode: int, content: str = "content") -> Path:
    """Create a file (and parents) with an exact permission mode."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    os.chmod(path, mode)
    return path


def file_mode(path: Path) -> int:
    """Return the low 9 permission bits of a path."""
    return path.stat().st_mode & 0o777


@pytest.fixture
def mkfile() -> Callable[..., Path]:
    """Expose make_file as a fixture."""
    return make_file


@pytest.fixture
def mode_of() -> Callable[[Path], int]:
    """Expose file_mode as a fixture."""
    return file_mode
