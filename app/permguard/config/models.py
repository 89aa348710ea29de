"""Daemon configuration model.

The configuration is a frozen snapshot: it is loaded once at startup and
shared read-only between the scanner, the enforcer and the scheduler.
"""

import re
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from permguard.core.paths import normalize_path

# Accepts "644", "0644" and "0o644"
_OCTAL_MODE_RE = re.compile(r"^(?:0o|0)?([0-7]{3})$")

DEFAULT_WATCH_DIRS: tuple[str, ...] = ("./testdir",)
DEFAULT_IGNORE_DIRS: tuple[str, ...] = ("./testdir/ignoreme",)
DEFAULT_PERMISSION = "777"
DEFAULT_INTERVAL_SECONDS = 3600
DEFAULT_SETTLE_MS = 100


def parse_mode(value: str) -> int:
    """Parse an octal permission string into a 9-bit mode.

    Args:
        value: Octal digits such as ``"644"``, ``"0644"`` or ``"0o644"``.

    Returns:
        Integer permission mode in the range 0..0o777.

    Raises:
        ValueError: If the string is not a 3-digit octal permission triple.
    """
    match = _OCTAL_MODE_RE.match(value.strip())
    if match is None:
        msg = f"Permission must be three octal digits (e.g. '644'), got {value!r}"
        raise ValueError(msg)
    return int(match.group(1), 8)


class GuardConfig(BaseModel):
    """Configuration for the permission enforcement daemon.

    Attributes:
        watch_dirs: Directory trees whose permissions are enforced.
        ignore_dirs: Directory trees excluded from enforcement, even when
            nested under a watch directory.
        desired_permission: Target mode as octal digits (e.g. "644").
        check_interval_seconds: Period of the scheduled full check.
        settle_ms: Debounce window after a filesystem change notification.
        enforce_directories: Also enforce the mode on directories (including
            the watch roots). Off by default, since a file mode such as
            644 makes a directory untraversable.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    watch_dirs: Annotated[
        tuple[str, ...],
        Field(description="Directories to watch and enforce"),
    ] = DEFAULT_WATCH_DIRS
    ignore_dirs: Annotated[
        tuple[str, ...],
        Field(description="Directories excluded from enforcement"),
    ] = DEFAULT_IGNORE_DIRS
    desired_permission: Annotated[
        str,
        Field(description="Target permission as octal digits"),
    ] = DEFAULT_PERMISSION
    check_interval_seconds: Annotated[
        int,
        Field(ge=1, description="Seconds between scheduled checks"),
    ] = DEFAULT_INTERVAL_SECONDS
    settle_ms: Annotated[
        int,
        Field(ge=0, le=60_000, description="Debounce window in milliseconds"),
    ] = DEFAULT_SETTLE_MS
    enforce_directories: Annotated[
        bool,
        Field(description="Also apply the target mode to directories"),
    ] = False

    @field_validator("desired_permission")
    @classmethod
    def validate_permission(cls, v: str) -> str:
        """Reject anything that is not an octal permission triple."""
        parse_mode(v)
        return v.strip()

    @field_validator("watch_dirs", "ignore_dirs")
    @classmethod
    def validate_dirs(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject empty directory entries."""
        for entry in v:
            if not entry.strip():
                msg = "Directory entries cannot be empty"
                raise ValueError(msg)
        return v

    @property
    def target_mode(self) -> int:
        """Target permission mode, masked to the low 9 bits."""
        return parse_mode(self.desired_permission) & 0o777

    @property
    def watch_roots(self) -> tuple[Path, ...]:
        """Watch directories as absolute, normalized paths."""
        return tuple(normalize_path(d) for d in self.watch_dirs)

    @property
    def ignore_roots(self) -> tuple[Path, ...]:
        """Ignore directories as absolute, normalized paths."""
        return tuple(normalize_path(d) for d in self.ignore_dirs)

    @property
    def check_interval(self) -> float:
        """Scheduled check period in seconds."""
        return float(self.check_interval_seconds)

    @property
    def settle_window(self) -> float:
        """Debounce window in seconds."""
        return self.settle_ms / 1000.0


def get_default_config() -> GuardConfig:
    """Create a default GuardConfig.

    Returns:
        GuardConfig with default settings.
    """
    return GuardConfig()
