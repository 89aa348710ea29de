"""Enforcement domain models.

This module defines the data structures passed between the compliance
scanner, the enforcer and the reconciler within one reconciliation pass.
None of them are persisted.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class ComplianceViolation:
    """A path whose permission bits differ from the target mode.

    Attributes:
        path: Absolute filesystem path.
        mode: Currently observed permission bits (low 9 bits).
    """

    path: str
    mode: int

    def __post_init__(self) -> None:
        """Validate violation data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if not (0 <= self.mode <= 0o777):
            msg = f"Mode must be a 9-bit permission value, got {self.mode:o}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class PermissionActionResult:
    """Result of a single permission change.

    Attributes:
        path: Absolute path that was operated on.
        success: Whether the change completed successfully.
        old_mode: Mode observed by the scan.
        new_mode: Mode that was (or would have been) applied.
        error: Error message if the change failed, None otherwise.
        dry_run: Whether this was a dry-run (no actual change).
    """

    path: str
    success: bool
    old_mode: int
    new_mode: int
    error: str | None = None
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class RootError:
    """A watch root whose scan failed as a whole.

    Attributes:
        root: The watch root.
        error: Human-readable cause.
    """

    root: str
    error: str


@dataclass(slots=True)
class PassReport:
    """Summary of one reconciliation pass across all watch roots.

    Attributes:
        roots_scanned: Roots whose scan completed.
        violations: All violations found, across roots.
        results: Enforcer results, one per violation.
        root_errors: Roots whose scan failed.
    """

    roots_scanned: list[str] = field(default_factory=list)
    violations: list[ComplianceViolation] = field(default_factory=list)
    results: list[PermissionActionResult] = field(default_factory=list)
    root_errors: list[RootError] = field(default_factory=list)

    @property
    def fixed(self) -> int:
        """Number of paths whose mode was changed (or would be, in dry-run)."""
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        """Number of paths whose mode change failed."""
        return sum(1 for r in self.results if not r.success)

    @property
    def ok(self) -> bool:
        """True when no root and no path failed."""
        return not self.root_errors and self.failed == 0
