"""Permission enforcer.

Applies the target mode to paths reported by the compliance scanner.
Changes are best-effort: one failing path never stops the rest of the
batch, and failures are reported per path rather than raised.
"""

import logging
import os
from collections.abc import Iterable

from permguard.config.models import GuardConfig
from permguard.enforcement.models import ComplianceViolation, PermissionActionResult

logger = logging.getLogger(__name__)


class Enforcer:
    """Sets the permission bits of non-compliant paths to the target mode.

    The mode is overwritten, never merged: a path at ``755`` with a target
    of ``644`` ends up at exactly ``644``. Applying the same batch twice is
    a no-op the second time.

    Attributes:
        _target_mode: Mode applied to every path.
        _dry_run: If True, report what would change without touching anything.
    """

    def __init__(self, config: GuardConfig, dry_run: bool = False) -> None:
        """Initialize the Enforcer.

        Args:
            config: Daemon configuration providing the target mode.
            dry_run: If True, report what would change without changing it.
        """
        self._target_mode = config.target_mode
        self._dry_run = dry_run

    @property
    def target_mode(self) -> int:
        """Target permission mode (low 9 bits)."""
        return self._target_mode

    def apply(self, violations: Iterable[ComplianceViolation]) -> list[PermissionActionResult]:
        """Apply the target mode to every violating path.

        Failures are logged and returned as unsuccessful results; this
        method does not raise for partial or total failure.

        Args:
            violations: Paths to fix, as reported by the scanner.

        Returns:
            List of PermissionActionResult, one per violation.
        """
        results = [self._apply_single(v) for v in violations]

        failed = sum(1 for r in results if not r.success)
        if failed:
            logger.warning("%d of %d permission change(s) failed", failed, len(results))

        return results

    def _apply_single(self, violation: ComplianceViolation) -> PermissionActionResult:
        """Change the mode of a single path.

        Args:
            violation: Path and observed mode.

        Returns:
            PermissionActionResult indicating success or failure.
        """
        if self._dry_run:
            logger.info(
                "Dry-run: would change permissions of %s from %03o to %03o",
                violation.path,
                violation.mode,
                self._target_mode,
            )
            return PermissionActionResult(
                path=violation.path,
                success=True,
                old_mode=violation.mode,
                new_mode=self._target_mode,
                dry_run=True,
            )

        try:
            os.chmod(violation.path, self._target_mode)
        except OSError as e:
            logger.warning("Failed to change permissions of %s: %s", violation.path, e)
            return PermissionActionResult(
                path=violation.path,
                success=False,
                old_mode=violation.mode,
                new_mode=self._target_mode,
                error=str(e),
            )

        logger.info(
            "Changed permissions of %s from %03o to %03o",
            violation.path,
            violation.mode,
            self._target_mode,
        )
        return PermissionActionResult(
            path=violation.path,
            success=True,
            old_mode=violation.mode,
            new_mode=self._target_mode,
        )
