"""Reconciliation pass: scan every watch root, then fix what drifted.

A failure confined to one root (its scan cannot start) is logged and the
pass moves on to the next root. There are no retries within a pass; the
next scheduled or change-triggered pass re-scans naturally.
"""

import logging

from permguard.config.models import GuardConfig
from permguard.enforcement.enforcer import Enforcer
from permguard.enforcement.models import PassReport, RootError
from permguard.enforcement.scanner import ComplianceScanner, ScanError

logger = logging.getLogger(__name__)


class Reconciler:
    """Runs one scan-then-fix pass over all configured watch roots.

    Args:
        config: Daemon configuration.
        scanner: Optional scanner override (defaults to one built from config).
        enforcer: Optional enforcer override (defaults to one built from config).
        dry_run: Build the default enforcer in dry-run mode.
    """

    def __init__(
        self,
        config: GuardConfig,
        *,
        scanner: ComplianceScanner | None = None,
        enforcer: Enforcer | None = None,
        dry_run: bool = False,
    ) -> None:
        self._config = config
        self._scanner = scanner if scanner is not None else ComplianceScanner(config)
        self._enforcer = enforcer if enforcer is not None else Enforcer(config, dry_run=dry_run)

    def run_pass(self) -> PassReport:
        """Scan and fix every watch root in configuration order.

        Returns:
            PassReport summarizing the pass.
        """
        report = PassReport()

        for root in self._config.watch_roots:
            root_str = str(root)
            try:
                violations = self._scanner.scan(root)
            except ScanError as e:
                logger.warning("Error checking permissions in %s: %s", root_str, e)
                report.root_errors.append(RootError(root=root_str, error=str(e)))
                continue

            report.roots_scanned.append(root_str)
            if not violations:
                continue

            report.violations.extend(violations)
            report.results.extend(self._enforcer.apply(violations))

        logger.info(
            "Pass complete: %d root(s) scanned, %d violation(s), %d fixed, %d failed",
            len(report.roots_scanned),
            len(report.violations),
            report.fixed,
            report.failed,
        )
        return report
