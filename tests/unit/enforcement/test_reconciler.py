"""Tests for the Reconciler pass over all watch roots."""

import logging
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from permguard.config.models import GuardConfig
from permguard.enforcement.enforcer import Enforcer
from permguard.enforcement.models import ComplianceViolation
from permguard.enforcement.reconciler import Reconciler
from permguard.enforcement.scanner import ComplianceScanner


class TestReconciler:
    """Tests for Reconciler.run_pass."""

    def test_compliant_tree_changes_nothing(
        self,
        watch_root: Path,
        make_config: Callable[..., GuardConfig],
        mkfile: Callable[..., Path],
        mode_of: Callable[[Path], int],
    ) -> None:
        """A compliant file and an ignored off-target file produce no changes."""
        a = mkfile(watch_root / "a.txt", 0o644)
        b = mkfile(watch_root / "ignoreme" / "b.txt", 0o777)
        config = make_config(watch=[watch_root], ignore=[watch_root / "ignoreme"], mode="644")

        report = Reconciler(config).run_pass()

        assert report.violations == []
        assert report.results == []
        assert report.roots_scanned == [str(watch_root)]
        assert mode_of(a) == 0o644
        assert mode_of(b) == 0o777

    def test_fixes_drift_then_converges(
        self,
        watch_root: Path,
        make_config: Callable[..., GuardConfig],
        mkfile: Callable[..., Path],
        mode_of: Callable[[Path], int],
    ) -> None:
        """A drifted file is fixed and the next pass finds nothing."""
        c = mkfile(watch_root / "c.txt", 0o600)
        reconciler = Reconciler(make_config(watch=[watch_root], mode="644"))

        first = reconciler.run_pass()
        second = reconciler.run_pass()

        assert first.violations == [ComplianceViolation(path=str(c), mode=0o600)]
        assert first.fixed == 1
        assert mode_of(c) == 0o644
        assert second.violations == []
        assert second.results == []

    def test_multiple_roots_in_order(
        self,
        tmp_path: Path,
        make_config: Callable[..., GuardConfig],
        mkfile: Callable[..., Path],
    ) -> None:
        """Roots are processed in configuration order."""
        first = tmp_path / "one"
        second = tmp_path / "two"
        f1 = mkfile(first / "x", 0o600)
        f2 = mkfile(second / "y", 0o600)

        report = Reconciler(make_config(watch=[second, first])).run_pass()

        assert report.roots_scanned == [str(second), str(first)]
        assert [v.path for v in report.violations] == [str(f2), str(f1)]

    def test_failed_root_does_not_stop_pass(
        self,
        tmp_path: Path,
        watch_root: Path,
        make_config: Callable[..., GuardConfig],
        mkfile: Callable[..., Path],
        mode_of: Callable[[Path], int],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A missing root is reported and later roots are still processed."""
        missing = tmp_path / "missing"
        target = mkfile(watch_root / "c.txt", 0o600)

        with caplog.at_level(logging.WARNING, logger="permguard.enforcement.reconciler"):
            report = Reconciler(make_config(watch=[missing, watch_root])).run_pass()

        assert [e.root for e in report.root_errors] == [str(missing)]
        assert report.roots_scanned == [str(watch_root)]
        assert mode_of(target) == 0o644
        assert report.ok is False
        assert f"Error checking permissions in {missing}" in caplog.text

    def test_dry_run(
        self,
        watch_root: Path,
        make_config: Callable[..., GuardConfig],
        mkfile: Callable[..., Path],
        mode_of: Callable[[Path], int],
    ) -> None:
        """A dry-run pass reports violations without fixing them."""
        target = mkfile(watch_root / "c.txt", 0o600)

        report = Reconciler(make_config(watch=[watch_root]), dry_run=True).run_pass()

        assert len(report.violations) == 1
        assert report.results[0].dry_run is True
        assert mode_of(target) == 0o600

    def test_enforcer_skipped_without_violations(
        self, watch_root: Path, make_config: Callable[..., GuardConfig]
    ) -> None:
        """The enforcer is only called for roots with violations."""
        config = make_config(watch=[watch_root])
        enforcer = MagicMock(spec=Enforcer)

        Reconciler(config, enforcer=enforcer).run_pass()

        enforcer.apply.assert_not_called()

    def test_injected_scanner_used(
        self, watch_root: Path, make_config: Callable[..., GuardConfig]
    ) -> None:
        """Injected collaborators replace the defaults."""
        config = make_config(watch=[watch_root])
        violation = ComplianceViolation(path=str(watch_root / "v"), mode=0o600)
        scanner = MagicMock(spec=ComplianceScanner)
        scanner.scan.return_value = [violation]
        enforcer = MagicMock(spec=Enforcer)
        enforcer.apply.return_value = []

        report = Reconciler(config, scanner=scanner, enforcer=enforcer).run_pass()

        scanner.scan.assert_called_once_with(watch_root)
        enforcer.apply.assert_called_once_with([violation])
        assert report.violations == [violation]

    def test_no_roots(self, make_config: Callable[..., GuardConfig]) -> None:
        """A config without roots yields an empty, ok report."""
        report = Reconciler(make_config()).run_pass()

        assert report.roots_scanned == []
        assert report.ok is True
