"""Compliance scanner for permission drift.

Walks a watch root recursively, following symbolic links, and reports every
file whose permission bits differ from the configured target mode. Paths
under an ignore root are skipped before any metadata is read, and ignored
directories are not descended into.
"""

import logging
import os
import stat
from pathlib import Path

from permguard.config.models import GuardConfig
from permguard.core.paths import normalize_path
from permguard.enforcement.ignore import matching_ignore_root
from permguard.enforcement.models import ComplianceViolation

logger = logging.getLogger(__name__)


class ScanError(Exception):
    """Raised when a watch root cannot be read at all.

    Attributes:
        root: The watch root that failed.
    """

    def __init__(self, root: str, cause: OSError) -> None:
        self.root = root
        super().__init__(f"Cannot scan {root}: {cause.strerror or cause}")


class ComplianceScanner:
    """Finds paths whose permission bits differ from the target mode.

    The scanner is purely observational; it never changes the filesystem.

    Args:
        config: Daemon configuration providing the target mode and
            ignore roots.
    """

    def __init__(self, config: GuardConfig) -> None:
        self._target_mode = config.target_mode
        self._ignore_roots = config.ignore_roots
        self._enforce_directories = config.enforce_directories

    @property
    def target_mode(self) -> int:
        """Target permission mode (low 9 bits)."""
        return self._target_mode

    def scan(self, root: str | Path) -> list[ComplianceViolation]:
        """Scan a watch root and return all permission violations.

        Every non-directory entry below the root is checked; directories
        (the root included) only when ``enforce_directories`` is set. The
        root may also be a single file. Symbolic links are followed; a
        directory reached twice (e.g. through a link loop) is only
        descended into once.

        Args:
            root: Watch root to scan.

        Returns:
            Violations in traversal order.

        Raises:
            ScanError: If the root itself cannot be stat'ed or listed.
        """
        root_path = normalize_path(root)
        root_str = str(root_path)

        if self._is_ignored(root_str):
            return []

        try:
            root_stat = root_path.stat()
            root_entries = self._list_dir(root_str) if stat.S_ISDIR(root_stat.st_mode) else []
        except OSError as e:
            raise ScanError(root_str, e) from e

        violations: list[ComplianceViolation] = []
        self._check(root_str, root_stat.st_mode, violations)

        visited: set[tuple[int, int]] = {(root_stat.st_dev, root_stat.st_ino)}
        stack = list(reversed(root_entries))

        while stack:
            entry = stack.pop()

            # Ignore test comes first: no metadata I/O for ignored paths
            if self._is_ignored(entry.path):
                continue

            try:
                st = entry.stat()
            except OSError as e:
                logger.warning("Cannot read permissions of %s: %s", entry.path, e)
                continue

            self._check(entry.path, st.st_mode, violations)

            if not stat.S_ISDIR(st.st_mode):
                continue

            key = (st.st_dev, st.st_ino)
            if key in visited:
                logger.debug("Already visited %s, not descending", entry.path)
                continue
            visited.add(key)

            try:
                children = self._list_dir(entry.path)
            except OSError as e:
                logger.warning("Cannot list directory %s: %s", entry.path, e)
                continue
            stack.extend(reversed(children))

        logger.debug("Scanned %s: %d violation(s)", root_str, len(violations))
        return violations

    def is_compliant(self, mode: int) -> bool:
        """Check a raw ``st_mode`` against the target mode."""
        return (mode & 0o777) == self._target_mode

    def _check(self, path: str, mode: int, violations: list[ComplianceViolation]) -> None:
        """Record a violation for ``path`` if its mode is off target."""
        if stat.S_ISDIR(mode) and not self._enforce_directories:
            return
        if self.is_compliant(mode):
            return
        violations.append(ComplianceViolation(path=path, mode=mode & 0o777))
        logger.debug("Violation: %s has mode %03o", path, mode & 0o777)

    def _is_ignored(self, path: str) -> bool:
        """Check a path against the ignore roots, logging the match."""
        root = matching_ignore_root(path, self._ignore_roots)
        if root is None:
            return False
        logger.debug("Ignoring %s because it is in the ignored directory %s", path, root)
        return True

    @staticmethod
    def _list_dir(path: str) -> list[os.DirEntry[str]]:
        """List a directory, sorted by name for a stable traversal order."""
        with os.scandir(path) as it:
            return sorted(it, key=lambda e: e.name)
