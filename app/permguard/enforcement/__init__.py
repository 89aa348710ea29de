"""Permission compliance scanning and enforcement.

This module provides the compliance scanner, the enforcer that applies the
target mode, the ignore-root test, and the reconciler that runs one
scan-then-fix pass over all watch roots.
"""

from permguard.enforcement.enforcer import Enforcer
from permguard.enforcement.ignore import is_ignored, matching_ignore_root
from permguard.enforcement.models import (
    ComplianceViolation,
    PassReport,
    PermissionActionResult,
    RootError,
)
from permguard.enforcement.reconciler import Reconciler
from permguard.enforcement.scanner import ComplianceScanner, ScanError

__all__ = [
    "ComplianceScanner",
    "ComplianceViolation",
    "Enforcer",
    "PassReport",
    "PermissionActionResult",
    "Reconciler",
    "RootError",
    "ScanError",
    "is_ignored",
    "matching_ignore_root",
]
