"""Ignore-root matching.

A path is ignored when it lies under (or is) one of the configured ignore
roots. Matching is done on whole path components, so an ignore root of
``/data/foo`` covers ``/data/foo/bar`` but not ``/data/foo2``. The test is
purely lexical and never touches the filesystem.
"""

from collections.abc import Iterable
from pathlib import PurePath


def is_ignored(path: str | PurePath, ignore_roots: Iterable[PurePath]) -> bool:
    """Check if a path lies under any ignore root.

    Both ``path`` and the roots are expected to be absolute and normalized
    (see :func:`permguard.core.paths.normalize_path`).

    Args:
        path: Filesystem path to check.
        ignore_roots: Ignore roots to match against.

    Returns:
        True if the path equals or is nested under an ignore root.
    """
    return matching_ignore_root(path, ignore_roots) is not None


def matching_ignore_root(
    path: str | PurePath, ignore_roots: Iterable[PurePath]
) -> PurePath | None:
    """Return the first ignore root covering ``path``, or None."""
    candidate = PurePath(path)
    for root in ignore_roots:
        if candidate.is_relative_to(root):
            return root
    return None
