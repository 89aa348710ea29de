"""Unit tests for CLI formatting helpers."""

import pytest
from permguard.enforcement.models import PermissionActionResult
from permguard.utils.formatting import create_violation_table, format_mode, format_result_row


class TestFormatMode:
    """Tests for format_mode."""

    @pytest.mark.parametrize(
        ("mode", "expected"),
        [(0o644, "644"), (0o7, "007"), (0o100755, "755"), (0, "000")],
    )
    def test_three_octal_digits(self, mode: int, expected: str) -> None:
        """Modes render as three zero-padded octal digits."""
        assert format_mode(mode) == expected


class TestFormatResultRow:
    """Tests for format_result_row."""

    def test_dry_run(self) -> None:
        """Dry-run results show as 'would fix'."""
        result = PermissionActionResult(
            path="/data/a.txt", success=True, old_mode=0o600, new_mode=0o644, dry_run=True
        )

        path, old, new, outcome = format_result_row(result)

        assert path == "/data/a.txt"
        assert "600" in old
        assert "644" in new
        assert "would fix" in outcome

    def test_failure_escapes_markup(self) -> None:
        """Paths and errors with brackets are escaped for Rich."""
        result = PermissionActionResult(
            path="/data/[x].txt",
            success=False,
            old_mode=0o600,
            new_mode=0o644,
            error="[Errno 1] Operation not permitted: '/data/[x].txt'",
        )

        path, _, _, outcome = format_result_row(result)

        assert path == "/data/\\[x].txt"
        assert "Operation not permitted: '/data/\\[x].txt'" in outcome


def test_violation_table_columns() -> None:
    """The violation table has path, mode, target and result columns."""
    table = create_violation_table("Title")

    assert [c.header for c in table.columns] == ["Path", "Mode", "Target", "Result"]
