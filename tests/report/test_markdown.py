"""Tests for the markdown pull request comment."""

import pytest

from prcoverage.reconcile import CoverageResult
from prcoverage.report import build_markdown_report, compress_ranges, format_percentage

# =============================================================================
# Helpers
# =============================================================================


class TestCompressRanges:
    """Tests for compress_ranges helper."""

    @pytest.mark.parametrize(
        ("lines", "expected"),
        [
            ([], []),
            ([5], ["5"]),
            ([1, 2], ["1-2"]),
            ([1, 2, 3, 5, 7, 8, 9], ["1-3", "5", "7-9"]),
            ([1, 3, 5], ["1", "3", "5"]),
        ],
    )
    def test_ranges(self, lines: list[int], expected: list[str]) -> None:
        assert compress_ranges(lines) == expected


class TestFormatPercentage:
    def test_two_decimals(self) -> None:
        assert format_percentage(200 / 3) == "66.67%"
        assert format_percentage(100.0) == "100.00%"


# =============================================================================
# Report body
# =============================================================================


class TestBuildMarkdownReport:
    """Tests for build_markdown_report."""

    def test_uncovered_table_with_links(self) -> None:
        result = CoverageResult(
            coverage_percentage=200 / 3,
            uncovered_by_file={"src/Cart.php": (12, 15, 16, 17)},
            total_countable=12,
            total_covered=8,
            files_touched=("src/Cart.php", "src/Price.php"),
        )

        body = build_markdown_report(
            result,
            passed=False,
            link_builder=lambda path, line: f"https://host/{path}#L{line}",
        )

        assert body.startswith("## ❌ Coverage report\n")
        assert "**66.67%** (8 of 12 lines)" in body
        assert "| [src/Cart.php](https://host/src/Cart.php#L12) | 12, 15-17 |" in body
        assert "Fully covered: `src/Price.php`" in body

    def test_plain_paths_without_link_builder(self) -> None:
        result = CoverageResult(
            coverage_percentage=0.0,
            uncovered_by_file={"a|b.py": (1,)},
            total_countable=1,
            files_touched=("a|b.py",),
        )
        body = build_markdown_report(result, passed=False)
        assert "| a\\|b.py | 1 |" in body
        assert "Fully covered" not in body

    def test_all_covered(self) -> None:
        result = CoverageResult(
            coverage_percentage=100.0, total_countable=3, total_covered=3, files_touched=("a",)
        )
        body = build_markdown_report(result, passed=True, title="New code coverage")
        assert body.startswith("## ✅ New code coverage\n")
        assert "All new and modified lines are covered by tests." in body
        assert "| File |" not in body

    def test_nothing_countable(self) -> None:
        body = build_markdown_report(CoverageResult(coverage_percentage=100.0), passed=True)
        assert "No instrumented lines were added or modified" in body
        assert "100.00%" in body
