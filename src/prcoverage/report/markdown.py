"""Markdown coverage comment.

Example output::

    ## ❌ Coverage report

    Coverage of new/modified code: **66.67%** (2 of 3 lines)

    | File | Uncovered lines |
    | --- | --- |
    | [src/Cart.php](https://.../src/Cart.php#lines-12) | 12, 15-17 |
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from prcoverage.reconcile import CoverageResult

LinkBuilder = Callable[[str, int], str]


def format_percentage(percentage: float) -> str:
    """Two decimals, for display only (gate comparisons use the raw value)."""
    return f"{percentage:.2f}%"


def compress_ranges(lines: Sequence[int]) -> list[str]:
    """Collapse sorted line numbers into ``["1-3", "5", "7-9"]``."""
    ranges: list[str] = []
    if not lines:
        return ranges

    start = prev = lines[0]
    for line in lines[1:]:
        if line == prev + 1:
            prev = line
            continue
        ranges.append(f"{start}-{prev}" if prev != start else str(start))
        start = prev = line
    ranges.append(f"{start}-{prev}" if prev != start else str(start))
    return ranges


def _escape(text: str) -> str:
    return text.replace("|", "\\|")


def build_markdown_report(
    result: CoverageResult,
    *,
    passed: bool,
    title: str = "Coverage report",
    link_builder: LinkBuilder | None = None,
) -> str:
    """Render the comment body for a pull request.

    Args:
        result: Reconciliation result.
        passed: Whether the report is tagged as passing; picks the heading icon.
        title: Heading text.
        link_builder: ``(path, line) -> url`` for the platform's source view at
            the head commit. Plain text when None.
    """
    icon = "✅" if passed else "❌"
    lines = [f"## {icon} {title}", ""]

    if result.total_countable == 0:
        lines.append(
            "No instrumented lines were added or modified; "
            f"coverage of new code is {format_percentage(result.coverage_percentage)}."
        )
        return "\n".join(lines) + "\n"

    lines.append(
        f"Coverage of new/modified code: **{format_percentage(result.coverage_percentage)}** "
        f"({result.total_covered} of {result.total_countable} lines)"
    )
    lines.append("")

    if not result.uncovered_by_file:
        lines.append("All new and modified lines are covered by tests.")
        return "\n".join(lines) + "\n"

    lines.append("| File | Uncovered lines |")
    lines.append("| --- | --- |")
    for path, uncovered in result.uncovered_by_file.items():
        first = uncovered[0]
        name = _escape(path)
        file_cell = f"[{name}]({link_builder(path, first)})" if link_builder else name
        lines.append(f"| {file_cell} | {', '.join(compress_ranges(uncovered))} |")

    if result.fully_covered_files:
        lines.append("")
        covered = ", ".join(f"`{p}`" for p in result.fully_covered_files)
        lines.append(f"Fully covered: {covered}")

    return "\n".join(lines) + "\n"
