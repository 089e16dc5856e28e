"""Diff-to-coverage reconciliation.

Intersects the lines a diff added (new-file numbering) with the lines the
coverage tool instrumented (absolute numbering of the same new file) and
aggregates the coverage percentage of new code.

Counting rules:
- A file absent from the coverage report contributes nothing (neither
  covered nor uncovered): docs, config, files excluded from instrumentation.
- An added line the report does not list (comment, blank line, declaration)
  was never measurable and is left out of the denominator.
- When nothing is countable the percentage is 100.0, so a PR without
  instrumented changes never fails on a signal it cannot produce.

The percentage is not rounded here; threshold comparisons use the exact value.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog

from prcoverage.coverage.models import CoverageReport
from prcoverage.diff.models import ModifiedLineSet

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CoverageResult:
    """Immutable outcome of one reconciliation."""

    coverage_percentage: float
    uncovered_by_file: Mapping[str, tuple[int, ...]] = field(default_factory=dict)
    total_countable: int = 0
    total_covered: int = 0
    files_touched: tuple[str, ...] = ()  # touched files present in the coverage report

    def __post_init__(self) -> None:
        frozen = {path: tuple(lines) for path, lines in self.uncovered_by_file.items()}
        object.__setattr__(self, "uncovered_by_file", MappingProxyType(frozen))

    @property
    def total_uncovered(self) -> int:
        return self.total_countable - self.total_covered

    @property
    def fully_covered_files(self) -> tuple[str, ...]:
        """Touched, instrumented files with no uncovered new lines."""
        return tuple(path for path in self.files_touched if path not in self.uncovered_by_file)


def reconcile(modified_lines: ModifiedLineSet, coverage: CoverageReport) -> CoverageResult:
    """Compute coverage of the added lines.

    Args:
        modified_lines: Added lines per file from the diff.
        coverage: Parsed coverage report keyed by the same repository-relative paths.

    Returns:
        A fresh CoverageResult; inputs are not modified.
    """
    total_countable = 0
    total_covered = 0
    uncovered_by_file: dict[str, tuple[int, ...]] = {}
    files_touched: list[str] = []
    skipped: list[str] = []

    for path in sorted(modified_lines):
        file_cov = coverage.get(path)
        if file_cov is None:
            skipped.append(path)
            continue

        files_touched.append(path)
        uncovered: list[int] = []
        for line in sorted(modified_lines.lines_for(path)):
            if not file_cov.is_instrumented(line):
                continue
            total_countable += 1
            if file_cov.is_covered(line):
                total_covered += 1
            else:
                uncovered.append(line)

        if uncovered:
            uncovered_by_file[path] = tuple(uncovered)

    if total_countable == 0:
        percentage = 100.0
    else:
        percentage = (total_covered / total_countable) * 100.0

    if skipped and not files_touched and coverage.files:
        # Usually a base_path mismatch: report paths never match the diff's
        log.warning(
            "diff_files_not_in_coverage",
            diff_files=skipped[:5],
            coverage_files=sorted(coverage.files)[:5],
        )

    log.debug(
        "reconciled",
        countable=total_countable,
        covered=total_covered,
        percentage=percentage,
        files_touched=len(files_touched),
        files_without_coverage=len(skipped),
    )

    return CoverageResult(
        coverage_percentage=percentage,
        uncovered_by_file=uncovered_by_file,
        total_countable=total_countable,
        total_covered=total_covered,
        files_touched=tuple(files_touched),
    )
