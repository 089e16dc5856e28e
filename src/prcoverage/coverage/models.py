"""Unified line-coverage data model.

File-centric model: every report format converts to a mapping of
repository-relative path -> {line number: hit count}. Only lines the
instrumentation tracked are present; a hit count of 0 means the line was
countable but never executed.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class FileCoverage:
    """Coverage data for a single file.

    Line numbers are 1-based to match source file conventions.
    """

    path: str  # repository-relative path
    lines: dict[int, int] = field(default_factory=dict)  # line_number → hit_count

    def record(self, line: int, hits: int) -> None:
        """Record a line, keeping the highest hit count for duplicates."""
        self.lines[line] = max(self.lines.get(line, 0), hits)

    def is_instrumented(self, line: int) -> bool:
        return line in self.lines

    def is_covered(self, line: int) -> bool:
        return self.lines.get(line, 0) > 0

    @property
    def lines_found(self) -> int:
        """Total number of instrumented lines."""
        return len(self.lines)

    @property
    def lines_hit(self) -> int:
        """Number of lines with at least one hit."""
        return sum(1 for hits in self.lines.values() if hits > 0)

    @property
    def line_rate(self) -> float:
        """Fraction of lines covered (0.0 to 1.0)."""
        if not self.lines:
            return 0.0
        return self.lines_hit / len(self.lines)

    @property
    def uncovered_lines(self) -> list[int]:
        """Sorted list of line numbers with zero hits."""
        return sorted(line for line, hits in self.lines.items() if hits == 0)


@dataclass(frozen=True, slots=True)
class CoverageSummary:
    """Aggregate coverage statistics across a whole report."""

    files: int
    lines_found: int
    lines_hit: int
    line_rate: float


@dataclass(slots=True)
class CoverageReport:
    """Complete line-coverage report.

    Files are keyed by repository-relative path.
    """

    source_format: str  # format id (e.g., "clover", "lcov")
    files: dict[str, FileCoverage] = field(default_factory=dict)  # path → coverage

    def get(self, path: str) -> FileCoverage | None:
        return self.files.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self.files

    @property
    def summary(self) -> CoverageSummary:
        """Compute aggregate summary across all files."""
        lines_found = sum(f.lines_found for f in self.files.values())
        lines_hit = sum(f.lines_hit for f in self.files.values())
        return CoverageSummary(
            files=len(self.files),
            lines_found=lines_found,
            lines_hit=lines_hit,
            line_rate=lines_hit / lines_found if lines_found > 0 else 0.0,
        )
