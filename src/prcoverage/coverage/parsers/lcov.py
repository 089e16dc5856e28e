"""LCOV format parser.

LCOV format is a plain text format with records like:
- TN:<test name>
- SF:<source file path>
- DA:<line>,<hit count>[,<checksum>]
- LF:<lines found>
- LH:<lines hit>
- end_of_record

Branch and function records (BRDA, FN, FNDA, ...) are skipped; only line
coverage is modeled.

Used by: pytest-cov, cargo-llvm-cov, gcov, c8, dart test
"""

from prcoverage.core.errors import MalformedCoverageReportError
from prcoverage.coverage.models import CoverageReport, FileCoverage
from prcoverage.coverage.parsers.base import normalize_path, parse_count


class LcovParser:
    """Parser for LCOV format coverage files."""

    @property
    def format_id(self) -> str:
        return "lcov"

    def can_parse(self, document: str) -> bool:
        """Check if the first meaningful line is an LCOV record."""
        for line in document.splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            return stripped.startswith(("SF:", "TN:"))
        return False

    def parse(self, document: str, *, base_path: str | None = None) -> CoverageReport:
        """Parse LCOV text into CoverageReport."""
        files: dict[str, FileCoverage] = {}
        current_file: FileCoverage | None = None
        seen_source = False

        for lineno, line in enumerate(document.splitlines(), start=1):
            line = line.strip()
            if not line:
                continue

            if line.startswith("SF:"):
                file_path = normalize_path(line[3:], base_path)
                if not file_path:
                    raise MalformedCoverageReportError.invalid(
                        "lcov", f"empty SF record at line {lineno}"
                    )
                # The same file may appear in several records (one per test name)
                current_file = files.setdefault(file_path, FileCoverage(path=file_path))
                seen_source = True

            elif line.startswith("DA:"):
                if current_file is None:
                    raise MalformedCoverageReportError.invalid(
                        "lcov", f"DA record outside of an SF record at line {lineno}"
                    )
                parts = line[3:].split(",")
                if len(parts) < 2:
                    raise MalformedCoverageReportError.invalid(
                        "lcov", f"truncated DA record at line {lineno}"
                    )
                line_num = parse_count("lcov", parts[0], "line number")
                if line_num == 0:
                    raise MalformedCoverageReportError.invalid("lcov", "line number 0")
                # Some tools write '-' for lines that were never executed
                hits = 0 if parts[1] == "-" else parse_count("lcov", parts[1], "hit count")
                current_file.record(line_num, hits)

            elif line == "end_of_record":
                current_file = None

        if not seen_source:
            raise MalformedCoverageReportError.invalid("lcov", "no SF records found")

        return CoverageReport(source_format="lcov", files=files)
