"""Line-coverage report parsing.

Usage:
    from prcoverage.coverage import parse_artifact

    report = parse_artifact(Path("build/clover.xml"), base_path="/builds/acme/shop")
    report.files["src/Cart.php"].lines  # {line_number: hit_count}

Supported formats:
    - clover: PHPUnit, kover
    - cobertura: coverage.py, coverlet (.NET)
    - lcov: pytest-cov, cargo-llvm-cov, c8, dart test
"""

from prcoverage.coverage.models import (
    CoverageReport,
    CoverageSummary,
    FileCoverage,
)
from prcoverage.coverage.parsers import (
    PARSER_BY_FORMAT,
    PARSER_REGISTRY,
    CoverageParser,
    detect_parser,
    parse_artifact,
    parse_document,
)

__all__ = [
    # Models
    "CoverageReport",
    "CoverageSummary",
    "FileCoverage",
    # Parsers
    "CoverageParser",
    "PARSER_BY_FORMAT",
    "PARSER_REGISTRY",
    "detect_parser",
    "parse_artifact",
    "parse_document",
]
