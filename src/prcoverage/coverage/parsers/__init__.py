"""Coverage parser registry and auto-detection.

This module provides:
- PARSER_REGISTRY: All available parsers
- detect_parser: Auto-detect format from document content
- parse_document / parse_artifact: Parse with optional forced format
"""

from collections.abc import Sequence
from pathlib import Path

from prcoverage.core.errors import MalformedCoverageReportError
from prcoverage.coverage.models import CoverageReport

from .base import CoverageParser
from .clover import CloverParser
from .cobertura import CoberturaParser
from .lcov import LcovParser

# Parser registry - order matters for detection priority
# More specific formats first, generic ones last
PARSER_REGISTRY: Sequence[CoverageParser] = (
    CloverParser(),  # PHP/Kotlin <coverage generated=...> XML
    CoberturaParser(),  # Generic <coverage line-rate=...> XML
    LcovParser(),  # LCOV text
)

# Format ID to parser mapping
PARSER_BY_FORMAT: dict[str, CoverageParser] = {p.format_id: p for p in PARSER_REGISTRY}

__all__ = [
    "PARSER_REGISTRY",
    "PARSER_BY_FORMAT",
    "detect_parser",
    "parse_artifact",
    "parse_document",
    "CoverageParser",
    "CloverParser",
    "CoberturaParser",
    "LcovParser",
]


def detect_parser(document: str) -> CoverageParser | None:
    """Return the first parser in registry order that claims the document."""
    for parser in PARSER_REGISTRY:
        if parser.can_parse(document):
            return parser
    return None


def parse_document(
    document: str,
    *,
    format_id: str | None = None,
    base_path: str | None = None,
) -> CoverageReport:
    """Parse a coverage document into a unified CoverageReport.

    Args:
        document: Report content (XML or LCOV text).
        format_id: Force specific format (skip auto-detection).
        base_path: Prefix stripped from file paths within the report.

    Raises:
        MalformedCoverageReportError: If the format is unknown or parsing fails.
    """
    if not document.strip():
        raise MalformedCoverageReportError.invalid(format_id or "unknown", "document is empty")

    if format_id:
        parser = PARSER_BY_FORMAT.get(format_id)
        if not parser:
            valid = ", ".join(sorted(PARSER_BY_FORMAT.keys()))
            raise MalformedCoverageReportError.invalid(
                format_id, f"unknown coverage format. Valid formats: {valid}"
            )
    else:
        parser = detect_parser(document)
        if not parser:
            raise MalformedCoverageReportError.invalid(
                "unknown",
                "could not detect coverage format. Supported formats: clover, cobertura, lcov",
            )

    return parser.parse(document, base_path=base_path)


def parse_artifact(
    path: Path,
    *,
    format_id: str | None = None,
    base_path: str | None = None,
) -> CoverageReport:
    """Read a coverage file from disk and parse it."""
    try:
        document = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedCoverageReportError.invalid(
            format_id or "unknown", f"cannot read {path}: {e}"
        ) from e
    return parse_document(document, format_id=format_id, base_path=base_path)
