"""Coverage parser protocol and shared helpers."""

import contextlib
from pathlib import PurePosixPath
from typing import Protocol

from prcoverage.core.errors import MalformedCoverageReportError
from prcoverage.coverage.models import CoverageReport


class CoverageParser(Protocol):
    """Protocol for coverage format parsers.

    Each parser handles one coverage format and converts it to the
    unified CoverageReport model.
    """

    @property
    def format_id(self) -> str:
        """Format identifier (e.g., 'clover', 'lcov')."""
        ...

    def can_parse(self, document: str) -> bool:
        """Check if this parser can handle the given document.

        Uses content sniffing on the first couple of kilobytes.
        """
        ...

    def parse(self, document: str, *, base_path: str | None = None) -> CoverageReport:
        """Parse a coverage document into the unified model.

        Args:
            document: Full report content.
            base_path: Prefix to strip so paths become repository-relative.
                      If None, paths in coverage data are used as-is.

        Raises:
            MalformedCoverageReportError: If required structure is missing.
        """
        ...


def normalize_path(raw_path: str, base_path: str | None) -> str:
    """Forward slashes, no leading ``./``, relative to ``base_path`` when under it."""
    path = raw_path.strip().replace("\\", "/")
    if base_path:
        base = base_path.replace("\\", "/")
        # Path not under base_path -> use as-is
        with contextlib.suppress(ValueError):
            path = str(PurePosixPath(path).relative_to(base))
    while path.startswith("./"):
        path = path[2:]
    return path


def parse_count(source_format: str, value: str | None, what: str) -> int:
    """Parse a non-negative integer attribute/field or fail the whole report."""
    if value is None:
        raise MalformedCoverageReportError.invalid(source_format, f"missing {what}")
    try:
        number = int(value)
    except ValueError:
        raise MalformedCoverageReportError.invalid(
            source_format, f"{what} is not an integer: {value!r}"
        ) from None
    if number < 0:
        raise MalformedCoverageReportError.invalid(source_format, f"negative {what}: {number}")
    return number
