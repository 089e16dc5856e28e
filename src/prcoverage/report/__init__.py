"""Human-readable rendering of coverage results."""

from prcoverage.report.markdown import (
    LinkBuilder,
    build_markdown_report,
    compress_ranges,
    format_percentage,
)

__all__ = [
    "LinkBuilder",
    "build_markdown_report",
    "compress_ranges",
    "format_percentage",
]
