"""Core module exports."""

from prcoverage.core.errors import (
    ConfigError,
    ErrorCode,
    MalformedCoverageReportError,
    MalformedDiffError,
    PlatformApiError,
    PrCoverageError,
)
from prcoverage.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "MalformedCoverageReportError",
    "MalformedDiffError",
    "PlatformApiError",
    "PrCoverageError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
