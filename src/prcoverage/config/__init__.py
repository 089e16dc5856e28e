"""Config module exports."""

from prcoverage.config.loader import load_config
from prcoverage.config.models import (
    CoverageConfig,
    GateConfig,
    HttpConfig,
    LoggingConfig,
    PlatformConfig,
    PrCoverageConfig,
    ReportConfig,
)

__all__ = [
    "load_config",
    "CoverageConfig",
    "GateConfig",
    "HttpConfig",
    "LoggingConfig",
    "PlatformConfig",
    "PrCoverageConfig",
    "ReportConfig",
]
