"""prcoverage error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Input (diff / coverage report)
- 4xxx: Platform API
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # Input (3xxx)
    MALFORMED_DIFF = 3001
    MALFORMED_COVERAGE_REPORT = 3002

    # Platform (4xxx)
    PLATFORM_API_ERROR = 4001


@dataclass(frozen=True, slots=True)
class PrCoverageError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'MALFORMED_DIFF')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(PrCoverageError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class MalformedDiffError(PrCoverageError):
    """The diff text is not well-formed unified-diff syntax."""

    @classmethod
    def at_line(cls, lineno: int, reason: str) -> "MalformedDiffError":
        return cls(
            code=ErrorCode.MALFORMED_DIFF,
            message=f"Malformed diff at line {lineno}: {reason}",
            details={"line": lineno, "reason": reason},
        )


class MalformedCoverageReportError(PrCoverageError):
    """The coverage document lacks required structure."""

    @classmethod
    def invalid(cls, source_format: str, reason: str) -> "MalformedCoverageReportError":
        return cls(
            code=ErrorCode.MALFORMED_COVERAGE_REPORT,
            message=f"Malformed {source_format} coverage report: {reason}",
            details={"format": source_format, "reason": reason},
        )


class PlatformApiError(PrCoverageError):
    """Non-2xx response (or transport failure) from the hosting platform.

    ``status_code`` is 0 when no HTTP response was received.
    """

    @classmethod
    def from_response(cls, status_code: int, message: str, **details: Any) -> "PlatformApiError":
        return cls(
            code=ErrorCode.PLATFORM_API_ERROR,
            message=f"({status_code}) {message}",
            details={"status_code": status_code, **details},
        )

    @property
    def status_code(self) -> int:
        return int(self.details.get("status_code", 0))
