"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config() (CLI flags)
2. Environment variables (PRCOVERAGE__SECTION__KEY)
3. Repo YAML (.prcoverage.yaml, or the file passed with --config)
4. Global YAML (~/.config/prcoverage/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    PRCOVERAGE__<SECTION>__<KEY>=<VALUE>

Examples:
    PRCOVERAGE__LOGGING__LEVEL=DEBUG
    PRCOVERAGE__GATE__THRESHOLD=90
    PRCOVERAGE__PLATFORM__NAME=github
    PRCOVERAGE__PLATFORM__TOKEN=ghp_xxx
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
PlatformName = Literal["bitbucket", "github", "gitlab"]
CoverageFormat = Literal["clover", "cobertura", "lcov"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        PRCOVERAGE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every platform request.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class GateConfig(BaseModel):
    """Coverage gate configuration.

    Env vars:
        PRCOVERAGE__GATE__THRESHOLD: Minimum coverage of new code, exclusive
    """

    threshold: float = Field(
        default=80.0,
        description="Coverage of new/modified lines must be strictly greater than this.",
    )

    @field_validator("threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not (0.0 <= v <= 100.0):
            raise ValueError(f"Threshold must be 0-100, got {v}")
        return v


class ReportConfig(BaseModel):
    """Published check report configuration.

    The report's PASSED/FAILED tag uses its own threshold, compared with
    ``<=`` (FAILED), independently of the gate.
    """

    pass_threshold: float = Field(
        default=80.0,
        description="Reports at or below this percentage are tagged FAILED.",
    )
    title: str = Field(default="Coverage report")


class HttpConfig(BaseModel):
    """HTTP client configuration for platform calls.

    Env vars:
        PRCOVERAGE__HTTP__TIMEOUT_SEC: Per-request timeout in seconds
    """

    timeout_sec: float = Field(
        default=10.0,
        description="Timeout for every platform API request. Requests are never retried.",
    )

    @field_validator("timeout_sec")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v


class PlatformConfig(BaseModel):
    """Git hosting platform configuration.

    ``workspace`` is the Bitbucket workspace, the GitHub owner, or the GitLab
    namespace (group path).

    Env vars:
        PRCOVERAGE__PLATFORM__NAME: bitbucket | github | gitlab
        PRCOVERAGE__PLATFORM__WORKSPACE, PRCOVERAGE__PLATFORM__REPOSITORY
        PRCOVERAGE__PLATFORM__TOKEN: API token (never logged)
        PRCOVERAGE__PLATFORM__API_URL: Override for self-hosted instances
    """

    name: PlatformName | None = None
    workspace: str | None = None
    repository: str | None = None
    token: SecretStr | None = None
    api_url: str | None = None


class CoverageConfig(BaseModel):
    """Coverage report parsing configuration."""

    format: CoverageFormat | None = Field(
        default=None,
        description="Force a report format instead of content sniffing.",
    )
    base_path: str | None = Field(
        default=None,
        description=(
            "Prefix stripped from report paths (e.g. the CI checkout dir). "
            "prcov check uses the working directory when unset."
        ),
    )


class PrCoverageConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    gate: GateConfig = Field(default_factory=GateConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    platform: PlatformConfig = Field(default_factory=PlatformConfig)
    coverage: CoverageConfig = Field(default_factory=CoverageConfig)
