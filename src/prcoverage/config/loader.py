"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority), used for CLI flags
2. Environment variables (PRCOVERAGE__SECTION__KEY)
3. Repo config (.prcoverage.yaml) or an explicit --config file
4. Global config (~/.config/prcoverage/config.yaml)
5. Built-in defaults (lowest priority)
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from prcoverage.config.models import (
    CoverageConfig,
    GateConfig,
    HttpConfig,
    LoggingConfig,
    PlatformConfig,
    PrCoverageConfig,
    ReportConfig,
)
from prcoverage.core.errors import ConfigError

GLOBAL_CONFIG_PATH = Path("~/.config/prcoverage/config.yaml").expanduser()
REPO_CONFIG_NAME = ".prcoverage.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source."""

    class PrCoverageSettings(BaseSettings):
        """Root config. Env vars: PRCOVERAGE__GATE__THRESHOLD, PRCOVERAGE__PLATFORM__NAME, etc."""

        model_config = SettingsConfigDict(
            env_prefix="PRCOVERAGE__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        gate: GateConfig = GateConfig()
        report: ReportConfig = ReportConfig()
        http: HttpConfig = HttpConfig()
        platform: PlatformConfig = PlatformConfig()
        coverage: CoverageConfig = CoverageConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml files
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return PrCoverageSettings


def load_config(
    config_path: Path | None = None,
    *,
    repo_root: Path | None = None,
    **kwargs: Any,
) -> PrCoverageConfig:
    """Load config: defaults < global yaml < repo yaml < env vars < kwargs.

    Args:
        config_path: Explicit config file. Must exist when given.
        repo_root: Directory holding .prcoverage.yaml. Defaults to cwd.
        **kwargs: Per-section override dicts (highest precedence), e.g.
            ``gate={"threshold": 90.0}``.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On a missing explicit file, invalid YAML, or validation errors.
    """
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError.file_not_found(str(config_path))
        repo_config = _load_yaml(config_path)
    else:
        repo_config = _load_yaml((repo_root or Path.cwd()) / REPO_CONFIG_NAME)

    yaml_config = _deep_merge(_load_yaml(GLOBAL_CONFIG_PATH), repo_config)

    settings_cls = _make_settings_class(yaml_config)
    try:
        return settings_cls(**kwargs)  # type: ignore[return-value]
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
