"""Tests for config/loader.py module.

Covers:
- _load_yaml() function
- _deep_merge() function
- load_config() precedence: yaml < env < kwargs
- GLOBAL_CONFIG_PATH constant
"""

from __future__ import annotations

from pathlib import Path

import pytest

from prcoverage.config.loader import (
    GLOBAL_CONFIG_PATH,
    REPO_CONFIG_NAME,
    _deep_merge,
    _load_yaml,
    load_config,
)
from prcoverage.core.errors import ConfigError, ErrorCode


class TestLoadYaml:
    """Tests for _load_yaml function."""

    def test_returns_empty_dict_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_yaml(tmp_path / "nonexistent.yaml") == {}

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text("gate:\n  threshold: 90\n")
        assert _load_yaml(yaml_file) == {"gate": {"threshold": 90}}

    def test_returns_empty_for_empty_file(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")
        assert _load_yaml(yaml_file) == {}

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("gate: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            _load_yaml(yaml_file)
        assert exc_info.value.code == ErrorCode.CONFIG_PARSE_ERROR

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "list.yaml"
        yaml_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            _load_yaml(yaml_file)


class TestDeepMerge:
    """Tests for _deep_merge function."""

    def test_nested_merge(self) -> None:
        base = {"platform": {"name": "github", "workspace": "acme"}}
        override = {"platform": {"workspace": "other"}}
        assert _deep_merge(base, override) == {
            "platform": {"name": "github", "workspace": "other"}
        }

    def test_does_not_mutate_base(self) -> None:
        base = {"gate": {"threshold": 70}}
        _deep_merge(base, {"gate": {"threshold": 90}})
        assert base == {"gate": {"threshold": 70}}


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults_when_no_files(self, tmp_path: Path) -> None:
        config = load_config(repo_root=tmp_path)
        assert config.gate.threshold == 80.0
        assert config.logging.level == "INFO"

    def test_loads_repo_config(self, tmp_path: Path) -> None:
        (tmp_path / REPO_CONFIG_NAME).write_text(
            "gate:\n  threshold: 90\nplatform:\n  name: bitbucket\n  workspace: acme\n"
        )
        config = load_config(repo_root=tmp_path)
        assert config.gate.threshold == 90.0
        assert config.platform.name == "bitbucket"
        assert config.platform.workspace == "acme"

    def test_global_config_is_lowest_yaml_layer(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        global_file = tmp_path / "global.yaml"
        global_file.write_text("gate:\n  threshold: 50\nhttp:\n  timeout_sec: 3\n")
        monkeypatch.setattr("prcoverage.config.loader.GLOBAL_CONFIG_PATH", global_file)
        (tmp_path / REPO_CONFIG_NAME).write_text("gate:\n  threshold: 60\n")

        config = load_config(repo_root=tmp_path)

        assert config.gate.threshold == 60.0
        assert config.http.timeout_sec == 3.0

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "ci.yaml"
        custom.write_text("coverage:\n  format: lcov\n")
        assert load_config(custom).coverage.format == "lcov"

    def test_explicit_config_path_must_exist(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "missing.yaml")
        assert exc_info.value.code == ErrorCode.CONFIG_FILE_NOT_FOUND

    def test_env_vars_override_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / REPO_CONFIG_NAME).write_text("gate:\n  threshold: 90\n")
        monkeypatch.setenv("PRCOVERAGE__GATE__THRESHOLD", "75")
        monkeypatch.setenv("PRCOVERAGE__PLATFORM__TOKEN", "from-env")

        config = load_config(repo_root=tmp_path)

        assert config.gate.threshold == 75.0
        assert config.platform.token is not None
        assert config.platform.token.get_secret_value() == "from-env"

    def test_kwargs_override_all(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / REPO_CONFIG_NAME).write_text("gate:\n  threshold: 90\n")
        monkeypatch.setenv("PRCOVERAGE__GATE__THRESHOLD", "75")

        config = load_config(repo_root=tmp_path, gate={"threshold": 95.0})

        assert config.gate.threshold == 95.0

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        (tmp_path / REPO_CONFIG_NAME).write_text("gate:\n  threshold: 150\n")
        with pytest.raises(ConfigError) as exc_info:
            load_config(repo_root=tmp_path)
        assert exc_info.value.code == ErrorCode.CONFIG_INVALID_VALUE
        assert "gate.threshold" in exc_info.value.message


class TestGlobalConfigPath:
    def test_is_in_user_config(self) -> None:
        assert isinstance(GLOBAL_CONFIG_PATH, Path)
        assert "prcoverage" in str(GLOBAL_CONFIG_PATH)
