"""Unit tests for TOML configuration loader."""

import tomllib
from pathlib import Path

import pytest

from warden.config.loader import deep_merge, get_config_dir, load_config


class TestDeepMerge:
    """Tests for deep_merge function."""

    def test_merge_nested_dicts(self) -> None:
        """Nested dictionaries are merged recursively."""
        base = {"audit": {"max_entries": 10, "retention_days": 90}, "debug": False}
        override = {"audit": {"max_entries": 50}}
        result = deep_merge(base, override)
        assert result == {"audit": {"max_entries": 50, "retention_days": 90}, "debug": False}

    def test_override_replaces_non_dict(self) -> None:
        """Non-dict values in override replace base values."""
        result = deep_merge({"a": {"x": 1}}, {"a": "replaced"})
        assert result == {"a": "replaced"}

    def test_base_unmodified(self) -> None:
        """Original base dictionary is not modified."""
        base = {"a": {"x": 1}}
        deep_merge(base, {"a": {"y": 2}})
        assert base == {"a": {"x": 1}}


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_uses_env_var_when_set(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Uses WARDEN_CONFIG_DIR when set."""
        config_dir = tmp_path / "custom_config"
        config_dir.mkdir()
        monkeypatch.setenv("WARDEN_CONFIG_DIR", str(config_dir))

        assert get_config_dir() == config_dir

    def test_raises_for_missing_env_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Raises error when WARDEN_CONFIG_DIR doesn't exist."""
        monkeypatch.setenv("WARDEN_CONFIG_DIR", str(tmp_path / "missing"))

        with pytest.raises(FileNotFoundError):
            get_config_dir()

    def test_finds_config_in_parent(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Walks up from the working directory to the nearest config/."""
        (tmp_path / "config").mkdir()
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.delenv("WARDEN_CONFIG_DIR", raising=False)
        monkeypatch.chdir(nested)

        assert get_config_dir() == tmp_path / "config"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_merges_environment_config(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Environment config overrides default config."""
        mock_toml_files({
            "default.toml": "app_name = 'test'\ndebug = false",
            "staging.toml": "debug = true",
        })
        monkeypatch.setenv("WARDEN_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("WARDEN_ENV", "staging")

        assert load_config() == {"app_name": "test", "debug": True}

    def test_defaults_to_development_overlay(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Without WARDEN_ENV the development overlay is read."""
        mock_toml_files({
            "default.toml": "[audit]\nmax_entries = 42",
            "development.toml": "[audit]\nretention_days = 7",
        })
        monkeypatch.setenv("WARDEN_CONFIG_DIR", str(test_config_dir))
        monkeypatch.delenv("WARDEN_ENV", raising=False)

        assert load_config() == {"audit": {"max_entries": 42, "retention_days": 7}}

    def test_missing_files_give_empty_config(
        self, test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without any TOML file the code defaults apply."""
        monkeypatch.setenv("WARDEN_CONFIG_DIR", str(test_config_dir))
        monkeypatch.setenv("WARDEN_ENV", "nonexistent")

        assert load_config() == {}

    def test_invalid_toml_raises(
        self,
        test_config_dir: Path,
        mock_toml_files,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Invalid TOML syntax raises error."""
        mock_toml_files({"default.toml": "invalid = [unclosed"})
        monkeypatch.setenv("WARDEN_CONFIG_DIR", str(test_config_dir))

        with pytest.raises(tomllib.TOMLDecodeError):
            load_config()
