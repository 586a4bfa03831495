"""Unit tests for Settings class and get_settings function."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from warden.compliance.models import DocumentType
from warden.config import get_settings, reload_settings
from warden.config.models import ComplianceConfig, RiskThresholds
from warden.config.settings import Settings


@pytest.fixture
def isolated_config(
    test_config_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Point the loader at an empty temp config directory."""
    monkeypatch.setenv("WARDEN_CONFIG_DIR", str(test_config_dir))
    monkeypatch.setenv("WARDEN_ENV", "nonexistent")
    return test_config_dir


class TestSettings:
    """Tests for Settings model."""

    def test_default_values(self) -> None:
        """Settings has sensible defaults."""
        settings = Settings()
        assert settings.app_name == "warden"
        assert settings.debug is False
        assert settings.log_level == "INFO"

    def test_audit_defaults(self) -> None:
        """Audit section defaults."""
        audit = Settings().audit
        assert audit.max_entries == 10000
        assert audit.retention_days == 90
        assert audit.default_ip_address == "unknown"
        assert audit.append_retries == 3

    def test_compliance_defaults(self) -> None:
        """Compliance section defaults."""
        compliance = Settings().compliance
        assert compliance.approval_validity_days == 365
        assert compliance.required_documents == ["pan", "gstin", "address_proof"]
        assert compliance.risk.weights.failed_check == 30
        assert compliance.risk.thresholds.critical == 75

    def test_storage_defaults(self) -> None:
        """Storage defaults to the in-memory backend."""
        assert Settings().storage.backend == "inmemory"

    def test_thresholds_must_be_ordered(self) -> None:
        """Thresholds that do not rise with severity are rejected."""
        with pytest.raises(ValidationError):
            RiskThresholds(medium=60, high=50, critical=75)

    def test_unknown_required_document_rejected(self) -> None:
        """Bad document types fail when the configuration is loaded."""
        with pytest.raises(ValidationError):
            ComplianceConfig(required_documents=["pan", "library_card"])

    def test_required_documents_parsed_to_enum(self) -> None:
        compliance = ComplianceConfig(required_documents=["passport"])
        assert compliance.required_documents == [DocumentType.PASSPORT]


class TestGetSettings:
    """Tests for get_settings function."""

    def test_reads_toml(self, isolated_config: Path) -> None:
        """Values from default.toml are applied."""
        (isolated_config / "default.toml").write_text(
            "[audit]\nmax_entries = 500\n[compliance.risk.weights]\npending_check = 5"
        )

        settings = get_settings()
        assert settings.audit.max_entries == 500
        assert settings.compliance.risk.weights.pending_check == 5
        assert settings.compliance.risk.weights.failed_check == 30

    def test_settings_cached(self, isolated_config: Path) -> None:
        """get_settings returns cached instance."""
        assert get_settings() is get_settings()

    def test_reload_settings_clears_cache(self, isolated_config: Path) -> None:
        """reload_settings returns fresh instance."""
        default_toml = isolated_config / "default.toml"
        default_toml.write_text("app_name = 'original'")
        assert get_settings().app_name == "original"

        default_toml.write_text("app_name = 'updated'")
        assert reload_settings().app_name == "updated"


class TestEnvironmentVariableOverrides:
    """Tests for environment variable configuration overrides."""

    def test_top_level_override(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Top-level values can be overridden with env vars."""
        (isolated_config / "default.toml").write_text("debug = false")
        monkeypatch.setenv("WARDEN_DEBUG", "true")

        assert get_settings().debug is True

    def test_nested_override(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Nested values can be overridden with double underscore."""
        (isolated_config / "default.toml").write_text("[audit]\nmax_entries = 100")
        monkeypatch.setenv("WARDEN_AUDIT__MAX_ENTRIES", "250")

        assert get_settings().audit.max_entries == 250

    def test_backend_override(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Storage backend can be switched from the environment."""
        monkeypatch.setenv("WARDEN_STORAGE__BACKEND", "postgres")

        assert get_settings().storage.backend == "postgres"
