"""Root settings model for Warden configuration.

Precedence, highest first: constructor arguments, WARDEN_* environment
variables (nested keys joined with "__"), the merged TOML dict handed to
set_toml_config, then model defaults.
"""

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from warden.config.models.audit import AuditConfig
from warden.config.models.compliance import ComplianceConfig
from warden.config.models.observability import ObservabilityConfig
from warden.config.models.storage import StorageConfig

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Install the merged TOML dict read by the next Settings()."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Feeds the installed TOML dict into pydantic-settings."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return dict(_toml_config)


class Settings(BaseSettings):
    """Audit, compliance, storage and observability sections."""

    model_config = SettingsConfigDict(
        env_prefix="WARDEN_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="warden", description="Application name")
    debug: bool = Field(default=False)
    log_level: LogLevel = Field(default="INFO")

    audit: AuditConfig = Field(default_factory=AuditConfig)
    compliance: ComplianceConfig = Field(default_factory=ComplianceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Drop dotenv and secrets files; slot TOML in below the environment."""
        return (init_settings, env_settings, TomlConfigSettingsSource(settings_cls))
