"""Configuration loading for Warden.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from warden.config import get_settings

    settings = get_settings()
    validity = settings.compliance.approval_validity_days
"""

from functools import lru_cache

from warden.config.loader import load_config
from warden.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{WARDEN_ENV}.toml (environment overrides)
    4. WARDEN_* environment variables (runtime overrides)

    The result is cached for the lifetime of the process.
    Call `get_settings.cache_clear()` to reload configuration.
    """
    config_dict = load_config()
    set_toml_config(config_dict)

    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
