"""Reads config/default.toml and the WARDEN_ENV overlay into one dict."""

import os
import tomllib
from pathlib import Path
from typing import Any

DEFAULT_ENV = "development"


def get_config_dir() -> Path:
    """Directory holding the TOML files.

    WARDEN_CONFIG_DIR wins when set and must exist. Otherwise the nearest
    'config/' at or above the working directory, else 'config'.
    """
    override = os.environ.get("WARDEN_CONFIG_DIR")
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        if (directory / "config").is_dir():
            return directory / "config"
    return Path("config")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base; nested tables merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Load default.toml overlaid with {WARDEN_ENV}.toml.

    Either file may be absent; with neither, the model defaults apply.

    Raises:
        tomllib.TOMLDecodeError: A present file is not valid TOML
    """
    config_dir = get_config_dir()
    env = os.environ.get("WARDEN_ENV", DEFAULT_ENV)

    config: dict[str, Any] = {}
    for name in ("default.toml", f"{env}.toml"):
        path = config_dir / name
        if path.is_file():
            with path.open("rb") as f:
                config = deep_merge(config, tomllib.load(f))
    return config
