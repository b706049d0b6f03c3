"""TOML configuration loader with deep merge support."""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "AUREUS_CONFIG_DIR"
ENVIRONMENT_ENV = "AUREUS_ENV"
DEFAULT_ENVIRONMENT = "development"

# How many parent directories to walk when looking for config/
_SEARCH_DEPTH = 5


def get_config_dir() -> Path:
    """Locate the configuration directory.

    AUREUS_CONFIG_DIR wins when set; otherwise config/ is searched for in the
    working directory and its parents.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.exists():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    current = Path.cwd()
    for _ in range(_SEARCH_DEPTH):
        candidate = current / "config"
        if candidate.is_dir():
            return candidate
        current = current.parent

    return Path("config")


def get_environment() -> str:
    """Name of the active environment (AUREUS_ENV, default 'development')."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse a TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``.

    Nested tables are merged key by key; any other value in ``override``
    replaces the one in ``base``.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Load default.toml and overlay the environment file if present.

    A missing config directory or default.toml yields an empty mapping, so the
    in-code defaults apply.
    """
    config_dir = get_config_dir()
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}

    config = load_toml(default_path)

    env_path = config_dir / f"{get_environment()}.toml"
    if env_path.exists():
        config = deep_merge(config, load_toml(env_path))

    return config
