"""Settings for the dependents tool, read from dependents.yaml."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

from dependents_engine import paths

DEFAULT_REGISTRY_URL = "https://registry.bower.io"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_RAW_URL = "https://raw.githubusercontent.com"
DEFAULT_KEYWORD = "purescript"
DEFAULT_CONCURRENCY = 8


class ConfigError(ValueError):
    """Raised when dependents.yaml cannot be used."""


@dataclass
class Settings:
    """Resolved settings for one invocation."""

    registry_url: str = DEFAULT_REGISTRY_URL
    github_api_url: str = DEFAULT_GITHUB_API_URL
    raw_url: str = DEFAULT_RAW_URL
    keyword: str = DEFAULT_KEYWORD
    cache_dir: Path = field(default_factory=paths.cache_dir)
    concurrency: int = DEFAULT_CONCURRENCY
    timeout: float = 20.0
    owners: list[str] | None = None
    token: str | None = field(default=None, repr=False)


def read_settings_file(path: Path | str) -> dict:
    """Read and parse a dependents.yaml file.

    Args:
        path: Path to dependents.yaml.

    Returns:
        Parsed mapping (empty for an empty file).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ConfigError: If the YAML is malformed or not a mapping.
    """
    settings_path = Path(path)
    with open(settings_path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse {settings_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{settings_path} is not a YAML mapping")
    return data


def _coerce(data: dict, source: Path) -> dict:
    known = {f.name for f in fields(Settings)} - {"token"}
    values: dict = {}
    for key, value in data.items():
        if key not in known:
            raise ConfigError(f"{source}: unknown setting '{key}'")
        if key == "cache_dir":
            value = Path(str(value)).expanduser()
            if not value.is_absolute():
                value = source.parent / value
        elif key == "concurrency":
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{source}: concurrency must be a positive integer")
        elif key == "timeout":
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"{source}: timeout must be a positive number")
            value = float(value)
        elif key == "owners":
            if isinstance(value, str):
                value = [o.strip() for o in value.split(",") if o.strip()]
            elif isinstance(value, list):
                value = [str(o) for o in value]
            else:
                raise ConfigError(f"{source}: owners must be a list")
        else:
            value = str(value)
        values[key] = value
    return values


def load_settings(path: Path | str | None = None) -> Settings:
    """Build Settings from defaults, dependents.yaml and the environment.

    A missing settings file is only an error when *path* was given
    explicitly.
    """
    explicit = path is not None
    settings_file = Path(path) if path else paths.config_path()

    settings = Settings(token=paths.github_token())
    if settings_file.is_file():
        data = read_settings_file(settings_file)
        settings = replace(settings, **_coerce(data, settings_file))
    elif explicit:
        raise ConfigError(f"Settings file not found: {settings_file}")

    if os.environ.get("DEPENDENTS_CACHE_DIR"):
        settings = replace(settings, cache_dir=paths.cache_dir())
    return settings
