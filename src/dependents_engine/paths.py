"""Local path resolution.

Resolves the cache directory and the settings file. Uses environment
variables when available, falls back to conventional defaults.

Environment variables:
    DEPENDENTS_CACHE_DIR — metadata cache directory (default: ./.psc-dependencies-cache)
    DEPENDENTS_CONFIG — settings file (default: ./dependents.yaml)
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_CACHE_DIRNAME = ".psc-dependencies-cache"
DEFAULT_CONFIG_FILENAME = "dependents.yaml"


def cache_dir() -> Path:
    """Return the metadata cache directory."""
    env = os.environ.get("DEPENDENTS_CACHE_DIR")
    if env:
        return Path(env).expanduser()
    return Path.cwd() / DEFAULT_CACHE_DIRNAME


def config_path() -> Path:
    """Return the path to dependents.yaml."""
    env = os.environ.get("DEPENDENTS_CONFIG")
    if env:
        return Path(env).expanduser()
    return Path.cwd() / DEFAULT_CONFIG_FILENAME


def github_token() -> str | None:
    """Return the GitHub token from the environment, if any."""
    for var in ("GITHUB_TOKEN", "GH_TOKEN"):
        value = os.environ.get(var, "").strip()
        if value:
            return value
    return None
