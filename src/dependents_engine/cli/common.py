"""Settings resolution shared by the CLI commands."""

import argparse
from dataclasses import replace
from pathlib import Path

from dependents_engine.config import Settings, load_settings


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Settings from dependents.yaml, overridden by command-line flags.

    Raises:
        ConfigError: If the settings file is unusable.
    """
    settings = load_settings(args.config)
    if args.cache_dir:
        settings = replace(settings, cache_dir=Path(args.cache_dir).expanduser())
    owners = getattr(args, "filter_owners", None)
    if owners is not None:
        settings = replace(settings, owners=owners)
    return settings
