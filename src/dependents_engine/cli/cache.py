"""Cache CLI commands."""

import argparse

from dependents_engine.cli.common import resolve_settings
from dependents_engine.config import ConfigError
from dependents_engine.log import get_logger
from dependents_engine.pipeline import clear_cache

log = get_logger(__name__)


def cmd_cache_clear(args: argparse.Namespace) -> int:
    try:
        settings = resolve_settings(args)
        clear_cache(settings)
    except (ConfigError, OSError) as e:
        log.error("%s", e)
        return 1
    log.info("Cleaned the %s...", settings.cache_dir)
    return 0
