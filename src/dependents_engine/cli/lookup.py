"""Lookup, sync and graph CLI commands."""

import argparse
import asyncio

import httpx

from dependents_engine.cli.common import resolve_settings
from dependents_engine.config import ConfigError
from dependents_engine.graph.builder import build_graph
from dependents_engine.log import get_logger
from dependents_engine.lookup import lookup
from dependents_engine.pipeline import load_graph, load_projects
from dependents_engine.registry.errors import RegistryError
from dependents_engine.render import render

log = get_logger(__name__)

# Failures that end a command with exit status 1.
FATAL = (ConfigError, RegistryError, httpx.HTTPError, OSError)


def cmd_lookup(args: argparse.Namespace) -> int:
    if not args.name:
        log.error("Please enter a name to lookup")
        return 1

    try:
        settings = resolve_settings(args)
        graph = asyncio.run(load_graph(settings))
    except FATAL as e:
        log.error("Loading projects failed: %s", e)
        return 1

    if args.name not in graph.records:
        log.warning("%s is not a known package", args.name)

    report = lookup(args.name, graph, owners=settings.owners, direct_only=args.direct)
    print()
    print(render(report, markdown=args.markdown))
    if report.suppressed:
        log.debug("%d dependants hidden by filters", report.suppressed)
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    try:
        settings = resolve_settings(args)
        projects = asyncio.run(load_projects(settings))
    except FATAL as e:
        log.error("Loading projects failed: %s", e)
        return 1
    print(f"  {len(projects)} projects cached in {settings.cache_dir}")
    return 0


def cmd_graph(args: argparse.Namespace) -> int:
    try:
        settings = resolve_settings(args)
        projects = asyncio.run(load_projects(settings))
    except FATAL as e:
        log.error("Loading projects failed: %s", e)
        return 1
    graph = build_graph(projects)
    print(graph.summary())
    return 0
