"""Command-line interface for reverse dependency lookups.

Usage:
    dependents lookup <name> [--markdown] [--direct] [--filter-owners a,b]
    dependents sync
    dependents graph
    dependents cache clear
"""

import argparse
import sys

from dependents_engine import __version__
from dependents_engine.cli.cache import cmd_cache_clear
from dependents_engine.cli.lookup import cmd_graph, cmd_lookup, cmd_sync
from dependents_engine.log import configure_logging


def owner_list(value: str) -> list[str]:
    return [owner.strip() for owner in value.split(",") if owner.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dependents",
        description="Find every package that depends on a given package",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config", default=None,
        help="Path to dependents.yaml",
    )
    parser.add_argument(
        "--cache-dir", default=None,
        help="Metadata cache directory (default: ./.psc-dependencies-cache)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log cache hits and other debug detail",
    )
    sub = parser.add_subparsers(dest="command")

    lk = sub.add_parser("lookup", help="List the dependants of a package")
    lk.add_argument("name", nargs="?", default=None, help="Package name")
    lk.add_argument(
        "--markdown", action="store_true",
        help="Print the result as a markdown checklist",
    )
    lk.add_argument(
        "--direct", action="store_true",
        help="Leave out transitive dependants",
    )
    lk.add_argument(
        "--filter-owners", type=owner_list, default=None,
        help="Only include projects with these owners (comma-separated list)",
    )

    sub.add_parser("sync", help="Fetch every missing project into the cache")
    sub.add_parser("graph", help="Show dependency graph size")

    cache = sub.add_parser("cache", help="Cache operations")
    cache_sub = cache.add_subparsers(dest="subcommand")
    cache_sub.add_parser("clear", help="Remove the metadata cache")

    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(verbose=args.verbose)

    dispatch = {
        ("lookup", ""): cmd_lookup,
        ("sync", ""): cmd_sync,
        ("graph", ""): cmd_graph,
        ("cache", "clear"): cmd_cache_clear,
    }

    subcommand: str | None = getattr(args, "subcommand", None)
    handler = dispatch.get((args.command, subcommand or ""))
    if handler:
        return handler(args)

    parser.parse_args([args.command, "--help"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
