#!/usr/bin/env python3
"""
TopLists - command-line entry point.

Runs the JSON API or prints ranking reports from the configured storage:
  - serve: start the Flask development server
  - top-items / top-categories / trending / radar-trending: JSON reports
  - check-config: show configuration and validation errors

Usage:
    python main.py serve --port 5001
    python main.py top-items --category Libros
    python main.py trending --limit 10
    python main.py radar-trending --months 6
    python main.py check-config
"""

import argparse
import json
import logging
import sys

from toplists.config import (
    LOG_LEVEL,
    RADAR_TRENDING_MONTHS,
    TRENDING_DEFAULT_LIMIT,
    WEB_PORT,
    DEBUG,
    config_summary,
    validate_config,
)
from toplists.errors import TopListsError
from toplists.feeds import FeedAssembler
from toplists.logging_util import setup_logger
from toplists.ranking import top_categories, top_items, trending_radar_items
from toplists.storage import create_storage

logger = logging.getLogger("toplists.cli")


def create_parser() -> argparse.ArgumentParser:
    """Create the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="toplists",
        description="TopLists backend: API server and ranking reports.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve                         Start the API on the configured port
  %(prog)s top-items --category Libros   Leaderboard for one category
  %(prog)s trending --limit 5            Five most liked public lists
  %(prog)s check-config                  Validate environment configuration
        """,
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    serve = commands.add_parser("serve", help="Run the JSON API")
    serve.add_argument(
        "--port", "-p",
        type=int,
        default=WEB_PORT,
        help=f"Port to listen on (default: {WEB_PORT})",
    )

    items = commands.add_parser("top-items", help="Top rated items per category")
    items.add_argument(
        "--category", "-c",
        default=None,
        help="Only compute this category",
    )

    commands.add_parser("top-categories", help="Categories with the most lists")

    trending = commands.add_parser("trending", help="Most liked public lists")
    trending.add_argument(
        "--limit", "-l",
        type=int,
        default=TRENDING_DEFAULT_LIMIT,
        metavar="N",
        help=f"Number of lists (default: {TRENDING_DEFAULT_LIMIT})",
    )

    radar = commands.add_parser("radar-trending", help="Most saved radar items")
    radar.add_argument(
        "--months", "-m",
        type=int,
        default=RADAR_TRENDING_MONTHS,
        metavar="N",
        help=f"Trailing window in months (default: {RADAR_TRENDING_MONTHS})",
    )

    commands.add_parser("check-config", help="Show configuration and exit")

    return parser


def show_config() -> int:
    """Display current configuration. Returns 1 if it is invalid."""
    print("=" * 60)
    print("TopLists Configuration")
    print("=" * 60)
    for key, value in config_summary().items():
        print(f"  {key}: {value}")

    errors = validate_config()
    if errors:
        print("\nConfiguration errors:")
        for error in errors:
            print(f"  - {error}")
        print("=" * 60)
        return 1

    print("\nConfiguration valid")
    print("=" * 60)
    return 0


def run_report(args: argparse.Namespace) -> object:
    """Compute the report named by ``args.command`` as JSON-ready data."""
    storage = create_storage()

    if args.command == "top-items":
        ranked = top_items(storage, args.category)
        return {name: [i.to_dict() for i in group] for name, group in ranked.items()}
    if args.command == "top-categories":
        return [c.to_dict() for c in top_categories(storage)]
    if args.command == "trending":
        return [e.to_dict() for e in FeedAssembler(storage).list_trending(args.limit)]
    if args.command == "radar-trending":
        return [i.to_dict() for i in trending_radar_items(storage, args.months)]

    raise ValueError(f"Unknown report: {args.command}")


def main(argv: list = None) -> int:
    """
    Main entry point.

    Args:
        argv: Command-line arguments (default: sys.argv[1:]).

    Returns:
        Exit code (0 = success, 1 = error).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logger("toplists", "DEBUG" if args.verbose else LOG_LEVEL)

    if args.command == "check-config":
        return show_config()

    if args.command == "serve":
        from web.app import app
        app.run(debug=DEBUG, port=args.port)
        return 0

    try:
        report = run_report(args)
    except TopListsError as e:
        logger.error("Report failed: %s", e)
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 130

    print(json.dumps(report, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
