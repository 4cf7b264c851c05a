#!/usr/bin/env python3
"""
Run the TopLists test suites by layer.

The suites follow the package layout: the data layer (models, criteria,
storage, auth), the social graph and the feeds built on it, the
leaderboards, the services, and the outer surfaces (HTTP API, CLI, config).

Usage:
    python run_tests.py                     # everything
    python run_tests.py social ranking      # selected suites
    python run_tests.py core -k supabase    # narrow with a pytest -k expression
    python run_tests.py --web               # only tests marked ``web``
    python run_tests.py --list
"""

import argparse
import subprocess
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent

# Suite name -> (description, test modules)
SUITES = {
    "core": (
        "Models, rating criteria, storage backends and identity",
        ["test_models.py", "test_criteria.py", "test_storage.py", "test_auth.py"],
    ),
    "social": (
        "Follow requests, list visibility and feed assembly",
        ["test_follows.py", "test_visibility.py", "test_feeds.py"],
    ),
    "ranking": (
        "Top items, top categories and radar trends",
        ["test_ranking.py"],
    ),
    "services": (
        "List authoring, engagement, radar and profiles",
        ["test_lists_service.py", "test_engagement.py", "test_radar.py", "test_profiles.py"],
    ),
    "surface": (
        "JSON API, command line and configuration checks",
        [
            "test_web_app.py",
            "test_system_cli_behavior.py",
            "test_system_config_validation.py",
            "test_runner.py",
        ],
    ),
}


def suite_paths(names):
    """Test module paths for the named suites, in suite order."""
    unknown = [name for name in names if name not in SUITES]
    if unknown:
        raise ValueError(f"Unknown suite(s): {', '.join(unknown)}. Known: {', '.join(SUITES)}")

    paths = []
    for name in names:
        paths.extend(f"tests/{module}" for module in SUITES[name][1])
    return paths


def build_command(names, keyword=None, web_only=False, fail_fast=False, verbose=False):
    cmd = [sys.executable, "-m", "pytest"]
    cmd.extend(suite_paths(names) if names else ["tests/"])
    if keyword:
        cmd.extend(["-k", keyword])
    if web_only:
        cmd.extend(["-m", "web"])
    if fail_fast:
        cmd.extend(["-x", "--ff"])
    cmd.append("-v" if verbose else "--tb=short")
    return cmd


def print_suites():
    width = max(len(name) for name in SUITES)
    for name, (description, modules) in SUITES.items():
        print(f"{name:<{width}}  {description}")
        print(f"{'':<{width}}  {', '.join(modules)}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run TopLists test suites")
    parser.add_argument("suites", nargs="*", help=f"Suites to run ({', '.join(SUITES)}); default all")
    parser.add_argument("-k", dest="keyword", help="pytest -k expression")
    parser.add_argument("--web", action="store_true", help="Only tests marked 'web'")
    parser.add_argument("-x", "--fail-fast", action="store_true", help="Stop at the first failure")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--list", action="store_true", help="Show suites and exit")
    args = parser.parse_args(argv)

    if args.list:
        print_suites()
        return 0

    try:
        cmd = build_command(args.suites, args.keyword, args.web, args.fail_fast, args.verbose)
    except ValueError as e:
        print(e, file=sys.stderr)
        return 2

    print(f"[{datetime.now():%Y-%m-%d %H:%M:%S}] suites: {', '.join(args.suites) or 'all'}")
    return subprocess.run(cmd, cwd=PROJECT_ROOT).returncode


if __name__ == "__main__":
    sys.exit(main())
