"""envloader CLI - check, create, and inspect declared environment variables.

Usage:
    envloader check myapp.settings:ENVIRONMENT        # exit 1 on errors
    envloader create-dirs myapp.settings:ENVIRONMENT  # mkdir missing directories
    envloader show myapp.settings:ENVIRONMENT --format yaml
    envloader export myapp.settings:ENVIRONMENT       # export NAME=VALUE lines
    envloader describe myapp.settings:ENVIRONMENT

TARGET names a module attribute holding the mapping of declarations.
"""

import argparse
import asyncio
import dataclasses
import importlib
import json
import logging
import math
import os
import sys
from collections.abc import Mapping
from typing import Any

import yaml

from .environment import Environment
from .errors import EnvironmentCreateDirectoryError

logger = logging.getLogger(__name__)


class TargetError(Exception):
    """TARGET could not be imported or is not a mapping of declarations."""


def load_declarations(target: str) -> Mapping[str, Any]:
    """Import ``package.module:ATTRIBUTE`` and return the declarations."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise TargetError(f"Expected 'module:ATTRIBUTE', got {target!r}")

    # Console scripts start with their bin/ directory on sys.path, not the cwd
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise TargetError(f"Could not import {module_name!r}: {e}") from e

    try:
        declarations = getattr(module, attr)
    except AttributeError as e:
        raise TargetError(f"{module_name!r} has no attribute {attr!r}") from e

    if not isinstance(declarations, Mapping):
        raise TargetError(f"{target} is a {type(declarations).__name__}, not a mapping")
    return declarations


def _jsonable(value: Any) -> Any:
    # JSON has no NaN or Infinity; report them as null
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def cmd_check(env: Environment, args: argparse.Namespace) -> int:
    """Print every error found by check()."""
    errors = asyncio.run(env.check())
    if not errors:
        print("✅ Environment OK")
        return 0
    for error in errors:
        print(f"❌ {error.name}: {error.message}")
    return 1


def cmd_create_dirs(env: Environment, args: argparse.Namespace) -> int:
    """Create missing directories."""
    try:
        asyncio.run(env.create_directories())
    except EnvironmentCreateDirectoryError as e:
        print(f"❌ {e.message}", file=sys.stderr)
        return 1
    print("✅ Directories ready")
    return 0


def cmd_show(env: Environment, args: argparse.Namespace) -> int:
    """Dump get_variables() as JSON or YAML."""
    variables = {
        key: {k: _jsonable(v) for k, v in dataclasses.asdict(state).items()}
        for key, state in env.get_variables().items()
    }
    if args.format == "yaml":
        print(yaml.safe_dump(variables, sort_keys=False), end="")
    else:
        print(json.dumps(variables, indent=2))
    return 0


def cmd_export(env: Environment, args: argparse.Namespace) -> int:
    """Print shell export lines."""
    print(env.to_shell())
    return 0


def cmd_describe(env: Environment, args: argparse.Namespace) -> int:
    """Print the human-readable listing."""
    print(env.describe(width=args.width))
    return 0


COMMANDS = {
    "check": cmd_check,
    "create-dirs": cmd_create_dirs,
    "show": cmd_show,
    "export": cmd_export,
    "describe": cmd_describe,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="envloader",
        description="Check and inspect declared environment variables",
    )
    parser.add_argument("--log-level", type=str, default="warning",
                        choices=["debug", "info", "warning", "error"])
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("check", "Report missing required variables and directories"),
        ("create-dirs", "Create missing directories"),
        ("export", "Print export NAME=VALUE lines"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("target", help="module:ATTRIBUTE holding the declarations")

    show_parser = subparsers.add_parser("show", help="Show resolved variables")
    show_parser.add_argument("target", help="module:ATTRIBUTE holding the declarations")
    show_parser.add_argument("--format", "-f", choices=["json", "yaml"], default="json")

    describe_parser = subparsers.add_parser("describe", help="Describe every variable")
    describe_parser.add_argument("target", help="module:ATTRIBUTE holding the declarations")
    describe_parser.add_argument("--width", "-w", type=int, default=75)

    return parser


def run(argv: list[str] | None = None) -> int:
    """Parse arguments, run a command, and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command not in COMMANDS:
        parser.print_help()
        return 1

    try:
        declarations = load_declarations(args.target)
    except TargetError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    env = Environment(declarations)
    logger.debug(f"Loaded {len(env)} variable(s) from {args.target}")
    return COMMANDS[args.command](env, args)


def main() -> None:
    """Main CLI entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
