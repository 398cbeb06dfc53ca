# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for lazyinstaller.

Commands:

- update: Install or update the application described by a recipe
- validate: Check a recipe without network access
- flags: Print the argument list a launcher would pass to the application

Exit codes: 0 on success (including "nothing to do"), 1 on error, 130 when
interrupted.
"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
import traceback

from lazyinstaller import __version__
from lazyinstaller.config import load_effective_config, resolve_app
from lazyinstaller.core import update_app
from lazyinstaller.exceptions import LazyInstallerError
from lazyinstaller.launch import build_launch_args
from lazyinstaller.logging import get_logger, set_global_logger
from lazyinstaller.policy import UpdateDecision
from lazyinstaller.validation import validate_recipe

EXIT_INTERRUPTED = 130


def _report_error(err: Exception, args: argparse.Namespace) -> int:
    print(f"Error: {err}", file=sys.stderr)
    if getattr(args, "verbose", False) or getattr(args, "debug", False):
        traceback.print_exc()
    return 1


def _prompt(decision: UpdateDecision) -> bool:
    if decision.action == "install":
        question = f"Install version {decision.candidate}?"
    else:
        question = f"Update {decision.installed} -> {decision.candidate}?"
    try:
        answer = input(f"{question} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def cmd_update(args: argparse.Namespace) -> int:
    """Handler for 'lazyinstaller update' command.

    Args:
        args: Parsed command-line arguments containing the recipe path and
            the check/yes/verbose/debug flags.

    Returns:
        Exit code (0 for success or nothing to do, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    recipe_path = Path(args.recipe).resolve()
    if not recipe_path.exists():
        print(f"Error: Recipe file not found: {recipe_path}", file=sys.stderr)
        return 1

    print(f"Checking recipe: {recipe_path}")
    print()

    confirm = None if args.yes else _prompt
    try:
        result = update_app(recipe_path, check_only=args.check, confirm=confirm)
    except LazyInstallerError as err:
        return _report_error(err, args)

    print("=" * 70)
    print("UPDATE RESULTS")
    print("=" * 70)
    print(f"App Name:          {result.app_name}")
    print(f"App ID:            {result.app_id}")
    print(f"Installed Version: {result.installed_version}")
    print(f"Available Version: {result.available_version}")
    print(f"Action:            {result.action}")
    print(f"Install Directory: {result.install_dir}")
    print(f"Launcher:          {result.launcher_path}")
    print(f"Status:            {result.status}")
    print("=" * 70)
    print()

    if result.status in ("installed", "updated"):
        print(f"[SUCCESS] {result.app_name} {result.available_version} {result.status}!")
    elif result.status == "available":
        print(f"[INFO] {result.app_name} {result.available_version} is available.")
    elif result.status == "aborted":
        print("[INFO] Aborted by user.")
    else:
        print(f"[INFO] Nothing to do ({result.status}).")

    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Handler for 'lazyinstaller validate' command.

    Returns:
        Exit code (0 for valid recipe, 1 for invalid).

    """
    logger = get_logger(verbose=args.verbose, debug=False)
    set_global_logger(logger)

    recipe_path = Path(args.recipe).resolve()

    print(f"Validating recipe: {recipe_path}")
    print()

    result = validate_recipe(recipe_path)

    print("=" * 70)
    print("VALIDATION RESULTS")
    print("=" * 70)
    print(f"Recipe:      {result.recipe_path}")
    print(f"Status:      {result.status.upper()}")
    print()

    if result.warnings:
        print(f"Warnings ({len(result.warnings)}):")
        for warning in result.warnings:
            print(f"  [WARNING] {warning}")
        print()

    if result.errors:
        print(f"Errors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  [X] {error}")
        print()

    print("=" * 70)
    print()

    if result.status == "valid":
        print("[SUCCESS] Recipe is valid!")
        return 0
    print(f"[FAILED] Recipe validation failed with {len(result.errors)} error(s).")
    return 1


def cmd_flags(args: argparse.Namespace) -> int:
    """Handler for 'lazyinstaller flags' command.

    Prints the launcher's argument list, one per line, binary first.
    Warnings about rejected flag-file lines go to stderr.
    """
    set_global_logger(get_logger())

    try:
        settings = resolve_app(load_effective_config(Path(args.recipe)))
    except LazyInstallerError as err:
        return _report_error(err, args)

    for arg in build_launch_args(settings.launch_config(), args.args):
        print(arg)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazyinstaller",
        description="lazyinstaller - install and update Linux desktop apps from vendor releases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"lazyinstaller {__version__}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'update' command
    parser_update = subparsers.add_parser(
        "update",
        help="Install or update an application",
        description="Compare the installed version with the vendor's latest release and install it if newer.",
    )
    parser_update.add_argument(
        "recipe",
        help="Path to the recipe YAML file",
    )
    parser_update.add_argument(
        "--check",
        action="store_true",
        help="Only report whether an update is available",
    )
    parser_update.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Do not ask for confirmation",
    )
    parser_update.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser_update.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser_update.set_defaults(func=cmd_update)

    # 'validate' command
    parser_validate = subparsers.add_parser(
        "validate",
        help="Validate recipe syntax and configuration (no network)",
        description="Check recipe YAML for syntax errors and configuration issues without making network calls.",
    )
    parser_validate.add_argument(
        "recipe",
        help="Path to the recipe YAML file",
    )
    parser_validate.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show validation progress and details",
    )
    parser_validate.set_defaults(func=cmd_validate)

    # 'flags' command
    parser_flags = subparsers.add_parser(
        "flags",
        help="Print the arguments the launcher would pass",
        description="Read the flag files and environment exactly like the launcher and print the resulting argument list.",
    )
    parser_flags.add_argument(
        "recipe",
        help="Path to the recipe YAML file",
    )
    parser_flags.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments as if given to the launcher",
    )
    parser_flags.set_defaults(func=cmd_flags)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the lazyinstaller CLI.

    This function is registered as the 'lazyinstaller' console script in
    pyproject.toml.
    """
    args = build_parser().parse_args(argv)

    try:
        exit_code = args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        exit_code = EXIT_INTERRUPTED
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
