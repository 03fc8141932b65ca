# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for terust.

Usage:
    terust                      # build every snippet on the timeline
    terust 1049375398340034561  # build one snippet
    terust --config configs/terust.yaml --log-level DEBUG
"""

import argparse
import sys

from terust.cli.commands import handle_run


def _build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.

    The only thing the harness needs is the optional item id; --config and
    --log-level are the same knobs every command of ours carries.
    """
    parser = argparse.ArgumentParser(
        prog="terust",
        description="Ensures programs from the @everyrust timeline build.",
    )
    parser.add_argument(
        "item_id",
        metavar="ITEM_ID",
        nargs="?",
        default=None,
        help="Build a single snippet by id instead of the whole timeline.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides the config).",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        dest="env_file",
        help="Load credentials from this .env file instead of searching for one.",
    )
    parser.set_defaults(func=handle_run)
    return parser


def main() -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    Parse the command line, run the handler, exit with its return code.
    """
    parser = _build_parser()
    args = parser.parse_args()
    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
