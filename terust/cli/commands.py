# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Command handler for the terust CLI.

This is the single top-level error handler. Everything below it raises typed
errors (ConfigError, HarnessError); here each one becomes a structured log
line and an exit code. Build failures never reach this layer; they are
verdicts in the report.

No print() calls. Diagnostics go through the structured logger, the report
goes through the aggregator's console.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console

from terust.cli.exit_codes import (
    CONFIG_ERROR,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
    VALIDATION_ERROR,
)
from terust.config.exceptions import ConfigError
from terust.config.loader import load_config
from terust.config.schema import TerustConfig
from terust.feed.client import TimelineFeed
from terust.feed.credentials import load_credentials
from terust.harness.builder import BuildRunner, ScratchArea
from terust.harness.cancellation import CancellationController
from terust.harness.errors import ErrorKind, HarnessError
from terust.harness.ignore import IgnoreSet
from terust.harness.loop import HarnessLoop
from terust.harness.models import ResultSnapshot
from terust.harness.report import ResultAggregator
from terust.harness.session import run_session
from terust.harness.source import ItemSource, SingleItemSource
from terust.logging.logger import get_logger
from terust.runtime.bootstrap import bootstrap

_EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.SETUP: CONFIG_ERROR,
    ErrorKind.SOURCE: RUNTIME_ERROR,
    ErrorKind.VALIDATION: VALIDATION_ERROR,
    ErrorKind.CLEANUP: RUNTIME_ERROR,
}


def exit_code_for(err: HarnessError) -> int:
    return _EXIT_CODES.get(err.kind, RUNTIME_ERROR)


def parse_item_id(raw: str) -> int:
    """
    Parse the ITEM_ID argument.

    Raises:
        ValueError: If it isn't a 64-bit unsigned integer.
    """
    if not raw.isdigit():
        raise ValueError(f"Invalid item id: {raw}")
    item_id = int(raw)
    if item_id >= 2**64:
        raise ValueError(f"Invalid item id: {raw} does not fit in 64 bits")
    return item_id


def run_harness(
    config: TerustConfig,
    source: ItemSource,
    compiler: Optional[str] = None,
    console: Optional[Console] = None,
    install_signals: bool = True,
) -> ResultSnapshot:
    """
    Wire the loop together and run one session against `source`.

    Every component gets the one frozen config; nothing reaches for globals.
    """
    controller = CancellationController()
    aggregator = ResultAggregator(console)
    ignore_set = IgnoreSet(config.ignored_ids)
    scratch = ScratchArea(Path(config.build.scratch_directory))

    def make_loop() -> HarnessLoop:
        runner = BuildRunner(config.build, scratch.directory, controller, compiler=compiler)
        return HarnessLoop(source, runner, ignore_set, controller, aggregator)

    return run_session(make_loop, scratch, controller, install_signals=install_signals)


def _load(args: argparse.Namespace, logger: logging.Logger) -> tuple[int, Optional[TerustConfig]]:
    config_path = Path(args.config) if args.config is not None else None
    try:
        config = load_config(config_path)
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": "run", "error": str(err)},
        )
        return CONFIG_ERROR, None

    if config_path is None:
        logger.debug("No config provided, running with defaults", extra={"command": "run"})
    return SUCCESS, config


def handle_run(args: argparse.Namespace) -> int:
    """Build one snippet, or every snippet on the timeline, and report."""
    logger = get_logger("terust.cli.run", log_level=args.log_level or "INFO")

    item_id: Optional[int] = None
    if args.item_id is not None:
        try:
            item_id = parse_item_id(args.item_id)
        except ValueError as err:
            logger.error(str(err), extra={"command": "run", "item_id": args.item_id})
            return USER_ERROR

    exit_code, config = _load(args, logger)
    if config is None:
        return exit_code

    env_file = Path(args.env_file) if getattr(args, "env_file", None) else None

    try:
        compiler = bootstrap(config, env_file=env_file, log_level=args.log_level)
        credentials = load_credentials()

        with TimelineFeed(config.feed, credentials) as feed:
            source: ItemSource = feed
            if item_id is not None:
                source = SingleItemSource(feed.fetch_item, item_id, config.feed.screen_name)

            logger.info(
                "Starting harness",
                extra={
                    "mode": "single" if item_id is not None else "continuous",
                    "item_id": item_id,
                    "account": config.feed.screen_name,
                },
            )
            snapshot = run_harness(config, source, compiler=compiler)

        logger.info(
            "Harness complete",
            extra={
                "passed": snapshot.pass_count,
                "failed": snapshot.fail_count,
                "ignored": snapshot.ignore_count,
                "total": snapshot.total_count,
            },
        )
        return SUCCESS

    except HarnessError as err:
        logger.error(
            str(err),
            extra={"command": "run", "kind": err.kind.value},
        )
        return exit_code_for(err)
    except Exception as err:
        logger.error("Harness failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR
