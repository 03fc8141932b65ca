# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for terust.

This module handles the one-time setup that happens before any real work begins.
The bootstrap sequence is:
  1. Validate the environment (Python version)
  2. Load a .env file, if there is one, into the process environment
  3. Level the loggers and attach the optional log file
  4. Locate the compiler

After bootstrap completes, the harness knows it can build things.
"""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from terust.config.schema import TerustConfig
from terust.logging.logger import attach_package_log_file, get_logger, set_package_log_level
from terust.runtime.environment import check_minimum_python, find_compiler, get_system_info


def bootstrap(
    config: TerustConfig,
    env_file: Optional[Path] = None,
    log_level: Optional[str] = None,
) -> str:
    """
    Run the full bootstrap sequence.

    Args:
        config: The validated configuration.
        env_file: Explicit .env path. None lets python-dotenv search upwards
            from the working directory.
        log_level: Overrides the config's log level (from --log-level).

    Returns:
        Absolute path of the compiler executable.

    Raises:
        SetupError: Unsupported Python or no compiler on PATH.
    """
    check_minimum_python()

    # Real environment variables win over .env entries.
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(override=False)

    level = log_level or config.global_config.log_level
    set_package_log_level(level)

    logger = get_logger("terust.runtime", log_level=level)
    if config.global_config.log_file is not None:
        attach_package_log_file(Path(config.global_config.log_file))

    compiler = find_compiler(config.build.compiler)

    system_info = get_system_info()
    logger.info(
        "terust bootstrap complete",
        extra={
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "compiler": compiler,
        },
    )
    return compiler
