# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Environment validation for terust.

Checks that the machine can run the harness before we touch the network or
the filesystem. A missing compiler would otherwise show up as a wall of
identical failures.
"""

import platform
import shutil
import sys
from typing import NamedTuple

from terust.harness.errors import SetupError

MINIMUM_PYTHON_MAJOR = 3
MINIMUM_PYTHON_MINOR = 11


class SystemInfo(NamedTuple):
    """Snapshot of the current system environment."""

    python_version: str
    platform: str
    architecture: str


def get_python_version() -> tuple[int, int, int]:
    """Return the current Python version as a (major, minor, micro) tuple."""
    return sys.version_info[:3]


def check_minimum_python() -> None:
    """
    Verify we're running Python 3.11+.

    Raises:
        SetupError: If Python version is below 3.11.
    """
    major, minor, _ = get_python_version()
    if major < MINIMUM_PYTHON_MAJOR or (
        major == MINIMUM_PYTHON_MAJOR and minor < MINIMUM_PYTHON_MINOR
    ):
        raise SetupError(
            f"terust requires Python >= {MINIMUM_PYTHON_MAJOR}.{MINIMUM_PYTHON_MINOR}, "
            f"but you're running {major}.{minor}. Please upgrade."
        )


def find_compiler(name: str) -> str:
    """
    Locate the compiler executable on PATH.

    Returns:
        The absolute path to the executable.

    Raises:
        SetupError: If it isn't installed.
    """
    resolved = shutil.which(name)
    if resolved is None:
        raise SetupError(f"Compiler '{name}' not found on PATH. Is Rust installed?")
    return resolved


def get_system_info() -> SystemInfo:
    """Collect basic system information for logging and diagnostics."""
    return SystemInfo(
        python_version=platform.python_version(),
        platform=platform.system(),
        architecture=platform.machine(),
    )
