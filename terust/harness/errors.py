# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Fatal harness errors.

Anything that can go wrong in the harness is one of two things: a build
failure, which is a verdict and never an exception, or one of the errors
below, which ends the run. Each error carries an ErrorKind so the single
top-level handler in the CLI can map it to an exit code without a chain of
isinstance checks.
"""

from enum import Enum


class ErrorKind(Enum):
    """What part of the run broke."""

    SETUP = "setup"
    SOURCE = "source"
    VALIDATION = "validation"
    CLEANUP = "cleanup"


class HarnessError(Exception):
    """Base for all fatal harness errors."""

    kind: ErrorKind = ErrorKind.SETUP


class SetupError(HarnessError):
    """Missing credentials, missing compiler, or an unusable scratch directory."""

    kind = ErrorKind.SETUP


class SourceError(HarnessError):
    """The item source failed to deliver a page, or delivered one that breaks its contract."""

    kind = ErrorKind.SOURCE


class AuthorMismatchError(SourceError):
    """A single requested item was not posted by the expected account."""

    kind = ErrorKind.VALIDATION

    def __init__(self, item_id: int, author: str | None, expected: str) -> None:
        self.item_id = item_id
        self.author = author
        self.expected = expected
        who = f"@{author}" if author else "an unknown author"
        super().__init__(f"Item {item_id} was posted by {who}, not @{expected}")


class CleanupError(HarnessError):
    """A build artifact exists but could not be deleted."""

    kind = ErrorKind.CLEANUP
