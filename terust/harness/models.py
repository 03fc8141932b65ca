# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data models for the harness.

WorkItem and BuildVerdict are frozen: an item is never edited after it is
fetched, and a verdict is never edited after the build produced it.
ResultData is the one mutable object in the run. The loop thread writes it
and the final report reads it, so every access goes through its lock.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class WorkItem:
    """One snippet from the feed."""

    id: int
    text: str
    created_at: datetime
    author: Optional[str] = None


class Outcome(Enum):
    PASS = "pass"
    FAIL = "fail"
    ABORTED = "aborted"


@dataclass(frozen=True)
class BuildVerdict:
    """
    What came back from trying to build one item.

    Only FAIL carries a diagnostic (the compiler's stderr, verbatim). An
    ABORTED verdict means the result can't be trusted either way: the build
    was killed by the interrupt, or finished after cancellation was asked for.
    """

    outcome: Outcome
    diagnostic: str = ""
    exit_code: Optional[int] = None
    elapsed_seconds: float = 0.0

    @classmethod
    def passed(cls, exit_code: int = 0, elapsed_seconds: float = 0.0) -> "BuildVerdict":
        return cls(Outcome.PASS, exit_code=exit_code, elapsed_seconds=elapsed_seconds)

    @classmethod
    def failed(
        cls,
        diagnostic: str,
        exit_code: Optional[int] = None,
        elapsed_seconds: float = 0.0,
    ) -> "BuildVerdict":
        return cls(Outcome.FAIL, diagnostic, exit_code, elapsed_seconds)

    @classmethod
    def aborted(
        cls,
        exit_code: Optional[int] = None,
        elapsed_seconds: float = 0.0,
    ) -> "BuildVerdict":
        return cls(Outcome.ABORTED, exit_code=exit_code, elapsed_seconds=elapsed_seconds)


@dataclass(frozen=True)
class ResultSnapshot:
    """A consistent, read-only copy of ResultData taken under its lock."""

    pass_count: int
    fail_count: int
    ignore_count: int
    abort_count: int
    total_count: int
    failures: tuple[tuple[int, str], ...]

    @property
    def unaccounted(self) -> int:
        """Items counted in the total that never got a pass, fail or ignore."""
        return max(0, self.total_count - self.pass_count - self.fail_count - self.ignore_count)


@dataclass
class ResultData:
    """
    Running totals for one harness run.

    Created empty at run start, updated once per item by the loop, read once
    at the end. The lock is held only while counters change or a snapshot is
    copied, never while a build is running.
    """

    pass_count: int = 0
    fail_count: int = 0
    ignore_count: int = 0
    abort_count: int = 0
    total_count: int = 0
    failures: list[tuple[int, str]] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def set_total(self, total: int) -> None:
        with self._lock:
            self.total_count = total

    def record_ignored(self) -> None:
        with self._lock:
            self.ignore_count += 1

    def record(self, item_id: int, verdict: BuildVerdict) -> None:
        with self._lock:
            if verdict.outcome is Outcome.PASS:
                self.pass_count += 1
            elif verdict.outcome is Outcome.FAIL:
                self.fail_count += 1
                self.failures.append((item_id, verdict.diagnostic))
            else:
                self.abort_count += 1

    def snapshot(self) -> ResultSnapshot:
        with self._lock:
            return ResultSnapshot(
                pass_count=self.pass_count,
                fail_count=self.fail_count,
                ignore_count=self.ignore_count,
                abort_count=self.abort_count,
                total_count=self.total_count,
                failures=tuple(self.failures),
            )
