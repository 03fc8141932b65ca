# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Result aggregation and the human-readable report.

The report mimics `cargo test` so anyone who writes Rust can read it at a
glance:

    running 3 tests
    test 100 (2018-10-10 20:19:24 UTC) ... ok
    test 99 (2018-10-09 18:02:11 UTC) ... ignored
    test 98 (2018-10-08 09:45:00 UTC) ... FAILED

    failures:

    ---- 98 stderr ----
    error[E0425]: cannot find value `x` in this scope
    ...

    failures:
        98

    test result: FAILED. 1 passed; 1 failed; 1 ignored

The aborted clause (`; N aborted`) only appears on a cancelled run.
"""

from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.text import Text

from terust.harness.models import BuildVerdict, Outcome, ResultData, ResultSnapshot, WorkItem

_OUTCOME_LABELS: dict[Outcome, tuple[str, str]] = {
    Outcome.PASS: ("ok", "green"),
    Outcome.FAIL: ("FAILED", "red"),
    Outcome.ABORTED: ("aborted", "yellow"),
}

_RESULT_STYLES: dict[str, str] = {
    "PASS": "green",
    "FAILED": "red",
    "ABORTED": "yellow",
}


def format_timestamp(created_at: datetime) -> str:
    return created_at.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def result_label(snapshot: ResultSnapshot, cancelled: bool) -> str:
    if cancelled:
        return "ABORTED"
    if snapshot.fail_count > 0:
        return "FAILED"
    return "PASS"


def summary_line(snapshot: ResultSnapshot, cancelled: bool) -> str:
    line = (
        f"test result: {result_label(snapshot, cancelled)}. "
        f"{snapshot.pass_count} passed; {snapshot.fail_count} failed; "
        f"{snapshot.ignore_count} ignored"
    )
    if cancelled:
        line += f"; {snapshot.unaccounted} aborted"
    return line


def failure_lines(snapshot: ResultSnapshot) -> list[str]:
    """The failures block, or nothing when every build passed."""
    if not snapshot.failures:
        return []

    lines = ["", "failures:", ""]
    for item_id, diagnostic in snapshot.failures:
        lines.append(f"---- {item_id} stderr ----")
        lines.append(diagnostic.rstrip("\n"))
        lines.append("")
    lines.append("failures:")
    lines.extend(f"    {item_id}" for item_id, _ in snapshot.failures)
    return lines


def render_report(snapshot: ResultSnapshot, cancelled: bool) -> list[str]:
    """Plain-text final report: failures block, then the summary line."""
    return [*failure_lines(snapshot), "", summary_line(snapshot, cancelled)]


class ResultAggregator:
    """
    Collects outcomes into ResultData and prints the running report.

    Per-item lines are printed as the loop goes; the final report is printed
    once, from whatever thread finishes the run.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console(soft_wrap=True, highlight=False)
        self._results = ResultData()

    @property
    def results(self) -> ResultData:
        return self._results

    def set_total(self, total: int) -> None:
        self._results.set_total(total)
        noun = "test" if total == 1 else "tests"
        self._console.print(f"running {total} {noun}", markup=False)

    def item_started(self, item: WorkItem) -> None:
        self._console.print(
            f"test {item.id} ({format_timestamp(item.created_at)}) ... ",
            end="",
            markup=False,
        )

    def record_ignored(self, item: WorkItem) -> None:
        self._results.record_ignored()
        self._console.print(Text("ignored", style="yellow"))

    def record(self, item: WorkItem, verdict: BuildVerdict) -> None:
        self._results.record(item.id, verdict)
        label, style = _OUTCOME_LABELS[verdict.outcome]
        self._console.print(Text(label, style=style))

    def snapshot(self) -> ResultSnapshot:
        return self._results.snapshot()

    def print_report(self, cancelled: bool) -> ResultSnapshot:
        snapshot = self._results.snapshot()
        for line in failure_lines(snapshot):
            self._console.print(line, markup=False)
        self._console.print()

        label = result_label(snapshot, cancelled)
        summary = Text("test result: ")
        summary.append(label, style=_RESULT_STYLES[label])
        summary.append(summary_line(snapshot, cancelled)[len(f"test result: {label}"):])
        self._console.print(summary)
        return snapshot
