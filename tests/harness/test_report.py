# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for result accounting and report rendering.
"""

import threading
from datetime import datetime, timezone

from terust.harness.models import BuildVerdict, ResultData, ResultSnapshot
from terust.harness.report import (
    ResultAggregator,
    format_timestamp,
    render_report,
    result_label,
    summary_line,
)


def _snapshot(**kwargs) -> ResultSnapshot:
    defaults = {
        "pass_count": 0,
        "fail_count": 0,
        "ignore_count": 0,
        "abort_count": 0,
        "total_count": 0,
        "failures": (),
    }
    defaults.update(kwargs)
    return ResultSnapshot(**defaults)


class TestResultData:
    def test_records_by_outcome(self) -> None:
        data = ResultData()
        data.set_total(4)
        data.record(1, BuildVerdict.passed())
        data.record(2, BuildVerdict.failed("boom"))
        data.record(3, BuildVerdict.aborted())
        data.record_ignored()

        snapshot = data.snapshot()
        assert (snapshot.pass_count, snapshot.fail_count, snapshot.ignore_count) == (1, 1, 1)
        assert snapshot.abort_count == 1
        assert snapshot.failures == ((2, "boom"),)
        assert snapshot.unaccounted == 1

    def test_snapshot_is_detached(self) -> None:
        data = ResultData()
        data.record(1, BuildVerdict.failed("a"))
        snapshot = data.snapshot()
        data.record(2, BuildVerdict.failed("b"))

        assert snapshot.fail_count == 1
        assert len(snapshot.failures) == 1

    def test_concurrent_updates_are_not_lost(self) -> None:
        data = ResultData()

        def _hammer() -> None:
            for _ in range(1000):
                data.record(1, BuildVerdict.passed())

        threads = [threading.Thread(target=_hammer) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert data.snapshot().pass_count == 4000

    def test_unaccounted_never_negative(self) -> None:
        assert _snapshot(pass_count=3, total_count=1).unaccounted == 0


class TestSummary:
    def test_pass(self) -> None:
        line = summary_line(_snapshot(pass_count=2, total_count=2), cancelled=False)
        assert line == "test result: PASS. 2 passed; 0 failed; 0 ignored"

    def test_failed(self) -> None:
        assert result_label(_snapshot(fail_count=1), cancelled=False) == "FAILED"

    def test_cancelled_wins_over_failed(self) -> None:
        snapshot = _snapshot(pass_count=1, fail_count=1, ignore_count=1, total_count=6)
        line = summary_line(snapshot, cancelled=True)
        assert line == "test result: ABORTED. 1 passed; 1 failed; 1 ignored; 3 aborted"

    def test_render_without_failures_is_just_summary(self) -> None:
        lines = render_report(_snapshot(pass_count=1, total_count=1), cancelled=False)
        assert lines == ["", "test result: PASS. 1 passed; 0 failed; 0 ignored"]

    def test_render_lists_failures_in_order(self) -> None:
        snapshot = _snapshot(
            fail_count=2,
            total_count=2,
            failures=((20, "error one\n"), (10, "error two")),
        )
        lines = render_report(snapshot, cancelled=False)

        assert lines.index("---- 20 stderr ----") < lines.index("---- 10 stderr ----")
        assert "error one" in lines
        tail = lines[lines.index("failures:", 2):]
        assert tail[:3] == ["failures:", "    20", "    10"]


class TestAggregatorOutput:
    def test_diagnostics_are_not_treated_as_markup(self, console) -> None:
        aggregator = ResultAggregator(console)
        aggregator.results.record(7, BuildVerdict.failed("error[E0425]: [bold]x[/bold]"))

        aggregator.print_report(cancelled=False)

        assert "error[E0425]: [bold]x[/bold]" in console.file.getvalue()

    def test_singular_header(self, console) -> None:
        ResultAggregator(console).set_total(1)
        assert console.file.getvalue() == "running 1 test\n"

    def test_timestamp_format(self) -> None:
        stamp = datetime(2018, 10, 10, 20, 19, 24, tzinfo=timezone.utc)
        assert format_timestamp(stamp) == "2018-10-10 20:19:24 UTC"
