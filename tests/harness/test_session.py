# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the session: worker thread, rendezvous, teardown and report.
"""

from pathlib import Path

import pytest

from terust.harness.builder import ScratchArea
from terust.harness.cancellation import CancellationController
from terust.harness.errors import SourceError
from terust.harness.ignore import IgnoreSet
from terust.harness.loop import HarnessLoop
from terust.harness.report import ResultAggregator
from terust.harness.session import run_session


def _make_loop_factory(source, builder, controller, console):
    def make_loop() -> HarnessLoop:
        return HarnessLoop(source, builder, IgnoreSet(), controller, ResultAggregator(console))

    return make_loop


class TestRunSession:
    def test_clean_run_reports_and_tears_down(
        self, tmp_path: Path, item_factory, fake_source_cls, fake_builder_cls, console
    ) -> None:
        controller = CancellationController()
        scratch_dir = tmp_path / "scratch"
        seen_dirs: list[bool] = []
        builder = fake_builder_cls(on_build=lambda item: seen_dirs.append(scratch_dir.is_dir()))
        source = fake_source_cls([item_factory(2), item_factory(1)])

        snapshot = run_session(
            _make_loop_factory(source, builder, controller, console),
            ScratchArea(scratch_dir),
            controller,
            install_signals=False,
        )

        assert snapshot.pass_count == 2
        assert seen_dirs == [True, True]
        assert not scratch_dir.exists()
        assert controller.finished
        assert "test result: PASS. 2 passed; 0 failed; 0 ignored" in console.file.getvalue()

    def test_cancelled_run_still_reports_and_tears_down(
        self, tmp_path: Path, item_factory, fake_source_cls, fake_builder_cls, console
    ) -> None:
        controller = CancellationController()
        scratch_dir = tmp_path / "scratch"
        builder = fake_builder_cls(on_build=lambda item: controller.request_cancel())
        source = fake_source_cls([item_factory(3), item_factory(2), item_factory(1)])

        snapshot = run_session(
            _make_loop_factory(source, builder, controller, console),
            ScratchArea(scratch_dir),
            controller,
            install_signals=False,
        )

        assert snapshot.pass_count == 1
        assert snapshot.unaccounted == 2
        assert controller.state == "drained"
        assert not scratch_dir.exists()
        assert console.file.getvalue().rstrip().endswith(
            "test result: ABORTED. 1 passed; 0 failed; 0 ignored; 2 aborted"
        )

    def test_worker_error_is_reraised_after_teardown(
        self, tmp_path: Path, fake_builder_cls, console
    ) -> None:
        class Broken:
            def fetch_count(self) -> int:
                return 5

            def fetch_page(self, older_than):
                raise SourceError("timeline unavailable")

        controller = CancellationController()
        scratch_dir = tmp_path / "scratch"

        with pytest.raises(SourceError, match="timeline unavailable"):
            run_session(
                _make_loop_factory(Broken(), fake_builder_cls(), controller, console),
                ScratchArea(scratch_dir),
                controller,
                install_signals=False,
            )

        assert controller.finished
        assert not scratch_dir.exists()
        assert "test result" not in console.file.getvalue()

    def test_installs_and_restores_signal_handler(
        self, tmp_path: Path, item_factory, fake_source_cls, fake_builder_cls, console
    ) -> None:
        import signal

        previous = signal.getsignal(signal.SIGINT)
        controller = CancellationController()
        source = fake_source_cls([item_factory(1)])

        run_session(
            _make_loop_factory(source, fake_builder_cls(), controller, console),
            ScratchArea(tmp_path / "scratch"),
            controller,
        )

        assert signal.getsignal(signal.SIGINT) == previous
