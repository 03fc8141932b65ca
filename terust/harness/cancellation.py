# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Cooperative cancellation between the interrupt handler and the work loop.

Two one-shot flags, each with a single writer:

  cancelled: set by the SIGINT handler, read by the loop and the build runner
  finished : set by the session once the loop has drained, the scratch area
              is gone and the report is printed

  Running ──SIGINT──▶ CancelRequested ──loop drained──▶ Drained

The process must not exit between the first two states. Returning control to
the default SIGINT behaviour there would kill the harness mid-build, leaving
artifacts on disk and no report. So the handler only records the request,
and the main thread, which is the only thread Python delivers signals to,
blocks in wait_finished() until the worker says it is done.
"""

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from types import FrameType
from typing import Optional

from terust.logging.logger import get_logger

logger = get_logger(__name__)

# How often the waiting main thread wakes up. Event.wait() with no timeout
# is not interruptible on every platform, so we wait in slices.
_WAIT_SLICE_SECONDS: float = 0.25


class CancellationController:
    """Owns the cancelled/finished flags and the signal registration."""

    def __init__(self) -> None:
        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self._request_lock = threading.Lock()
        self._previous_handlers: dict[int, object] = {}

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    @property
    def state(self) -> str:
        if not self.cancelled:
            return "running"
        return "drained" if self.finished else "cancel_requested"

    def request_cancel(self) -> bool:
        """
        Ask the loop to stop after the item in flight.

        Returns True the first time, False for every repeat request.
        """
        with self._request_lock:
            if self._cancelled.is_set():
                return False
            self._cancelled.set()
            return True

    def mark_finished(self) -> None:
        self._finished.set()

    def wait_finished(self, timeout: Optional[float] = None) -> bool:
        """
        Block until finished is set, or until `timeout` seconds pass.

        Returns whether finished is set.
        """
        if timeout is not None:
            return self._finished.wait(timeout)
        while not self._finished.wait(_WAIT_SLICE_SECONDS):
            pass
        return True

    def _handle_signal(self, signum: int, frame: Optional[FrameType]) -> None:
        if self.request_cancel():
            logger.warning(
                "Interrupt received, finishing the current build before stopping",
                extra={"signal": signal.Signals(signum).name},
            )
        else:
            logger.warning(
                "Interrupt received again, still waiting for the harness to drain",
                extra={"signal": signal.Signals(signum).name},
            )

    @contextmanager
    def installed(
        self,
        signals: tuple[signal.Signals, ...] = (signal.SIGINT,),
    ) -> Iterator["CancellationController"]:
        """
        Route `signals` to this controller for the duration of the block.

        Must be entered from the main thread; that is where Python runs
        signal handlers. The previous handlers come back on exit.
        """
        for sig in signals:
            self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)
        try:
            yield self
        finally:
            for sig, previous in self._previous_handlers.items():
                # None means the old handler wasn't installed from Python.
                signal.signal(sig, previous if previous is not None else signal.SIG_DFL)  # type: ignore[arg-type]
            self._previous_handlers.clear()
