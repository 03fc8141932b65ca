# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Run the harness loop with interrupt handling in place.

Python only delivers signals to the main thread, and a handler can't block
the thread it interrupts. So the loop runs on a worker thread, and the main
thread installs the SIGINT handler and then waits for the worker to set
`finished`:

    main thread                       worker thread
    ───────────                       ─────────────
    install SIGINT handler
    start worker ───────────────────▶ enter scratch area
    wait_finished()                   loop.run()  (builds, one at a time)
      ◀── SIGINT: set cancelled       ...observes cancelled, stops
                                      leave scratch area (removes it)
                                      print final report
      ◀────────────────────────────── mark_finished()
    restore handlers, return

The worker marks `finished` even if the loop raises, so the main thread never
waits forever; the error is re-raised on the main thread afterwards. A fatal
error skips the final report: the counts it would show are incomplete.
"""

import threading
from typing import Callable, ContextManager, Optional

from terust.harness.cancellation import CancellationController
from terust.harness.loop import HarnessLoop
from terust.harness.models import ResultSnapshot
from terust.logging.logger import get_logger

logger = get_logger(__name__)


def run_session(
    make_loop: Callable[[], HarnessLoop],
    scratch: ContextManager[object],
    controller: CancellationController,
    install_signals: bool = True,
) -> ResultSnapshot:
    """
    Run one harness session and return the final counts.

    Args:
        make_loop: Builds the loop once the scratch area exists. The build
            runner needs the scratch path, so the loop can't be built earlier.
        scratch: Context manager owning the scratch directory.
        controller: Shared cancellation state.
        install_signals: Whether to route SIGINT to the controller. Tests
            that call this off the main thread turn it off.

    Raises:
        HarnessError: Whatever fatal error ended the run, after the scratch
            area was torn down.
    """
    outcome: dict[str, object] = {}

    def _work() -> None:
        try:
            with scratch:
                loop = make_loop()
                loop.run()
            outcome["snapshot"] = loop.aggregator.print_report(controller.cancelled)
        except BaseException as err:
            outcome["error"] = err
        finally:
            controller.mark_finished()

    worker = threading.Thread(target=_work, name="terust-harness", daemon=True)

    if install_signals:
        with controller.installed():
            worker.start()
            controller.wait_finished()
    else:
        worker.start()
        controller.wait_finished()
    worker.join()

    error: Optional[object] = outcome.get("error")
    if isinstance(error, BaseException):
        raise error

    snapshot = outcome["snapshot"]
    assert isinstance(snapshot, ResultSnapshot)
    logger.debug("Session finished", extra={"state": controller.state})
    return snapshot
