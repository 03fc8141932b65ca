# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The harness loop: page through the source, build each item, record it.

The loop is the same for one item and for a whole timeline; only the
ItemSource differs. Per page:

  - an empty page ends the run (normal termination, not an error), and so
    does consuming id 0, since nothing can be older
  - for each item, in page order:
      * the cursor moves to id - 1 first, so an item that aborts is still
        behind us and can never be fetched again
      * ignored ids are counted and skipped
      * everything else is built and its verdict recorded
      * if cancellation was requested, stop here
  - before asking for the next page, check cancellation again

Cancellation is observed right after each build returns and before the next
item or page, so at most one build is in flight when the loop stops.
"""

from typing import Optional, Protocol

from terust.harness.cancellation import CancellationController
from terust.harness.errors import SourceError
from terust.harness.ignore import IgnoreSet
from terust.harness.models import BuildVerdict, ResultSnapshot, WorkItem
from terust.harness.report import ResultAggregator
from terust.harness.source import ItemSource
from terust.logging.logger import get_logger

logger = get_logger(__name__)


class ItemBuilder(Protocol):
    def build(self, item: WorkItem) -> BuildVerdict: ...


class HarnessLoop:
    """Drives one run from the first page fetch to the last recorded verdict."""

    def __init__(
        self,
        source: ItemSource,
        builder: ItemBuilder,
        ignore_set: IgnoreSet,
        controller: CancellationController,
        aggregator: ResultAggregator,
    ) -> None:
        self._source = source
        self._builder = builder
        self._ignore_set = ignore_set
        self._controller = controller
        self._aggregator = aggregator
        self._cursor: Optional[int] = None
        self._pages_fetched = 0

    @property
    def cursor(self) -> Optional[int]:
        return self._cursor

    @property
    def exhausted(self) -> bool:
        return self._cursor is not None and self._cursor < 0

    @property
    def aggregator(self) -> ResultAggregator:
        return self._aggregator

    def run(self) -> ResultSnapshot:
        total = self._source.fetch_count()
        self._aggregator.set_total(total)
        logger.info("Harness started", extra={"total": total})

        while not self._controller.cancelled and not self.exhausted:
            page = self._source.fetch_page(self._cursor)
            self._pages_fetched += 1
            logger.debug(
                "Page fetched",
                extra={
                    "page": self._pages_fetched,
                    "older_than": self._cursor,
                    "items": len(page),
                },
            )
            if not page:
                break
            if not self._run_page(page):
                break

        snapshot = self._aggregator.snapshot()
        logger.info(
            "Harness stopped",
            extra={
                "cancelled": self._controller.cancelled,
                "pages": self._pages_fetched,
                "passed": snapshot.pass_count,
                "failed": snapshot.fail_count,
                "ignored": snapshot.ignore_count,
                "total": snapshot.total_count,
            },
        )
        return snapshot

    def _run_page(self, page: list[WorkItem]) -> bool:
        """Process one page. Returns False once cancellation has been observed."""
        for item in page:
            self._advance_cursor(item)

            self._aggregator.item_started(item)
            if self._ignore_set.contains(item.id):
                self._aggregator.record_ignored(item)
            else:
                verdict = self._builder.build(item)
                self._aggregator.record(item, verdict)

            if self._controller.cancelled:
                logger.info(
                    "Cancellation observed, stopping",
                    extra={"last_item_id": item.id},
                )
                return False
        return True

    def _advance_cursor(self, item: WorkItem) -> None:
        if self._cursor is not None and item.id > self._cursor:
            raise SourceError(
                f"Source returned item {item.id}, which is not older than cursor {self._cursor}"
            )
        if item.id < 0:
            raise SourceError(f"Source returned an invalid item id {item.id}")
        # Below id 0 there is nothing older; -1 marks the timeline as exhausted.
        self._cursor = item.id - 1
