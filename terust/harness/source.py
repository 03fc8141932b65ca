# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Item sources for the harness loop.

The loop only knows the ItemSource contract below. Continuous mode hands it
the paginated timeline adapter; single-item mode hands it a SingleItemSource,
which looks like a feed holding exactly one item. Both modes therefore share
one loop and one set of counters.

Cursor semantics: `older_than=None` asks for the newest page. Otherwise the
page holds only items with `id <= older_than`. The loop sets the cursor to
`consumed_id - 1` after each item, so the next page is strictly older than
everything already seen.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Optional

from terust.harness.errors import AuthorMismatchError
from terust.harness.models import WorkItem
from terust.logging.logger import get_logger

logger = get_logger(__name__)


class ItemSource(ABC):
    """
    Contract for anything that can feed work items to the loop.

    Implementations raise SourceError on any transport or parsing failure.
    There is no partial-page recovery.
    """

    @abstractmethod
    def fetch_count(self) -> int:
        """
        Approximate number of items available.

        May overcount: the loop uses it as the denominator for the aborted
        remainder, not as a stopping condition.
        """
        ...

    @abstractmethod
    def fetch_page(self, older_than: Optional[int]) -> list[WorkItem]:
        """
        Return the next bounded page, newest first, in strictly decreasing id order.

        An empty list means no older items remain. That is the only
        termination signal; a short page is not.
        """
        ...


class SingleItemSource(ItemSource):
    """
    A source holding the one item the user asked for.

    The item is fetched and its author checked in fetch_count(), which the
    loop calls before anything else, so a post from the wrong account is
    rejected before any build runs.
    """

    def __init__(
        self,
        fetch_item: Callable[[int], WorkItem],
        item_id: int,
        expected_author: str,
    ) -> None:
        self._fetch_item = fetch_item
        self._item_id = item_id
        self._expected_author = expected_author
        self._item: Optional[WorkItem] = None
        self._delivered = False

    def _load(self) -> WorkItem:
        if self._item is None:
            item = self._fetch_item(self._item_id)
            author = item.author
            if author is None or author.lower() != self._expected_author.lower():
                raise AuthorMismatchError(item.id, author, self._expected_author)
            logger.debug(
                "Single item fetched",
                extra={"item_id": item.id, "author": author},
            )
            self._item = item
        return self._item

    def fetch_count(self) -> int:
        self._load()
        return 1

    def fetch_page(self, older_than: Optional[int]) -> list[WorkItem]:
        item = self._load()
        if self._delivered:
            return []
        if older_than is not None and item.id > older_than:
            return []
        self._delivered = True
        return [item]
