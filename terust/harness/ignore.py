# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Items known not to be code: announcements, replies, pictures of crabs."""

from collections.abc import Iterable


class IgnoreSet:
    """Read-only set of item ids that are counted as ignored and never built."""

    __slots__ = ("_ids",)

    def __init__(self, ids: Iterable[int] = ()) -> None:
        self._ids: frozenset[int] = frozenset(ids)

    def contains(self, item_id: int) -> bool:
        return item_id in self._ids

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __repr__(self) -> str:
        return f"IgnoreSet({sorted(self._ids)!r})"
