# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for terust tests.

The harness talks to the network and to rustc; the fakes here stand in for
both so the loop, session and report can be tested without either.
"""

import io
import textwrap
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest
from rich.console import Console

from terust.harness.models import BuildVerdict, WorkItem
from terust.harness.source import ItemSource

_EPOCH = datetime(2018, 10, 10, 20, 19, 24, tzinfo=timezone.utc)


def make_item(item_id: int, text: str = "pub fn f() {}", author: Optional[str] = "everyrust") -> WorkItem:
    return WorkItem(
        id=item_id,
        text=text,
        created_at=_EPOCH - timedelta(minutes=item_id % 10_000),
        author=author,
    )


class FakeSource(ItemSource):
    """
    An in-memory timeline with real cursor semantics.

    fetch_page returns up to `page_size` items with id <= older_than, newest
    first, and remembers every cursor it was asked for.
    """

    def __init__(self, items: list[WorkItem], page_size: int = 2, count: Optional[int] = None) -> None:
        self._items = sorted(items, key=lambda item: item.id, reverse=True)
        self._page_size = page_size
        self._count = len(items) if count is None else count
        self.cursors: list[Optional[int]] = []

    def fetch_count(self) -> int:
        return self._count

    def fetch_page(self, older_than: Optional[int]) -> list[WorkItem]:
        self.cursors.append(older_than)
        eligible = [item for item in self._items if older_than is None or item.id <= older_than]
        return eligible[: self._page_size]


class FakeBuilder:
    """Returns canned verdicts and records what it was asked to build."""

    def __init__(
        self,
        verdicts: Optional[dict[int, BuildVerdict]] = None,
        on_build: Optional[Callable[[WorkItem], None]] = None,
    ) -> None:
        self._verdicts = verdicts or {}
        self._on_build = on_build
        self.built: list[int] = []

    def build(self, item: WorkItem) -> BuildVerdict:
        self.built.append(item.id)
        if self._on_build is not None:
            self._on_build(item)
        return self._verdicts.get(item.id, BuildVerdict.passed())


@pytest.fixture()
def item_factory() -> Callable[..., WorkItem]:
    return make_item


@pytest.fixture()
def fake_source_cls() -> type[FakeSource]:
    return FakeSource


@pytest.fixture()
def fake_builder_cls() -> type[FakeBuilder]:
    return FakeBuilder


@pytest.fixture()
def console() -> Console:
    """A colourless console writing into a StringIO, read back via console.file."""
    return Console(
        file=io.StringIO(),
        width=200,
        color_system=None,
        force_terminal=False,
        soft_wrap=True,
        highlight=False,
    )


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """A small valid config with a scratch directory inside tmp_path."""
    config_content = textwrap.dedent(f"""\
        global:
          config_version: "1.0.0"
          log_level: "DEBUG"
        feed:
          screen_name: "everyrust"
          page_size: 50
        build:
          scratch_directory: "{(tmp_path / 'scratch').as_posix()}"
        ignored_ids: [99, 12345]
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file
