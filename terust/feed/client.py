# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
HTTP adapter for the account timeline.

This is the paginated ItemSource used in continuous mode, plus the
single-status lookup used in single-item mode. It speaks the v1.1 REST
endpoints:

  GET users/show.json             statuses_count, the approximate total
  GET statuses/user_timeline.json one page, newest first, max_id inclusive
  GET statuses/show.json          one status by id

`max_id` is inclusive, which is exactly the loop's cursor: the loop passes
`last_id - 1`, so nothing is delivered twice.

Reshares can't be told apart until the page arrives, so the count overcounts
and filtering happens here. If a whole page turns out to be reshares we keep
paging, because returning an empty page would tell the loop the timeline
ended.
"""

from datetime import datetime
from types import TracebackType
from typing import Any, Optional

import httpx

from terust.config.schema import FeedConfig
from terust.feed.credentials import Credentials
from terust.harness.errors import SourceError
from terust.harness.models import WorkItem
from terust.harness.source import ItemSource
from terust.logging.logger import get_logger

logger = get_logger(__name__)

_CREATED_AT_FORMAT: str = "%a %b %d %H:%M:%S %z %Y"


def parse_created_at(value: str) -> datetime:
    try:
        return datetime.strptime(value, _CREATED_AT_FORMAT)
    except ValueError as err:
        raise SourceError(f"Unrecognised timestamp {value!r}") from err


def parse_status(payload: Any) -> WorkItem:
    """Turn one status object into a WorkItem."""
    if not isinstance(payload, dict):
        raise SourceError(f"Expected a status object, got {type(payload).__name__}")
    try:
        item_id = int(payload["id"])
        text = payload.get("full_text", payload.get("text"))
        created_at = parse_created_at(payload["created_at"])
    except (KeyError, TypeError, ValueError) as err:
        raise SourceError(f"Malformed status object: {err}") from err
    if not isinstance(text, str):
        raise SourceError(f"Status {item_id} has no text")
    if item_id < 0 or item_id >= 2**64:
        raise SourceError(f"Status id {item_id} is not a 64-bit unsigned integer")

    user = payload.get("user")
    author = user.get("screen_name") if isinstance(user, dict) else None
    return WorkItem(id=item_id, text=text, created_at=created_at, author=author)


def is_reshare(payload: Any) -> bool:
    return isinstance(payload, dict) and payload.get("retweeted_status") is not None


class TimelineFeed(ItemSource):
    """
    Timeline of one account, as an ItemSource.

    Usage:
        with TimelineFeed(config.feed, credentials) as feed:
            page = feed.fetch_page(None)
    """

    def __init__(
        self,
        config: FeedConfig,
        credentials: Credentials,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=config.base_url.rstrip("/") + "/",
            headers={
                "Authorization": f"Bearer {credentials.bearer_token}",
                "Accept": "application/json",
            },
            timeout=config.http_timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TimelineFeed":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def _get(self, path: str, params: dict[str, Any]) -> Any:
        try:
            response = self._client.get(path, params=params)
        except httpx.HTTPError as err:
            raise SourceError(f"Request to {path} failed: {err}") from err

        if response.is_error:
            raise SourceError(
                f"Request to {path} failed ({response.status_code}): {response.text.strip()[:200]}"
            )
        try:
            return response.json()
        except ValueError as err:
            raise SourceError(f"Response from {path} is not valid JSON") from err

    def fetch_count(self) -> int:
        payload = self._get("users/show.json", {"screen_name": self._config.screen_name})
        if not isinstance(payload, dict) or not isinstance(payload.get("statuses_count"), int):
            raise SourceError("User lookup did not include statuses_count")
        return payload["statuses_count"]

    def fetch_item(self, item_id: int) -> WorkItem:
        payload = self._get(
            "statuses/show.json",
            {"id": item_id, "tweet_mode": "extended"},
        )
        return parse_status(payload)

    def fetch_page(self, older_than: Optional[int]) -> list[WorkItem]:
        cursor = older_than
        while True:
            raw_page = self._fetch_raw_page(cursor)
            if not raw_page:
                return []

            kept = [
                parse_status(status)
                for status in raw_page
                if self._config.include_reshares or not is_reshare(status)
            ]
            if kept:
                kept.sort(key=lambda item: item.id, reverse=True)
                return kept

            oldest = min(parse_status(status).id for status in raw_page)
            logger.debug(
                "Page held only reshares, continuing",
                extra={"older_than": cursor, "oldest": oldest},
            )
            cursor = oldest - 1

    def _fetch_raw_page(self, older_than: Optional[int]) -> list[Any]:
        params: dict[str, Any] = {
            "screen_name": self._config.screen_name,
            "count": self._config.page_size,
            "tweet_mode": "extended",
            # Ask for reshares even when we drop them, so page boundaries and
            # max_id stay consistent with statuses_count.
            "include_rts": "true",
            "exclude_replies": "false",
        }
        if older_than is not None:
            params["max_id"] = older_than

        payload = self._get("statuses/user_timeline.json", params)
        if not isinstance(payload, list):
            raise SourceError(
                f"Timeline page should be a list, got {type(payload).__name__}"
            )
        return payload
