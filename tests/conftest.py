"""テスト共通のフィクスチャとイベントストアのフィードシミュレーター"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator

import httpx
import pytest
import respx
from k1s0_eventstore_client.codec import (
    EVENT_MEDIA_TYPE,
    FEED_JSON_MEDIA_TYPE,
    encode_event_document,
    encode_feed,
)
from k1s0_eventstore_client.config import EventStoreConfig
from k1s0_eventstore_client.http_client import HttpEventStoreClient
from k1s0_eventstore_client.models import (
    Author,
    Event,
    EventResponse,
    Feed,
    FeedEntry,
    Link,
    RawDocument,
)

BASE_URL = "http://eventstore:2113"
TIMESTAMP = "2016-12-01T10:00:00Z"


def event_url(stream: str, number: int) -> str:
    return f"{BASE_URL}/streams/{stream}/{number}"


def make_event_response(
    stream: str,
    number: int,
    event_type: str = "EventTypeX",
    data: RawDocument | None = None,
) -> EventResponse:
    url = event_url(stream, number)
    return EventResponse(
        event=Event(
            event_id=f"{stream}-{number}",
            event_type=event_type,
            data=data or RawDocument.from_json({"number": number}),
            metadata=RawDocument.from_json({"source": "test"}),
        ),
        event_number=number,
        stream_id=stream,
        links=(Link("edit", url), Link("alternate", url)),
        timestamp=TIMESTAMP,
        title=f"{number}@{stream}",
        id=url,
        summary=event_type,
    )


class FeedSimulator:
    """respx 上で N 件のイベントを持つストリームのフィードを提供する。

    backward ページは新しい順、forward ページは古い順にエントリを並べ、
    続きがある場合のみ next リンクを付与する。
    """

    def __init__(
        self,
        stream: str,
        count: int = 0,
        *,
        events: list[EventResponse] | None = None,
        media_type: str = FEED_JSON_MEDIA_TYPE,
        embed: bool = False,
    ) -> None:
        self.stream = stream
        self.events = events if events is not None else [
            make_event_response(stream, n) for n in range(count)
        ]
        self.media_type = media_type
        self.embed = embed
        self.feed_requests: list[httpx.Request] = []
        self.event_requests: list[httpx.Request] = []
        prefix = re.escape(f"{BASE_URL}/streams/{stream}")
        self._feed_pattern = re.compile(
            rf"^{prefix}/(?P<version>head|\d+)/(?P<direction>forward|backward)/(?P<size>\d+)$"
        )
        self._event_pattern = re.compile(rf"^{prefix}/(?P<number>\d+)$")

    def register(self, router: respx.MockRouter) -> FeedSimulator:
        router.get(url__regex=self._feed_pattern.pattern).mock(side_effect=self._serve_feed)
        router.get(url__regex=self._event_pattern.pattern).mock(side_effect=self._serve_event)
        return self

    def _page_url(self, version: int | str, direction: str, size: int) -> str:
        return f"{BASE_URL}/streams/{self.stream}/{version}/{direction}/{size}"

    def _entry(self, number: int) -> FeedEntry:
        er = self.events[number]
        content = None
        if self.embed:
            content = json.loads(encode_event_document(er))["content"]
        return FeedEntry(
            title=er.title,
            id=er.id,
            updated=er.timestamp,
            author=Author("EventStore"),
            summary=er.summary,
            links=list(er.links),
            content=content,
        )

    def build_page(self, version: str, direction: str, size: int) -> Feed:
        total = len(self.events)
        links = [
            Link("self", self._page_url(version, direction, size)),
            Link("first", self._page_url("head", "backward", size)),
            Link("last", self._page_url(0, "forward", size)),
        ]
        if direction == "backward":
            start = total - 1 if version == "head" else min(int(version), total - 1)
            numbers = list(range(start, max(start - size, -1), -1))
            if numbers and numbers[-1] > 0:
                links.append(Link("next", self._page_url(numbers[-1] - 1, "backward", size)))
        else:
            start = int(version)
            numbers = list(range(start, min(start + size, total)))
            if numbers and numbers[-1] < total - 1:
                links.append(Link("next", self._page_url(numbers[-1] + 1, "forward", size)))
        links.append(Link("metadata", f"{BASE_URL}/streams/{self.stream}/metadata"))
        return Feed(
            title=f"Event stream '{self.stream}'",
            id=f"{BASE_URL}/streams/{self.stream}",
            updated=TIMESTAMP,
            author=Author("EventStore"),
            links=links,
            entries=[self._entry(n) for n in numbers],
        )

    def _serve_feed(self, request: httpx.Request, **_: str) -> httpx.Response:
        self.feed_requests.append(request)
        match = self._feed_pattern.match(str(request.url))
        assert match is not None
        feed = self.build_page(match["version"], match["direction"], int(match["size"]))
        return httpx.Response(
            200,
            content=encode_feed(feed, self.media_type),
            headers={"Content-Type": self.media_type},
        )

    def _serve_event(self, request: httpx.Request, **_: str) -> httpx.Response:
        self.event_requests.append(request)
        match = self._event_pattern.match(str(request.url))
        assert match is not None
        number = int(match["number"])
        if number >= len(self.events):
            return httpx.Response(404, text="Event not found")
        return httpx.Response(
            200,
            content=encode_event_document(self.events[number]),
            headers={"Content-Type": EVENT_MEDIA_TYPE},
        )


def make_client() -> HttpEventStoreClient:
    return HttpEventStoreClient(EventStoreConfig(base_url=BASE_URL))


@pytest.fixture
def client() -> HttpEventStoreClient:
    return make_client()


@pytest.fixture
def router() -> Iterator[respx.MockRouter]:
    """未使用のルートを許容する respx ルーター。"""
    with respx.mock(assert_all_called=False) as mock_router:
        yield mock_router
