"""フィードページを辿ってイベント列を組み立てる"""

from __future__ import annotations

from dataclasses import replace

import httpx
import structlog

from .classifier import classify
from .codec import decode_feed, event_response_from_document
from .exceptions import DecodeError, TransportError
from .models import EventResponse, Feed, FeedEntry, LinkRelation, Response, Take
from .resolver import EventResolver


class StreamTraversal:
    """1 回の読み取り呼び出しに対応するページ走査。

    ページは next リンクの順に 1 つずつ取得し、先読みや並べ替えはしない。
    結果の並びはサーバーが返したエントリ順そのままとなる。take はページサイズとは
    独立に、返すイベントの総数だけを制限する。
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        feed_media_type: str,
        take: Take | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._client = client
        self._feed_media_type = feed_media_type
        self._limit = take.number if take is not None else None
        self._logger = logger or structlog.get_logger(__name__)
        self._resolver = EventResolver(client, logger=self._logger)

    def _satisfied(self, events: list[EventResponse]) -> bool:
        return self._limit is not None and len(events) >= self._limit

    async def fetch_page(self, url: str) -> tuple[Feed, Response]:
        """フィードページを 1 つ取得してデコードする。"""
        request = self._client.build_request(
            "GET", url, headers={"Accept": self._feed_media_type}
        )
        try:
            resp = await self._client.send(request)
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to read feed {url}: {e}", cause=e) from e

        error = classify(request, resp)
        if error is not None:
            self._logger.warning(
                "feed request failed", url=url, status=resp.status_code, code=error.code
            )
            raise error

        feed = decode_feed(resp.content, resp.headers.get("Content-Type"))
        self._logger.debug("feed page fetched", url=url, entries=len(feed.entries))
        return feed, Response.from_httpx(resp)

    async def _event_for(self, entry: FeedEntry) -> EventResponse:
        if entry.content is not None and "eventNumber" in entry.content:
            try:
                embedded = event_response_from_document(entry.content)
            except (ValueError, KeyError, TypeError) as e:
                raise DecodeError(f"Failed to decode embedded event {entry.id}: {e}", cause=e) from e
            # 埋め込み本体にはエントリ側の属性が含まれない
            return replace(
                embedded,
                links=embedded.links or tuple(entry.links),
                timestamp=embedded.timestamp or entry.updated,
                title=embedded.title or entry.title,
                id=embedded.id or entry.id,
                summary=embedded.summary or entry.summary,
            )
        event, _ = await self._resolver.resolve(entry.event_link())
        return event

    async def run(self, first_url: str) -> tuple[list[EventResponse], Response]:
        """first_url から辿れるページを停止条件まで読み、イベント列と最後のレスポンスを返す。"""
        events: list[EventResponse] = []
        feed, last = await self.fetch_page(first_url)
        while feed.entries:
            for entry in feed.entries:
                if self._satisfied(events):
                    break
                events.append(await self._event_for(entry))
            if self._satisfied(events):
                break
            next_url = feed.link(LinkRelation.NEXT)
            if next_url is None:
                # ストリームの終端に到達
                break
            feed, last = await self.fetch_page(next_url)
        return events, last
