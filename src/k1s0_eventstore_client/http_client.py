"""イベントストア HTTP クライアント実装"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import structlog

from .classifier import classify
from .client import EventStoreClient
from .codec import APPEND_MEDIA_TYPE, encode_event_for_append
from .config import EventStoreConfig
from .exceptions import TransportError
from .models import (
    Direction,
    Event,
    EventResponse,
    Feed,
    RawDocument,
    Response,
    StreamVersion,
    Take,
)
from .resolver import EventResolver
from .serialization import generate_event_id
from .traversal import StreamTraversal
from .urls import build_feed_url, metadata_stream, stream_path

METADATA_EVENT_TYPE = "$metadata"
HARD_DELETE_HEADER = "ES-HardDelete"
EXPECTED_VERSION_HEADER = "ES-ExpectedVersion"


class HttpEventStoreClient(EventStoreClient):
    """httpx を使ったイベントストア HTTP クライアント。

    呼び出しごとに httpx.AsyncClient を生成し、その呼び出しの結果だけを保持する。
    共有するのは不変の EventStoreConfig のみなので、複数の呼び出しを並行して
    実行してよい。リトライは行わない。
    """

    def __init__(
        self,
        config: EventStoreConfig,
        *,
        id_generator: Callable[[], str] = generate_event_id,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._config = config
        self._id_generator = id_generator
        self._logger = logger or structlog.get_logger(__name__)

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=dict(self._config.headers),
            auth=self._config.auth,
            timeout=self._config.timeout_seconds,
        )

    async def _send(self, client: httpx.AsyncClient, request: httpx.Request, context: str) -> Response:
        try:
            resp = await client.send(request)
        except httpx.HTTPError as e:
            raise TransportError(f"{context}: {e}", cause=e) from e
        error = classify(request, resp)
        if error is not None:
            self._logger.warning(
                "request failed", context=context, status=resp.status_code, code=error.code
            )
            raise error
        return Response.from_httpx(resp)

    async def _read(
        self,
        stream: str,
        direction: Direction,
        version: StreamVersion | None,
        take: Take | None,
    ) -> tuple[list[EventResponse], Response]:
        # 入力検証はリクエスト送信前に行う
        url = build_feed_url(stream, direction, version, take)
        log = self._logger.bind(stream=stream, direction=direction.value)
        async with self._make_client() as client:
            traversal = StreamTraversal(
                client,
                feed_media_type=self._config.feed_media_type,
                take=take,
                logger=log,
            )
            events, resp = await traversal.run(url)
        log.debug("stream read", events=len(events))
        return events, resp

    async def read_backward(
        self,
        stream: str,
        version: StreamVersion | None = None,
        take: Take | None = None,
    ) -> tuple[list[EventResponse], Response]:
        """新しい順にイベントを読み取る。

        take を省略した場合はストリームの先頭 (イベント番号 0) まで全ページを辿る。
        take が残りの履歴より大きい場合は、エラーにせず存在する分だけを返す。

        Returns:
            (EventNumber の降順に並んだイベント列, 最後に取得したページのレスポンス)
        """
        return await self._read(stream, Direction.BACKWARD, version, take)

    async def read_forward(
        self,
        stream: str,
        version: StreamVersion | None = None,
        take: Take | None = None,
    ) -> tuple[list[EventResponse], Response]:
        """古い順にイベントを読み取る。

        version が head 以降の場合は空のイベント列を返す。新着イベントを待つ場合は
        呼び出し側で再度 read_forward を呼ぶ。

        Returns:
            (EventNumber の昇順に並んだイベント列, 最後に取得したページのレスポンス)
        """
        return await self._read(stream, Direction.FORWARD, version, take)

    async def read_feed(self, url: str) -> tuple[Feed, Response]:
        async with self._make_client() as client:
            traversal = StreamTraversal(
                client, feed_media_type=self._config.feed_media_type, logger=self._logger
            )
            return await traversal.fetch_page(url)

    async def get_event(self, url: str) -> tuple[EventResponse, Response]:
        async with self._make_client() as client:
            return await EventResolver(client, logger=self._logger).resolve(url)

    async def append(
        self,
        stream: str,
        event: Event,
        expected_version: int | None = None,
    ) -> Response:
        headers = {"Content-Type": APPEND_MEDIA_TYPE}
        if expected_version is not None:
            headers[EXPECTED_VERSION_HEADER] = str(expected_version)
        async with self._make_client() as client:
            request = client.build_request(
                "POST",
                stream_path(stream),
                headers=headers,
                content=encode_event_for_append(event),
            )
            resp = await self._send(client, request, f"append({stream})")
        self._logger.debug(
            "event appended", stream=stream, event_id=event.event_id, event_type=event.event_type
        )
        return resp

    async def get_stream_metadata(self, stream: str) -> tuple[RawDocument | None, Response]:
        events, resp = await self.read_backward(metadata_stream(stream), take=Take(1))
        if not events:
            return None, resp
        return events[0].event.data, resp

    async def update_stream_metadata(self, stream: str, raw: RawDocument) -> Response:
        event = Event(
            event_id=self._id_generator(),
            event_type=METADATA_EVENT_TYPE,
            data=raw,
        )
        resp = await self.append(metadata_stream(stream), event)
        self._logger.info("stream metadata updated", stream=stream, event_id=event.event_id)
        return resp

    async def delete_stream(self, stream: str, hard: bool = False) -> Response:
        """ストリームを削除する。

        hard=True の場合は ES-HardDelete ヘッダーを付与し、同名ストリームを再作成
        できなくする。削除済みストリームに対しては DeletedError (410) を送出する。
        """
        headers = {HARD_DELETE_HEADER: "true"} if hard else {}
        async with self._make_client() as client:
            request = client.build_request("DELETE", stream_path(stream), headers=headers)
            resp = await self._send(client, request, f"delete_stream({stream})")
        self._logger.info("stream deleted", stream=stream, hard=hard)
        return resp
