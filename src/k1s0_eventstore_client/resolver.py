"""イベントリンクから単一イベントを取得する"""

from __future__ import annotations

import httpx
import structlog

from .classifier import classify
from .codec import EVENT_MEDIA_TYPE, decode_event
from .exceptions import TransportError
from .models import EventResponse, Link, Response


class EventResolver:
    """イベント文書を取得してデコードする。

    呼び出し元が所有する httpx.AsyncClient を使い、クライアントの開閉は行わない。
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._client = client
        self._logger = logger or structlog.get_logger(__name__)

    async def resolve(self, link: Link | str) -> tuple[EventResponse, Response]:
        """リンク先のイベントを取得する。

        Raises:
            HttpStatusError: 非 2xx の場合。response 属性にレスポンスを保持する
            TransportError: 接続に失敗した場合
            DecodeError: イベント文書が不正な場合
        """
        uri = link.uri if isinstance(link, Link) else link
        request = self._client.build_request(
            "GET", uri, headers={"Accept": EVENT_MEDIA_TYPE}
        )
        try:
            resp = await self._client.send(request)
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to get event {uri}: {e}", cause=e) from e

        error = classify(request, resp)
        if error is not None:
            self._logger.warning(
                "event request failed", uri=uri, status=resp.status_code, code=error.code
            )
            raise error

        self._logger.debug("event resolved", uri=uri)
        return decode_event(resp.content), Response.from_httpx(resp)
