"""EventStoreClient 抽象基底クラス"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import Event, EventResponse, Feed, RawDocument, Response, StreamVersion, Take


class EventStoreClient(ABC):
    """イベントストアクライアント抽象基底クラス。"""

    @abstractmethod
    async def read_backward(
        self,
        stream: str,
        version: StreamVersion | None = None,
        take: Take | None = None,
    ) -> tuple[list[EventResponse], Response]:
        """version (省略時は head) から新しい順にイベントを読み取る。"""
        ...

    @abstractmethod
    async def read_forward(
        self,
        stream: str,
        version: StreamVersion | None = None,
        take: Take | None = None,
    ) -> tuple[list[EventResponse], Response]:
        """version (省略時は 0) から古い順にイベントを読み取る。"""
        ...

    @abstractmethod
    async def read_feed(self, url: str) -> tuple[Feed, Response]:
        """フィードページを 1 つ読み取る。"""
        ...

    @abstractmethod
    async def get_event(self, url: str) -> tuple[EventResponse, Response]:
        """単一イベントを読み取る。"""
        ...

    @abstractmethod
    async def append(
        self,
        stream: str,
        event: Event,
        expected_version: int | None = None,
    ) -> Response:
        """イベントをストリームに追記する。"""
        ...

    @abstractmethod
    async def get_stream_metadata(self, stream: str) -> tuple[RawDocument | None, Response]:
        """ストリームの現在のメタデータを返す。未設定の場合は None。"""
        ...

    @abstractmethod
    async def update_stream_metadata(self, stream: str, raw: RawDocument) -> Response:
        """ストリームのメタデータを更新する。"""
        ...

    @abstractmethod
    async def delete_stream(self, stream: str, hard: bool = False) -> Response:
        """ストリームを削除する。"""
        ...
