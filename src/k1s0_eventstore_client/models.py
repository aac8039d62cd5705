"""eventstore_client データモデル"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from .serialization import PayloadSerializer

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"


class Direction(StrEnum):
    """フィードの読み取り方向。"""

    FORWARD = "forward"
    BACKWARD = "backward"


class LinkRelation(StrEnum):
    """Atom リンクのリレーション。"""

    SELF = "self"
    FIRST = "first"
    LAST = "last"
    NEXT = "next"
    PREVIOUS = "previous"
    METADATA = "metadata"
    EDIT = "edit"
    ALTERNATE = "alternate"


@dataclass(frozen=True)
class StreamVersion:
    """ストリーム内の位置。None で渡された場合は head を表す。"""

    number: int


@dataclass(frozen=True)
class Take:
    """1 回の読み取りで返すイベント数の上限。"""

    number: int


@dataclass(frozen=True)
class Link:
    """フィード・エントリのリンク。"""

    relation: str
    uri: str


@dataclass(frozen=True)
class Author:
    """フィードの作成者。"""

    name: str = ""


@dataclass(frozen=True)
class RawDocument:
    """シリアライズ済みのイベント Data / MetaData。

    内容は呼び出し側が定義する不透明なバイト列で、content_type はその形式を示す。
    """

    content: bytes
    content_type: str = JSON_CONTENT_TYPE

    @classmethod
    def from_json(cls, value: Any) -> RawDocument:
        return cls(
            content=json.dumps(value, separators=(",", ":")).encode("utf-8"),
            content_type=JSON_CONTENT_TYPE,
        )

    @classmethod
    def from_text(cls, value: str) -> RawDocument:
        return cls(content=value.encode("utf-8"), content_type=TEXT_CONTENT_TYPE)

    @property
    def is_json(self) -> bool:
        media_type = self.content_type.split(";", 1)[0].strip().lower()
        return media_type == JSON_CONTENT_TYPE

    def json(self) -> Any:
        """JSON として解釈した値を返す。"""
        return json.loads(self.content)

    def text(self) -> str:
        return self.content.decode("utf-8")


@dataclass(frozen=True)
class Event:
    """ストリームに追記するイベント。"""

    event_id: str
    event_type: str
    data: RawDocument
    metadata: RawDocument | None = None


@dataclass(frozen=True)
class EventResponse:
    """永続化済みイベントの読み取り結果。event_number はサーバーが採番する。"""

    event: Event
    event_number: int
    stream_id: str = ""
    links: tuple[Link, ...] = ()
    timestamp: str = ""
    title: str = ""
    id: str = ""
    summary: str = ""

    def decode_data(self, serializer: PayloadSerializer) -> Any:
        return serializer.deserialize(self.event.data)

    def decode_metadata(self, serializer: PayloadSerializer) -> Any:
        if self.event.metadata is None:
            return None
        return serializer.deserialize(self.event.metadata)


@dataclass
class FeedEntry:
    """フィードページの 1 エントリ。"""

    title: str = ""
    id: str = ""
    updated: str = ""
    author: Author = field(default_factory=Author)
    summary: str = ""
    links: list[Link] = field(default_factory=list)
    # embed 指定時にサーバーが埋め込むイベント本体
    content: dict[str, Any] | None = None

    def link(self, relation: str) -> str | None:
        for link in self.links:
            if link.relation == relation:
                return link.uri
        return None

    def event_link(self) -> str:
        """イベント本体を取得するための URI を返す。"""
        return (
            self.link(LinkRelation.ALTERNATE)
            or self.link(LinkRelation.EDIT)
            or self.id
        )


@dataclass
class Feed:
    """ストリームのフィード 1 ページ。

    backward ページのエントリは新しい順、forward ページのエントリは古い順に並ぶ。
    """

    title: str = ""
    id: str = ""
    updated: str = ""
    author: Author = field(default_factory=Author)
    links: list[Link] = field(default_factory=list)
    entries: list[FeedEntry] = field(default_factory=list)

    def link(self, relation: str) -> str | None:
        """指定リレーションの最初のリンク URI を返す。"""
        for link in self.links:
            if link.relation == relation:
                return link.uri
        return None

    def event_urls(self) -> list[str]:
        """各エントリのイベント URI をページ内の順に返す。"""
        return [entry.event_link() for entry in self.entries]


@dataclass(frozen=True)
class Response:
    """呼び出し元に公開する HTTP レスポンスの薄いラッパー。"""

    status_code: int
    status_message: str
    raw: httpx.Response

    @classmethod
    def from_httpx(cls, resp: httpx.Response) -> Response:
        return cls(
            status_code=resp.status_code,
            status_message=f"{resp.status_code} {resp.reason_phrase}",
            raw=resp,
        )
