"""イベントペイロードのシリアライズフックとイベント生成"""

from __future__ import annotations

import json
import uuid
from collections.abc import Callable
from typing import Any, Protocol

from .models import JSON_CONTENT_TYPE, Event, RawDocument


class PayloadSerializer(Protocol):
    """Data / MetaData を RawDocument と相互変換するプロトコル。"""

    def serialize(self, value: Any) -> RawDocument: ...

    def deserialize(self, document: RawDocument) -> Any: ...


class JsonPayloadSerializer:
    """JSON によるペイロードシリアライザ。"""

    def serialize(self, value: Any) -> RawDocument:
        return RawDocument(
            content=json.dumps(value, separators=(",", ":")).encode("utf-8"),
            content_type=JSON_CONTENT_TYPE,
        )

    def deserialize(self, document: RawDocument) -> Any:
        return json.loads(document.content)


JSON_SERIALIZER = JsonPayloadSerializer()


def generate_event_id() -> str:
    """UUID v4 形式のイベントIDを生成する。"""
    return str(uuid.uuid4())


def new_event(
    event_type: str,
    data: Any,
    metadata: Any = None,
    *,
    event_id: str | None = None,
    serializer: PayloadSerializer = JSON_SERIALIZER,
    id_generator: Callable[[], str] = generate_event_id,
) -> Event:
    """追記用の Event を生成する。

    Args:
        event_type: イベント種別（必須）
        data: イベントデータ。RawDocument はそのまま使い、それ以外は serializer で変換する
        metadata: イベントメタデータ（オプション）
        event_id: イベントID。省略時は id_generator で生成する
        serializer: ペイロードシリアライザ
        id_generator: イベントID生成関数
    """
    if not event_type:
        raise ValueError("event_type is required")

    def _to_document(value: Any) -> RawDocument:
        if isinstance(value, RawDocument):
            return value
        return serializer.serialize(value)

    return Event(
        event_id=event_id or id_generator(),
        event_type=event_type,
        data=_to_document(data),
        metadata=None if metadata is None else _to_document(metadata),
    )
