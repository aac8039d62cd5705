"""フィード文書・イベント文書のエンコード / デコード

フィードページは Atom XML と Atom JSON のどちらでも受け取れる。両者は同じ
Feed エンティティにデコードされる。
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from typing import Any

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException

from .exceptions import DecodeError, EncodeError
from .models import (
    JSON_CONTENT_TYPE,
    Author,
    Event,
    EventResponse,
    Feed,
    FeedEntry,
    Link,
    RawDocument,
)

FEED_MEDIA_TYPE = "application/atom+xml"
FEED_JSON_MEDIA_TYPE = "application/vnd.eventstore.atom+json"
EVENT_MEDIA_TYPE = "application/vnd.eventstore.atom+json"
APPEND_MEDIA_TYPE = "application/json"

ATOM_NS = "http://www.w3.org/2005/Atom"
_NS = {"atom": ATOM_NS}

_JSON_ERRORS = (ValueError, KeyError, TypeError, AttributeError)


# --- Data / MetaData ---


def _document_from_value(value: Any) -> RawDocument | None:
    if value is None:
        return None
    if isinstance(value, str):
        return RawDocument.from_text(value)
    return RawDocument.from_json(value)


def _value_from_document(document: RawDocument) -> Any:
    try:
        if document.is_json:
            return document.json()
        return document.text()
    except ValueError as e:
        raise EncodeError(f"Document cannot be embedded ({document.content_type}): {e}", cause=e) from e


def encode_event_for_append(event: Event) -> bytes:
    """追記用の JSON エンベロープを返す。"""
    body: dict[str, Any] = {
        "eventType": event.event_type,
        "eventId": event.event_id,
        "data": _value_from_document(event.data),
    }
    if event.metadata is not None:
        body["metaData"] = _value_from_document(event.metadata)
    return json.dumps(body, separators=(",", ":")).encode("utf-8")


# --- イベント文書 ---


def _links_from_json(items: list[dict[str, Any]] | None) -> list[Link]:
    return [Link(relation=item["relation"], uri=item["uri"]) for item in items or []]


def _links_to_json(links: list[Link] | tuple[Link, ...]) -> list[dict[str, str]]:
    return [{"uri": link.uri, "relation": link.relation} for link in links]


def event_response_from_document(doc: dict[str, Any]) -> EventResponse:
    """デコード済みのイベント文書 (またはエントリの埋め込み本体) から EventResponse を生成する。"""
    body = doc["content"] if isinstance(doc.get("content"), dict) else doc
    metadata = body.get("metadata", body.get("metaData"))
    event = Event(
        event_id=body.get("eventId", ""),
        event_type=body["eventType"],
        data=_document_from_value(body.get("data")) or RawDocument(b""),
        metadata=_document_from_value(metadata),
    )
    return EventResponse(
        event=event,
        event_number=int(body["eventNumber"]),
        stream_id=body.get("eventStreamId", body.get("streamId", "")),
        links=tuple(_links_from_json(doc.get("links"))),
        timestamp=doc.get("updated", body.get("timestamp", "")),
        title=doc.get("title", ""),
        id=doc.get("id", ""),
        summary=doc.get("summary", ""),
    )


def decode_event(content: bytes) -> EventResponse:
    """ベンダーメディアタイプのイベント文書をデコードする。"""
    try:
        doc = json.loads(content)
        return event_response_from_document(doc)
    except _JSON_ERRORS as e:
        raise DecodeError(f"Failed to decode event document: {e}", cause=e) from e


def encode_event_document(response: EventResponse) -> bytes:
    """EventResponse をベンダーメディアタイプのイベント文書にエンコードする。"""
    event = response.event
    body: dict[str, Any] = {
        "eventStreamId": response.stream_id,
        "eventNumber": response.event_number,
        "eventType": event.event_type,
        "eventId": event.event_id,
        "data": _value_from_document(event.data),
    }
    if event.metadata is not None:
        body["metadata"] = _value_from_document(event.metadata)
    doc = {
        "title": response.title,
        "id": response.id,
        "updated": response.timestamp,
        "summary": response.summary,
        "content": body,
        "links": _links_to_json(response.links),
    }
    return json.dumps(doc).encode("utf-8")


# --- フィード (JSON) ---


def _entry_from_json(item: dict[str, Any]) -> FeedEntry:
    content = item.get("content")
    return FeedEntry(
        title=item.get("title", ""),
        id=item.get("id", ""),
        updated=item.get("updated", ""),
        author=Author(name=(item.get("author") or {}).get("name", "")),
        summary=item.get("summary", ""),
        links=_links_from_json(item.get("links")),
        content=content if isinstance(content, dict) else None,
    )


def _decode_json_feed(content: bytes) -> Feed:
    try:
        doc = json.loads(content)
        return Feed(
            title=doc.get("title", ""),
            id=doc.get("id", ""),
            updated=doc.get("updated", ""),
            author=Author(name=(doc.get("author") or {}).get("name", "")),
            links=_links_from_json(doc.get("links")),
            entries=[_entry_from_json(item) for item in doc.get("entries") or []],
        )
    except _JSON_ERRORS as e:
        raise DecodeError(f"Failed to decode JSON feed: {e}", cause=e) from e


def _encode_json_feed(feed: Feed) -> bytes:
    entries: list[dict[str, Any]] = []
    for entry in feed.entries:
        item: dict[str, Any] = {
            "title": entry.title,
            "id": entry.id,
            "updated": entry.updated,
            "author": {"name": entry.author.name},
            "summary": entry.summary,
            "links": _links_to_json(entry.links),
        }
        if entry.content is not None:
            item["content"] = entry.content
        entries.append(item)
    doc = {
        "title": feed.title,
        "id": feed.id,
        "updated": feed.updated,
        "author": {"name": feed.author.name},
        "links": _links_to_json(feed.links),
        "entries": entries,
    }
    return json.dumps(doc, indent=2).encode("utf-8")


# --- フィード (Atom XML) ---


def _text(element: ET.Element, tag: str) -> str:
    child = element.find(f"atom:{tag}", _NS)
    if child is None or child.text is None:
        return ""
    return child.text


def _author_from_xml(element: ET.Element) -> Author:
    author = element.find("atom:author", _NS)
    if author is None:
        return Author()
    return Author(name=_text(author, "name"))


def _links_from_xml(element: ET.Element) -> list[Link]:
    return [
        Link(relation=link.get("rel", ""), uri=link.get("href", ""))
        for link in element.findall("atom:link", _NS)
    ]


def _entry_from_xml(element: ET.Element) -> FeedEntry:
    content: dict[str, Any] | None = None
    node = element.find("atom:content", _NS)
    if node is not None and node.text:
        parsed = json.loads(node.text)
        if not isinstance(parsed, dict):
            raise DecodeError(f"Entry content is not a JSON object: {_text(element, 'id')}")
        content = parsed
    return FeedEntry(
        title=_text(element, "title"),
        id=_text(element, "id"),
        updated=_text(element, "updated"),
        author=_author_from_xml(element),
        summary=_text(element, "summary"),
        links=_links_from_xml(element),
        content=content,
    )


def _decode_xml_feed(content: bytes) -> Feed:
    try:
        root = DefusedET.fromstring(content)
    except (ET.ParseError, DefusedXmlException) as e:
        raise DecodeError(f"Failed to parse Atom feed: {e}", cause=e) from e
    if root.tag != f"{{{ATOM_NS}}}feed":
        raise DecodeError(f"Unexpected root element: {root.tag}")
    try:
        return Feed(
            title=_text(root, "title"),
            id=_text(root, "id"),
            updated=_text(root, "updated"),
            author=_author_from_xml(root),
            links=_links_from_xml(root),
            entries=[_entry_from_xml(e) for e in root.findall("atom:entry", _NS)],
        )
    except ValueError as e:
        raise DecodeError(f"Failed to decode Atom feed entry content: {e}", cause=e) from e


def _sub(parent: ET.Element, tag: str, text: str) -> ET.Element:
    child = ET.SubElement(parent, f"{{{ATOM_NS}}}{tag}")
    child.text = text
    return child


def _append_common_xml(element: ET.Element, title: str, id: str, updated: str, author: Author) -> None:
    _sub(element, "title", title)
    _sub(element, "id", id)
    _sub(element, "updated", updated)
    author_el = ET.SubElement(element, f"{{{ATOM_NS}}}author")
    _sub(author_el, "name", author.name)


def _append_links_xml(element: ET.Element, links: list[Link]) -> None:
    for link in links:
        ET.SubElement(element, f"{{{ATOM_NS}}}link", {"href": link.uri, "rel": link.relation})


def _encode_xml_feed(feed: Feed) -> bytes:
    ET.register_namespace("", ATOM_NS)
    root = ET.Element(f"{{{ATOM_NS}}}feed")
    _append_common_xml(root, feed.title, feed.id, feed.updated, feed.author)
    _append_links_xml(root, feed.links)
    for entry in feed.entries:
        el = ET.SubElement(root, f"{{{ATOM_NS}}}entry")
        _append_common_xml(el, entry.title, entry.id, entry.updated, entry.author)
        _sub(el, "summary", entry.summary)
        _append_links_xml(el, entry.links)
        if entry.content is not None:
            node = _sub(el, "content", json.dumps(entry.content))
            node.set("type", JSON_CONTENT_TYPE)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


# --- 公開 API ---


def _is_xml(content: bytes, content_type: str | None) -> bool:
    if content_type:
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type.endswith("xml"):
            return True
        if media_type.endswith("json"):
            return False
    return content.lstrip().startswith(b"<")


def decode_feed(content: bytes, content_type: str | None = None) -> Feed:
    """フィードページをデコードする。

    Args:
        content: レスポンスボディ
        content_type: Content-Type ヘッダー。省略時は内容から判定する

    Raises:
        DecodeError: 文書が不正な場合
    """
    if _is_xml(content, content_type):
        return _decode_xml_feed(content)
    return _decode_json_feed(content)


def encode_feed(feed: Feed, media_type: str = FEED_JSON_MEDIA_TYPE) -> bytes:
    """Feed を指定メディアタイプの文書にエンコードする。"""
    if media_type == FEED_MEDIA_TYPE:
        return _encode_xml_feed(feed)
    return _encode_json_feed(feed)
