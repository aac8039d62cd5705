"""フィード・イベント文書コーデックのユニットテスト"""

import json

import pytest
from conftest import BASE_URL, FeedSimulator, make_event_response
from k1s0_eventstore_client.codec import (
    FEED_JSON_MEDIA_TYPE,
    FEED_MEDIA_TYPE,
    decode_event,
    decode_feed,
    encode_event_document,
    encode_event_for_append,
    encode_feed,
)
from k1s0_eventstore_client.exceptions import DecodeError, EncodeError, EventStoreErrorCodes
from k1s0_eventstore_client.models import Event, LinkRelation, RawDocument


def make_feed(embed: bool = False):
    return FeedSimulator("unmarshal-feed", 5, embed=embed).build_page("head", "backward", 2)


@pytest.mark.parametrize("media_type", [FEED_JSON_MEDIA_TYPE, FEED_MEDIA_TYPE])
def test_feed_round_trip(media_type: str) -> None:
    """エンコードしたフィードをデコードすると元の構造に戻ること。"""
    feed = make_feed()
    assert decode_feed(encode_feed(feed, media_type), media_type) == feed


def test_feed_round_trip_with_embedded_content() -> None:
    """埋め込み本体を持つエントリも両形式で同じ構造になること。"""
    feed = make_feed(embed=True)
    from_json = decode_feed(encode_feed(feed, FEED_JSON_MEDIA_TYPE))
    from_xml = decode_feed(encode_feed(feed, FEED_MEDIA_TYPE))
    assert from_json == feed
    assert from_xml == feed


def test_decode_feed_sniffs_representation() -> None:
    """Content-Type がない場合は内容から形式を判定すること。"""
    feed = make_feed()
    assert decode_feed(encode_feed(feed, FEED_MEDIA_TYPE)) == feed
    assert decode_feed(encode_feed(feed, FEED_JSON_MEDIA_TYPE)) == feed


def test_decode_feed_content_type_with_charset() -> None:
    feed = make_feed()
    content = encode_feed(feed, FEED_MEDIA_TYPE)
    assert decode_feed(content, "application/atom+xml; charset=utf-8") == feed


def test_decode_feed_entries_and_links() -> None:
    """エントリは新しい順で、next リンクを持つこと。"""
    feed = decode_feed(encode_feed(make_feed()))
    assert [e.title for e in feed.entries] == ["4@unmarshal-feed", "3@unmarshal-feed"]
    assert feed.link(LinkRelation.NEXT) == f"{BASE_URL}/streams/unmarshal-feed/2/backward/2"
    assert feed.link(LinkRelation.PREVIOUS) is None
    assert feed.entries[0].event_link() == f"{BASE_URL}/streams/unmarshal-feed/4"


def test_decode_atom_xml_document() -> None:
    """サーバーが返す Atom XML を解析できること。"""
    xml = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Event stream 'some-stream'</title>
  <id>http://eventstore:2113/streams/some-stream</id>
  <updated>2016-12-01T10:00:00Z</updated>
  <author><name>EventStore</name></author>
  <link href="http://eventstore:2113/streams/some-stream" rel="self" />
  <link href="http://eventstore:2113/streams/some-stream/0/backward/20" rel="next" />
  <entry>
    <title>1@some-stream</title>
    <id>http://eventstore:2113/streams/some-stream/1</id>
    <updated>2016-12-01T10:00:00Z</updated>
    <author><name>EventStore</name></author>
    <summary>EventTypeX</summary>
    <link href="http://eventstore:2113/streams/some-stream/1" rel="edit" />
    <link href="http://eventstore:2113/streams/some-stream/1" rel="alternate" />
  </entry>
</feed>"""
    feed = decode_feed(xml, FEED_MEDIA_TYPE)
    assert feed.title == "Event stream 'some-stream'"
    assert feed.author.name == "EventStore"
    assert feed.link("next") == "http://eventstore:2113/streams/some-stream/0/backward/20"
    assert len(feed.entries) == 1
    assert feed.entries[0].summary == "EventTypeX"
    assert feed.entries[0].content is None


def test_decode_feed_invalid_json() -> None:
    """不正な JSON で DecodeError が発生すること。"""
    with pytest.raises(DecodeError) as exc_info:
        decode_feed(b"{not json", FEED_JSON_MEDIA_TYPE)
    assert exc_info.value.code == EventStoreErrorCodes.DECODE_ERROR
    assert exc_info.value.__cause__ is not None


def test_decode_feed_invalid_xml() -> None:
    with pytest.raises(DecodeError):
        decode_feed(b"<feed><unclosed></feed>", FEED_MEDIA_TYPE)


def test_decode_feed_wrong_root_element() -> None:
    with pytest.raises(DecodeError):
        decode_feed(b"<rss></rss>", FEED_MEDIA_TYPE)


def test_event_document_round_trip() -> None:
    """イベント文書のエンコードとデコードが対応すること。"""
    er = make_event_response("GetEventStream", 299)
    assert decode_event(encode_event_document(er)) == er


def test_decode_flat_event_document() -> None:
    """content を持たないフラットなイベント文書を解析できること。"""
    doc = {
        "eventId": "some-uuid",
        "eventType": "SomeEventType",
        "eventNumber": 3,
        "data": {"my_field_1": 555},
        "metaData": {"my_meta_field_1": 1010},
        "timestamp": "2016-12-01T10:00:00Z",
    }
    er = decode_event(json.dumps(doc).encode())
    assert er.event_number == 3
    assert er.event.event_type == "SomeEventType"
    assert er.event.data.json() == {"my_field_1": 555}
    assert er.event.metadata is not None
    assert er.event.metadata.json() == {"my_meta_field_1": 1010}
    assert er.timestamp == "2016-12-01T10:00:00Z"


def test_decode_event_missing_event_number() -> None:
    """eventNumber がない文書で DecodeError が発生すること。"""
    with pytest.raises(DecodeError):
        decode_event(b'{"eventType": "X", "data": {}}')


def test_encode_event_for_append() -> None:
    """追記用エンベロープのフィールド。"""
    event = Event(
        event_id="some-uuid",
        event_type="SomeEventType",
        data=RawDocument.from_text("some-string"),
    )
    body = json.loads(encode_event_for_append(event))
    assert body == {"eventType": "SomeEventType", "eventId": "some-uuid", "data": "some-string"}


def test_encode_event_for_append_with_metadata() -> None:
    """JSON ドキュメントは JSON 値として埋め込まれること。"""
    event = Event(
        event_id="some-uuid",
        event_type="MyEventType",
        data=RawDocument.from_json({"my_field_1": 555, "my_field_2": "Some string"}),
        metadata=RawDocument.from_json({"my_meta_field_1": 1010}),
    )
    body = json.loads(encode_event_for_append(event))
    assert body["data"] == {"my_field_1": 555, "my_field_2": "Some string"}
    assert body["metaData"] == {"my_meta_field_1": 1010}


def test_decode_atom_non_object_content() -> None:
    """content が JSON オブジェクトでないエントリは DecodeError になること。"""
    xml = (
        b'<feed xmlns="http://www.w3.org/2005/Atom"><title>s</title>'
        b'<entry><id>http://eventstore:2113/streams/s/0</id>'
        b'<content type="application/json">5</content></entry></feed>'
    )
    with pytest.raises(DecodeError):
        decode_feed(xml, FEED_MEDIA_TYPE)


def test_decode_atom_rejects_entity_declarations() -> None:
    """エンティティ宣言を含む XML は展開せずに DecodeError とすること。"""
    xml = b"""<?xml version="1.0"?>
<!DOCTYPE feed [<!ENTITY a "aaaaaaaaaa"><!ENTITY b "&a;&a;&a;&a;&a;&a;&a;&a;&a;&a;">]>
<feed xmlns="http://www.w3.org/2005/Atom"><title>&b;</title></feed>"""
    with pytest.raises(DecodeError) as exc_info:
        decode_feed(xml, FEED_MEDIA_TYPE)
    assert exc_info.value.__cause__ is not None


def test_feed_event_urls() -> None:
    """各エントリのイベント URI をページ内の順に返すこと。"""
    feed = FeedSimulator("some-stream", 2).build_page("head", "backward", 2)
    assert feed.event_urls() == [
        f"{BASE_URL}/streams/some-stream/1",
        f"{BASE_URL}/streams/some-stream/0",
    ]
    assert decode_feed(encode_feed(feed, FEED_MEDIA_TYPE)).event_urls() == feed.event_urls()


def test_encode_event_for_append_json_with_charset() -> None:
    """パラメータ付きの JSON メディアタイプも JSON 値として埋め込まれること。"""
    event = Event(
        event_id="some-uuid",
        event_type="E",
        data=RawDocument(b'{"a":1}', "application/json; charset=utf-8"),
    )
    assert json.loads(encode_event_for_append(event))["data"] == {"a": 1}


def test_encode_event_for_append_undecodable_data() -> None:
    """UTF-8 として解釈できないデータは EncodeError になること。"""
    event = Event(
        event_id="some-uuid",
        event_type="E",
        data=RawDocument(b"\xff\xfe\x00", "application/octet-stream"),
    )
    with pytest.raises(EncodeError) as exc_info:
        encode_event_for_append(event)
    assert exc_info.value.code == EventStoreErrorCodes.ENCODE_ERROR
