"""k1s0 eventstore_client library."""

from .classifier import classify, raise_for_status
from .client import EventStoreClient
from .codec import (
    EVENT_MEDIA_TYPE,
    FEED_JSON_MEDIA_TYPE,
    FEED_MEDIA_TYPE,
    decode_event,
    decode_feed,
    encode_event_document,
    encode_event_for_append,
    encode_feed,
)
from .config import EventStoreConfig, load_config
from .exceptions import (
    BadRequestError,
    ConcurrencyViolationError,
    ConfigError,
    DecodeError,
    EncodeError,
    DeletedError,
    EventStoreError,
    EventStoreErrorCodes,
    HttpStatusError,
    InvalidDirectionError,
    InvalidDirectionVersionCombinationError,
    InvalidTakeError,
    InvalidVersionError,
    NotFoundError,
    TemporarilyUnavailableError,
    TransportError,
    UnauthorizedError,
    UnexpectedStatusError,
)
from .http_client import HttpEventStoreClient
from .logger import new_logger
from .models import (
    Author,
    Direction,
    Event,
    EventResponse,
    Feed,
    FeedEntry,
    Link,
    LinkRelation,
    RawDocument,
    Response,
    StreamVersion,
    Take,
)
from .resolver import EventResolver
from .serialization import JsonPayloadSerializer, PayloadSerializer, generate_event_id, new_event
from .traversal import StreamTraversal
from .urls import DEFAULT_PAGE_SIZE, build_feed_path, build_feed_url

__all__ = [
    "EventStoreClient",
    "HttpEventStoreClient",
    "EventStoreConfig",
    "load_config",
    "new_logger",
    "StreamTraversal",
    "EventResolver",
    "Author",
    "Direction",
    "Event",
    "EventResponse",
    "Feed",
    "FeedEntry",
    "Link",
    "LinkRelation",
    "RawDocument",
    "Response",
    "StreamVersion",
    "Take",
    "PayloadSerializer",
    "JsonPayloadSerializer",
    "generate_event_id",
    "new_event",
    "DEFAULT_PAGE_SIZE",
    "build_feed_path",
    "build_feed_url",
    "FEED_MEDIA_TYPE",
    "FEED_JSON_MEDIA_TYPE",
    "EVENT_MEDIA_TYPE",
    "decode_feed",
    "decode_event",
    "encode_feed",
    "encode_event_document",
    "encode_event_for_append",
    "classify",
    "raise_for_status",
    "EventStoreError",
    "EventStoreErrorCodes",
    "HttpStatusError",
    "InvalidDirectionError",
    "InvalidVersionError",
    "InvalidDirectionVersionCombinationError",
    "InvalidTakeError",
    "BadRequestError",
    "ConcurrencyViolationError",
    "NotFoundError",
    "DeletedError",
    "UnexpectedStatusError",
    "UnauthorizedError",
    "TemporarilyUnavailableError",
    "TransportError",
    "DecodeError",
    "EncodeError",
    "ConfigError",
]
