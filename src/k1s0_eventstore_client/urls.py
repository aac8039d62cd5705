"""フィード URL の組み立て"""

from __future__ import annotations

from .exceptions import (
    InvalidDirectionError,
    InvalidDirectionVersionCombinationError,
    InvalidTakeError,
    InvalidVersionError,
)
from .models import Direction, StreamVersion, Take

DEFAULT_PAGE_SIZE = 100
HEAD = -1
HEAD_SEGMENT = "head"


def stream_path(stream: str) -> str:
    """ストリームのルートリソースのパスを返す。"""
    return f"/streams/{stream}"


def metadata_stream(stream: str) -> str:
    """ストリームに対応するメタデータストリーム名を返す。"""
    return f"{stream}/metadata"


def _parse_direction(direction: Direction | str) -> Direction:
    try:
        return Direction(direction)
    except ValueError as e:
        raise InvalidDirectionError(direction) from e


def build_feed_path(
    stream: str,
    direction: Direction | str,
    version: int | None,
    page_size: int,
) -> str:
    """フィードページのリクエストパスを返す。

    Args:
        stream: ストリーム名
        direction: "forward" または "backward"
        version: 開始位置。None または -1 は head を表す
        page_size: 1 ページあたりのエントリ数

    Raises:
        InvalidDirectionError: direction が不正な場合
        InvalidDirectionVersionCombinationError: head と forward の組み合わせ
        InvalidVersionError: -1 未満のバージョン
    """
    parsed = _parse_direction(direction)
    if version is None or version == HEAD:
        if parsed is not Direction.BACKWARD:
            raise InvalidDirectionVersionCombinationError(parsed.value)
        segment = HEAD_SEGMENT
    elif version < 0:
        raise InvalidVersionError(version)
    else:
        segment = str(version)
    return f"{stream_path(stream)}/{segment}/{parsed.value}/{page_size}"


def build_feed_url(
    stream: str,
    direction: Direction | str | None,
    version: StreamVersion | None,
    take: Take | None,
) -> str:
    """読み取り要求から最初のフィードページのパスを返す。

    direction が空の場合は backward とみなす。take が既定ページサイズ未満の
    場合のみページサイズとして使い、それ以外は既定値で複数ページを辿る。
    """
    parsed = _parse_direction(direction) if direction else Direction.BACKWARD

    if version is not None and version.number < 0:
        raise InvalidVersionError(version.number)
    if take is not None and take.number < 1:
        raise InvalidTakeError(take.number)

    page_size = DEFAULT_PAGE_SIZE
    if take is not None and take.number < DEFAULT_PAGE_SIZE:
        page_size = take.number

    number: int | None
    if version is not None:
        number = version.number
    elif parsed is Direction.FORWARD:
        number = 0
    else:
        number = None
    return build_feed_path(stream, parsed, number, page_size)
