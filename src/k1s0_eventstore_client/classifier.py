"""HTTP ステータスからドメインエラーへの分類"""

from __future__ import annotations

import httpx

from .exceptions import (
    BadRequestError,
    ConcurrencyViolationError,
    DeletedError,
    EventStoreError,
    NotFoundError,
    TemporarilyUnavailableError,
    UnauthorizedError,
    UnexpectedStatusError,
)
from .models import Response

# 期待バージョン不一致時にサーバーが返す理由句
WRONG_EXPECTED_VERSION_REASON = "wrong expected eventnumber"


def classify(request: httpx.Request, response: httpx.Response) -> EventStoreError | None:
    """レスポンスを検査し、非 2xx であれば対応するエラーを返す。

    ソフト削除とハード削除はレスポンスからは区別できない。削除要求に付与した
    ヘッダーだけで決まる。
    """
    if response.is_success:
        return None

    wrapped = Response.from_httpx(response)
    status = response.status_code
    if status == 400:
        if response.reason_phrase.strip().lower() == WRONG_EXPECTED_VERSION_REASON:
            return ConcurrencyViolationError(request=request, response=wrapped)
        return BadRequestError(request=request, response=wrapped)
    if status == 404:
        return NotFoundError(wrapped)
    if status == 410:
        return DeletedError(wrapped)
    if status == 401:
        return UnauthorizedError(wrapped)
    if status == 503:
        return TemporarilyUnavailableError(wrapped)
    return UnexpectedStatusError(wrapped)


def raise_for_status(request: httpx.Request, response: httpx.Response) -> None:
    """classify の結果がエラーであれば送出する。"""
    error = classify(request, response)
    if error is not None:
        raise error
