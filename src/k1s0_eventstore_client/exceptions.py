"""eventstore_client ライブラリの例外型定義"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from .models import Response


class EventStoreError(Exception):
    """eventstore_client ライブラリのエラー基底クラス。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class EventStoreErrorCodes:
    """EventStoreError のエラーコード定数。"""

    INVALID_DIRECTION: str = "INVALID_DIRECTION"
    INVALID_VERSION: str = "INVALID_VERSION"
    INVALID_DIRECTION_VERSION_COMBINATION: str = "INVALID_DIRECTION_VERSION_COMBINATION"
    INVALID_TAKE: str = "INVALID_TAKE"
    BAD_REQUEST: str = "BAD_REQUEST"
    CONCURRENCY_VIOLATION: str = "CONCURRENCY_VIOLATION"
    NOT_FOUND: str = "NOT_FOUND"
    DELETED: str = "DELETED"
    UNAUTHORIZED: str = "UNAUTHORIZED"
    TEMPORARILY_UNAVAILABLE: str = "TEMPORARILY_UNAVAILABLE"
    UNEXPECTED_STATUS: str = "UNEXPECTED_STATUS"
    TRANSPORT_ERROR: str = "TRANSPORT_ERROR"
    DECODE_ERROR: str = "DECODE_ERROR"
    ENCODE_ERROR: str = "ENCODE_ERROR"
    CONFIG_ERROR: str = "CONFIG_ERROR"


# --- 入力検証エラー（ネットワーク呼び出し前に送出される） ---


class InvalidDirectionError(EventStoreError):
    """読み取り方向が forward / backward 以外。"""

    def __init__(self, direction: object) -> None:
        self.direction = direction
        super().__init__(
            code=EventStoreErrorCodes.INVALID_DIRECTION,
            message=f'invalid direction {direction!r}: allowed values are "forward" or "backward"',
        )


class InvalidVersionError(EventStoreError):
    """負のストリームバージョン。"""

    def __init__(self, version: int) -> None:
        self.version = version
        super().__init__(
            code=EventStoreErrorCodes.INVALID_VERSION,
            message=f"invalid stream version {version}: must be >= 0",
        )


class InvalidDirectionVersionCombinationError(EventStoreError):
    """head と forward の組み合わせ。"""

    def __init__(self, direction: str) -> None:
        self.direction = direction
        super().__init__(
            code=EventStoreErrorCodes.INVALID_DIRECTION_VERSION_COMBINATION,
            message=f"invalid direction ({direction}) and version (head) combination",
        )


class InvalidTakeError(EventStoreError):
    """take が 1 未満。"""

    def __init__(self, take: int) -> None:
        self.take = take
        super().__init__(
            code=EventStoreErrorCodes.INVALID_TAKE,
            message=f"invalid take {take}: must be >= 1",
        )


# --- HTTP ステータスから分類されるエラー ---


class HttpStatusError(EventStoreError):
    """非 2xx レスポンスに対応するエラーの基底クラス。"""

    def __init__(self, code: str, message: str, response: Response) -> None:
        self.response = response
        super().__init__(code=code, message=message)

    @property
    def status_code(self) -> int:
        return self.response.status_code


class BadRequestError(HttpStatusError):
    """400 Bad Request。送信したリクエストを保持する。"""

    def __init__(
        self,
        request: httpx.Request,
        response: Response,
        code: str = EventStoreErrorCodes.BAD_REQUEST,
    ) -> None:
        self.request = request
        super().__init__(
            code=code,
            message=f"{request.method} {request.url}: {response.status_message}",
            response=response,
        )


class ConcurrencyViolationError(BadRequestError):
    """期待バージョン不一致による追記の拒否。"""

    def __init__(self, request: httpx.Request, response: Response) -> None:
        super().__init__(
            request=request,
            response=response,
            code=EventStoreErrorCodes.CONCURRENCY_VIOLATION,
        )


class NotFoundError(HttpStatusError):
    """404 Not Found。"""

    def __init__(self, response: Response) -> None:
        super().__init__(
            code=EventStoreErrorCodes.NOT_FOUND,
            message=f"not found: HTTP {response.status_message}",
            response=response,
        )


class DeletedError(HttpStatusError):
    """410 Gone。ストリームは削除済み。"""

    def __init__(self, response: Response) -> None:
        super().__init__(
            code=EventStoreErrorCodes.DELETED,
            message=f"stream has been deleted: HTTP {response.status_message}",
            response=response,
        )


class UnexpectedStatusError(HttpStatusError):
    """その他の非 2xx ステータス。"""

    def __init__(
        self,
        response: Response,
        code: str = EventStoreErrorCodes.UNEXPECTED_STATUS,
    ) -> None:
        super().__init__(
            code=code,
            message=f"unexpected status: HTTP {response.status_message}",
            response=response,
        )


class UnauthorizedError(UnexpectedStatusError):
    """401 Unauthorized。"""

    def __init__(self, response: Response) -> None:
        super().__init__(response=response, code=EventStoreErrorCodes.UNAUTHORIZED)


class TemporarilyUnavailableError(UnexpectedStatusError):
    """503 Service Unavailable。"""

    def __init__(self, response: Response) -> None:
        super().__init__(response=response, code=EventStoreErrorCodes.TEMPORARILY_UNAVAILABLE)


# --- その他 ---


class TransportError(EventStoreError):
    """接続・I/O 失敗。httpx の例外を cause として保持する。"""

    def __init__(self, message: str, cause: Exception) -> None:
        super().__init__(code=EventStoreErrorCodes.TRANSPORT_ERROR, message=message, cause=cause)


class DecodeError(EventStoreError):
    """フィード・イベント文書の解析失敗。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(code=EventStoreErrorCodes.DECODE_ERROR, message=message, cause=cause)


class EncodeError(EventStoreError):
    """追記用エンベロープに埋め込めない Data / MetaData。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(code=EventStoreErrorCodes.ENCODE_ERROR, message=message, cause=cause)


class ConfigError(EventStoreError):
    """設定ファイルの読み込み・検証失敗。"""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(code=EventStoreErrorCodes.CONFIG_ERROR, message=message, cause=cause)
