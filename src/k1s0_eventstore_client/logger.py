"""structlog ベースのロガー設定

クライアントのログには Basic 認証の資格情報やリクエストヘッダーが渡り得るため、
出力前にそれらを伏せるプロセッサを挟む。
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

from .config import EventStoreConfig

LIBRARY_NAME = "k1s0_eventstore_client"

REDACTED = "***"
_SENSITIVE_KEYS = frozenset({"password", "authorization", "auth"})


def redact_credentials(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """資格情報に当たるキーの値を伏せる structlog プロセッサ。"""
    for key, value in event_dict.items():
        if key.lower() in _SENSITIVE_KEYS and value:
            event_dict[key] = REDACTED
        elif key == "headers" and isinstance(value, dict):
            event_dict[key] = {
                k: REDACTED if k.lower() in _SENSITIVE_KEYS else v for k, v in value.items()
            }
    return event_dict


def new_logger(
    level: str = "INFO",
    format: str = "json",
    config: EventStoreConfig | None = None,
) -> structlog.stdlib.BoundLogger:
    """HttpEventStoreClient に渡すロガーを生成する。

    Args:
        level: ログレベル ("DEBUG" でページ取得・イベント解決も出力される)
        format: 出力形式 ("json" or "text")
        config: 指定した場合は接続先 base_url をログに束縛する

    Returns:
        library (と eventstore) を束縛した structlog.stdlib.BoundLogger
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_credentials,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger: structlog.stdlib.BoundLogger = structlog.stdlib.get_logger(LIBRARY_NAME)
    logger = logger.bind(library=LIBRARY_NAME)
    if config is not None:
        logger = logger.bind(eventstore=config.base_url)
    return logger
