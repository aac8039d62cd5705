"""クライアント設定と設定ファイル読み込み"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from .codec import FEED_JSON_MEDIA_TYPE, FEED_MEDIA_TYPE
from .exceptions import ConfigError


@dataclass(frozen=True)
class EventStoreConfig:
    """イベントストアクライアント設定。

    クライアントインスタンスごとに不変で、並行する読み取り呼び出しから共有される。
    認証情報を差し替える場合は新しい設定でクライアントを作り直す。
    """

    base_url: str
    username: str = ""
    password: str = ""
    timeout_seconds: float = 10.0
    feed_media_type: str = FEED_MEDIA_TYPE
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def auth(self) -> tuple[str, str] | None:
        if self.username and self.password:
            return (self.username, self.password)
        return None


class EventStoreSettings(BaseModel):
    """設定ファイルの eventstore セクション。"""

    base_url: str
    username: str = ""
    password: str = ""
    timeout_seconds: float = Field(default=10.0, gt=0)
    feed_format: str = Field(default="xml", pattern="^(xml|json)$")
    headers: dict[str, str] = Field(default_factory=dict)

    def to_config(self) -> EventStoreConfig:
        media_type = FEED_MEDIA_TYPE if self.feed_format == "xml" else FEED_JSON_MEDIA_TYPE
        return EventStoreConfig(
            base_url=self.base_url,
            username=self.username,
            password=self.password,
            timeout_seconds=self.timeout_seconds,
            feed_media_type=media_type,
            headers=self.headers,
        )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    """YAML ファイルを読み込む。"""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {path}", cause=e) from e
    try:
        data: dict[str, Any] = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML: {path}", cause=e) from e
    return data


def load_config(base_path: Path, env_path: Path | None = None) -> EventStoreConfig:
    """設定ファイルの eventstore セクションを読み込んで EventStoreConfig を返す。

    base_path: ベース設定ファイルパス（必須）
    env_path: 環境別設定ファイルパス（オプション）。存在する場合はベースにマージ。
    """
    data = _read_yaml(base_path)
    if env_path is not None and env_path.exists():
        data = _deep_merge(data, _read_yaml(env_path))
    try:
        settings = EventStoreSettings.model_validate(data.get("eventstore") or {})
    except ValidationError as e:
        raise ConfigError(f"Config validation failed: {e}", cause=e) from e
    return settings.to_config()
