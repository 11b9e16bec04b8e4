"""Gateway 統一配置模組。

提供 EventStoreDB 連線與串流寫入、探索、刪除策略的配置資料結構。
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Literal

# 預設值
DEFAULT_CONNECTION_STRING = 'esdb://localhost:2113?tls=false'
DEFAULT_STREAM_PREFIX = 'payments-order-'
DEFAULT_EVENT_TYPE = 'payments-event'
DEFAULT_MAX_STREAM_AGE = timedelta(hours=12)
DEFAULT_DISCOVERY_READ_LIMIT = 4096

StoreBackend = Literal['esdb', 'memory']


def _default_backend() -> StoreBackend:
    """從環境變數讀取後端類型，無效值回退為 esdb。"""
    value = os.environ.get('EVENTSTORE_BACKEND', 'esdb').strip().lower()
    if value == 'memory':
        return 'memory'
    return 'esdb'


def _default_read_limit() -> int:
    value = os.environ.get('EVENTSTORE_DISCOVERY_LIMIT')
    if not value:
        return DEFAULT_DISCOVERY_READ_LIMIT
    return int(value)


@dataclass
class StoreConfig:
    """EventStoreDB 連線配置。

    Attributes:
        backend: 後端類型（"esdb" 連線真實伺服器，"memory" 使用進程內實作）
        connection_string: 連線字串（可選，未指定時從環境變數讀取）
    """

    backend: StoreBackend = field(default_factory=_default_backend)
    connection_string: str | None = None

    def get_connection_string(self) -> str:
        """取得連線字串，優先使用明確指定的值，否則從環境變數讀取。

        Returns:
            esdb:// 連線字串
        """
        if self.connection_string is not None:
            return self.connection_string
        return os.environ.get('EVENTSTORE_CONNECTION_STRING', DEFAULT_CONNECTION_STRING)


@dataclass
class GatewayConfig:
    """Gateway 核心配置。

    Attributes:
        store: EventStoreDB 連線配置
        stream_prefix: 新串流名稱前綴（後接隨機 UUID）
        event_type: 寫入事件的類型
        max_stream_age: delete-old 策略的存活門檻
        discovery_read_limit: 讀取 $streams 時的最大事件數
    """

    store: StoreConfig = field(default_factory=StoreConfig)
    stream_prefix: str = DEFAULT_STREAM_PREFIX
    event_type: str = DEFAULT_EVENT_TYPE
    max_stream_age: timedelta = DEFAULT_MAX_STREAM_AGE
    discovery_read_limit: int = field(default_factory=_default_read_limit)
