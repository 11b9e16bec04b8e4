"""StreamStore 介面定義與事件型別。

提供串流寫入、讀取、探測與 tombstone 的抽象層，
讓編排邏輯可在 EventStoreDB 與記憶體實作之間抽換。
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

STREAMS_SYSTEM_STREAM = '$streams'


@dataclass(frozen=True)
class RecordedEvent:
    """已寫入 store 的事件。

    Attributes:
        id: 事件唯一識別符
        type: 事件類型
        stream_name: 所屬串流名稱
        data: 事件資料（原始 bytes）
        position: 在串流中的位置（從 0 開始）
        created: 伺服器記錄時間（UTC），store 未提供時為 None
    """

    id: uuid.UUID
    type: str
    stream_name: str
    data: bytes
    position: int
    created: datetime | None = None


class ProbeResult(enum.Enum):
    """串流探測結果。"""

    ACTIVE = 'active'
    NOT_FOUND = 'not_found'
    UNKNOWN = 'unknown'


@runtime_checkable
class StreamStore(Protocol):
    """串流儲存 Protocol。

    所有實作都以無條件寫入（不檢查 expected revision）追加事件，
    並以 StreamNotFoundError 回報不存在或已刪除的串流。
    """

    async def connect(self) -> None:
        """建立連線。"""
        ...

    async def close(self) -> None:
        """釋放連線資源。"""
        ...

    async def append(
        self,
        stream_name: str,
        event_type: str,
        data: bytes,
        event_id: uuid.UUID,
    ) -> int:
        """無條件追加一個事件到串流。

        Args:
            stream_name: 串流名稱，不存在時自動建立
            event_type: 事件類型
            data: 事件資料（JSON bytes）
            event_id: 事件唯一識別符

        Returns:
            寫入後的 commit position
        """
        ...

    async def read(self, stream_name: str, limit: int | None = None) -> list[RecordedEvent]:
        """從頭順向讀取串流事件。

        Args:
            stream_name: 串流名稱
            limit: 最多回傳幾筆事件，None 表示不限

        Returns:
            事件列表，按寫入順序排列

        Raises:
            StreamNotFoundError: 串流不存在或已被刪除
        """
        ...

    async def probe(self, stream_name: str) -> ProbeResult:
        """探測串流是否仍可讀取，不拋出例外。"""
        ...

    async def tombstone(self, stream_name: str) -> None:
        """永久刪除串流，之後此名稱不可再使用。"""
        ...
