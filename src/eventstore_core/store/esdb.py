"""EventStoreDB StreamStore 實作。

封裝 esdbclient 的非同步 gRPC client，實作 StreamStore 介面。
SDK 例外在此層轉換為 store-agnostic 例外。
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from esdbclient import AsyncEventStoreDBClient, NewEvent, StreamState
from esdbclient.exceptions import (
    DeadlineExceeded,
    EventStoreDBClientException,
    NotFound,
    ServiceUnavailable,
    StreamIsDeleted,
)

from eventstore_core.config import StoreConfig
from eventstore_core.exceptions import (
    StoreConnectionError,
    StoreError,
    StreamDeletedError,
    StreamNotFoundError,
)
from eventstore_core.store.base import ProbeResult, RecordedEvent

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = 'application/json'


def _convert_error(error: EventStoreDBClientException, stream_name: str) -> StoreError:
    """將 esdbclient 例外轉換為通用 Store 例外。

    Args:
        error: esdbclient 例外
        stream_name: 操作中的串流名稱

    Returns:
        對應的 Store 例外
    """
    if isinstance(error, StreamIsDeleted):
        return StreamDeletedError(stream_name)
    if isinstance(error, NotFound):
        return StreamNotFoundError(stream_name)
    if isinstance(error, (ServiceUnavailable, DeadlineExceeded)):
        return StoreConnectionError(f'EventStoreDB unavailable: {error}')
    return StoreError(str(error) or type(error).__name__)


def _as_utc(value: datetime | None) -> datetime | None:
    """將 naive datetime 視為 UTC。"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _to_recorded_event(raw: Any) -> RecordedEvent:
    """將 SDK 的 RecordedEvent 轉換為 store-agnostic 格式。"""
    return RecordedEvent(
        id=raw.id,
        type=raw.type,
        stream_name=raw.stream_name,
        data=bytes(raw.data),
        position=raw.stream_position,
        created=_as_utc(getattr(raw, 'recorded_at', None)),
    )


class EsdbStreamStore:
    """EventStoreDB StreamStore。

    負責與 EventStoreDB 互動，整個進程共用一個 client。

    Args:
        config: 連線配置
        client: 自訂 esdbclient client（主要用於測試注入 mock）
    """

    def __init__(self, config: StoreConfig, client: Any = None) -> None:
        self._config = config
        self._client = client or AsyncEventStoreDBClient(uri=config.get_connection_string())

    async def connect(self) -> None:
        """連線到 EventStoreDB。"""
        try:
            await self._client.connect()
        except EventStoreDBClientException as e:
            raise StoreConnectionError(f'Failed to connect to EventStoreDB: {e}') from e
        logger.info('EventStoreDB client 已連線')

    async def close(self) -> None:
        await self._client.close()
        logger.info('EventStoreDB client 已關閉')

    async def append(
        self,
        stream_name: str,
        event_type: str,
        data: bytes,
        event_id: uuid.UUID,
    ) -> int:
        """以 StreamState.ANY 追加 JSON 事件（不檢查 expected revision）。"""
        event = NewEvent(
            type=event_type,
            data=data,
            content_type=JSON_CONTENT_TYPE,
            id=event_id,
        )
        try:
            commit_position: int = await self._client.append_to_stream(
                stream_name,
                current_version=StreamState.ANY,
                events=event,
            )
        except EventStoreDBClientException as e:
            raise _convert_error(e, stream_name) from e
        return commit_position

    async def read(self, stream_name: str, limit: int | None = None) -> list[RecordedEvent]:
        """從頭順向讀取串流事件。"""
        kwargs: dict[str, Any] = {}
        if limit is not None:
            kwargs['limit'] = limit

        try:
            raw_events = await self._client.get_stream(stream_name, **kwargs)
        except EventStoreDBClientException as e:
            raise _convert_error(e, stream_name) from e
        return [_to_recorded_event(raw) for raw in raw_events]

    async def probe(self, stream_name: str) -> ProbeResult:
        """嘗試從頭讀取一筆事件以判斷串流狀態。"""
        try:
            await self.read(stream_name, limit=1)
        except StreamNotFoundError:
            return ProbeResult.NOT_FOUND
        except StoreError as e:
            logger.debug('串流探測失敗', extra={'stream_name': stream_name, 'error': str(e)})
            return ProbeResult.UNKNOWN
        except Exception as e:
            # gRPC 或網路層未轉換的錯誤同樣無法判斷串流狀態
            logger.warning(
                '串流探測發生未預期錯誤',
                extra={'stream_name': stream_name, 'error': f'{type(e).__name__}: {e}'},
            )
            return ProbeResult.UNKNOWN
        return ProbeResult.ACTIVE

    async def tombstone(self, stream_name: str) -> None:
        """永久刪除串流。"""
        try:
            await self._client.tombstone_stream(stream_name, current_version=StreamState.ANY)
        except EventStoreDBClientException as e:
            raise _convert_error(e, stream_name) from e
