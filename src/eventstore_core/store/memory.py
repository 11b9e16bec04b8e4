"""記憶體 StreamStore 實作。

適用於開發與測試場景。模擬 EventStoreDB 的 $streams 系統串流，
每個新串流建立時會寫入一筆 `0@<name>` 記錄。
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from eventstore_core.exceptions import StreamDeletedError, StreamNotFoundError
from eventstore_core.store.base import STREAMS_SYSTEM_STREAM, ProbeResult, RecordedEvent

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _StreamData:
    """單一串流的內部資料。"""

    events: list[RecordedEvent] = field(default_factory=lambda: [])
    tombstoned: bool = False


class MemoryStreamStore:
    """記憶體 StreamStore。

    所有事件儲存於 dict 中，進程重啟後資料會遺失。
    tombstone 後的串流保留標記，讀取與寫入都會回報已刪除。

    Args:
        clock: 取得目前時間的函數（主要用於測試控制事件建立時間）
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or _utcnow
        self._streams: dict[str, _StreamData] = {}
        self._commit_position = 0

    def _record(
        self,
        data: _StreamData,
        stream_name: str,
        event_type: str,
        payload: bytes,
        event_id: uuid.UUID,
        created: datetime,
    ) -> None:
        data.events.append(
            RecordedEvent(
                id=event_id,
                type=event_type,
                stream_name=stream_name,
                data=payload,
                position=len(data.events),
                created=created,
            )
        )
        self._commit_position += 1

    async def connect(self) -> None:
        logger.info('記憶體 StreamStore 已初始化')

    async def close(self) -> None:
        self._streams.clear()

    async def append(
        self,
        stream_name: str,
        event_type: str,
        data: bytes,
        event_id: uuid.UUID,
    ) -> int:
        """追加事件，新串流會同時登記到 $streams。"""
        return await self.append_at(stream_name, event_type, data, event_id, self._clock())

    async def append_at(
        self,
        stream_name: str,
        event_type: str,
        data: bytes,
        event_id: uuid.UUID,
        created: datetime,
    ) -> int:
        """以指定的建立時間追加事件。

        Raises:
            StreamDeletedError: 串流已被 tombstone
        """
        stream = self._streams.get(stream_name)
        if stream is not None and stream.tombstoned:
            raise StreamDeletedError(stream_name)

        if stream is None:
            stream = _StreamData()
            self._streams[stream_name] = stream
            # 模擬 $streams 的連結事件
            system = self._streams.setdefault(STREAMS_SYSTEM_STREAM, _StreamData())
            self._record(
                system,
                STREAMS_SYSTEM_STREAM,
                '$>',
                f'0@{stream_name}'.encode(),
                uuid.uuid4(),
                created,
            )

        self._record(stream, stream_name, event_type, data, event_id, created)
        return self._commit_position

    async def read(self, stream_name: str, limit: int | None = None) -> list[RecordedEvent]:
        """從頭讀取串流事件。"""
        stream = self._streams.get(stream_name)
        if stream is None:
            raise StreamNotFoundError(stream_name)
        if stream.tombstoned:
            raise StreamDeletedError(stream_name)

        events = list(stream.events)
        if limit is not None:
            events = events[:limit]
        return events

    async def probe(self, stream_name: str) -> ProbeResult:
        """探測串流狀態。"""
        try:
            await self.read(stream_name, limit=1)
        except StreamNotFoundError:
            return ProbeResult.NOT_FOUND
        except Exception as e:
            logger.warning('串流探測失敗', extra={'stream_name': stream_name, 'error': str(e)})
            return ProbeResult.UNKNOWN
        return ProbeResult.ACTIVE

    async def tombstone(self, stream_name: str) -> None:
        """標記串流為已刪除，不存在的串流也會被佔用名稱。"""
        stream = self._streams.get(stream_name)
        if stream is not None and stream.tombstoned:
            raise StreamDeletedError(stream_name)
        if stream is None:
            stream = _StreamData()
            self._streams[stream_name] = stream

        stream.events.clear()
        stream.tombstoned = True
        logger.debug('記憶體串流已 tombstone', extra={'stream_name': stream_name})
