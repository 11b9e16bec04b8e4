"""MemoryStreamStore 測試模組。

涵蓋寫入、讀取、$streams 登記、探測與 tombstone。
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from unittest.mock import patch

import allure
import pytest

from eventstore_core.exceptions import StreamDeletedError, StreamNotFoundError
from eventstore_core.store import STREAMS_SYSTEM_STREAM, MemoryStreamStore, ProbeResult, StreamStore


@allure.feature('StreamStore')
@allure.story('記憶體實作基本操作')
class TestMemoryStreamStore:
    """測試 MemoryStreamStore。"""

    @allure.title('符合 StreamStore Protocol')
    def test_is_stream_store(self) -> None:
        assert isinstance(MemoryStreamStore(), StreamStore)

    @allure.title('事件寫入與讀取')
    async def test_append_and_read(self) -> None:
        """Scenario: 事件寫入與讀取

        Given 一個空的 MemoryStreamStore
        When 寫入 2 個事件到同一個串流
        Then 應依序讀取到 2 個事件
        """
        store = MemoryStreamStore()
        ids = [uuid.uuid4(), uuid.uuid4()]
        for i, event_id in enumerate(ids):
            await store.append('orders', 'payments-event', f'{{"n":{i}}}'.encode(), event_id)

        events = await store.read('orders')
        assert [e.id for e in events] == ids
        assert [e.position for e in events] == [0, 1]
        assert events[0].data == b'{"n":0}'
        assert events[0].type == 'payments-event'
        assert events[0].created is not None

    @allure.title('新串流登記到 $streams，既有串流不重複登記')
    async def test_new_stream_registered_once(self, store: MemoryStreamStore) -> None:
        await store.append('a', 't', b'{}', uuid.uuid4())
        await store.append('a', 't', b'{}', uuid.uuid4())
        await store.append('b', 't', b'{}', uuid.uuid4())

        records = await store.read(STREAMS_SYSTEM_STREAM)
        assert [r.data for r in records] == [b'0@a', b'0@b']

    @allure.title('讀取限制筆數')
    async def test_read_with_limit(self, store: MemoryStreamStore) -> None:
        for _ in range(3):
            await store.append('orders', 't', b'{}', uuid.uuid4())
        assert len(await store.read('orders', limit=1)) == 1

    @allure.title('讀取不存在的串流拋出 StreamNotFoundError')
    async def test_read_missing_stream(self, store: MemoryStreamStore) -> None:
        with pytest.raises(StreamNotFoundError):
            await store.read('missing')

    @allure.title('指定事件建立時間')
    async def test_append_at(self, store: MemoryStreamStore) -> None:
        created = datetime(2026, 1, 1, tzinfo=timezone.utc)
        await store.append_at('old', 't', b'{}', uuid.uuid4(), created)
        events = await store.read('old')
        assert events[0].created == created

    @allure.title('使用注入的時鐘')
    async def test_clock_injection(self) -> None:
        created = datetime(2025, 5, 5, tzinfo=timezone.utc)
        store = MemoryStreamStore(clock=lambda: created)
        await store.append('s', 't', b'{}', uuid.uuid4())
        assert (await store.read('s'))[0].created == created


@allure.feature('StreamStore')
@allure.story('記憶體實作的探測與刪除')
class TestMemoryStreamStoreTombstone:
    """測試 probe 與 tombstone。"""

    @allure.title('探測存在與不存在的串流')
    async def test_probe(self, store: MemoryStreamStore) -> None:
        await store.append('a', 't', b'{}', uuid.uuid4())
        assert await store.probe('a') is ProbeResult.ACTIVE
        assert await store.probe('missing') is ProbeResult.NOT_FOUND

    @allure.title('tombstone 後讀取與寫入都回報已刪除')
    async def test_tombstone(self, store: MemoryStreamStore) -> None:
        await store.append('a', 't', b'{}', uuid.uuid4())
        await store.tombstone('a')

        assert await store.probe('a') is ProbeResult.NOT_FOUND
        with pytest.raises(StreamDeletedError):
            await store.read('a')
        with pytest.raises(StreamDeletedError):
            await store.append('a', 't', b'{}', uuid.uuid4())

    @allure.title('重複 tombstone 拋出 StreamDeletedError')
    async def test_double_tombstone(self, store: MemoryStreamStore) -> None:
        await store.append('a', 't', b'{}', uuid.uuid4())
        await store.tombstone('a')
        with pytest.raises(StreamDeletedError):
            await store.tombstone('a')

    @allure.title('tombstone 不影響 $streams 記錄')
    async def test_tombstone_keeps_streams_record(self, store: MemoryStreamStore) -> None:
        await store.append('a', 't', b'{}', uuid.uuid4())
        await store.tombstone('a')
        records = await store.read(STREAMS_SYSTEM_STREAM)
        assert [r.data for r in records] == [b'0@a']

    @allure.title('非預期的讀取錯誤探測為 UNKNOWN')
    async def test_probe_unexpected_error(self, store: MemoryStreamStore) -> None:
        await store.append('a', 't', b'{}', uuid.uuid4())
        with patch.object(store, 'read', side_effect=OSError('disk failure')):
            assert await store.probe('a') is ProbeResult.UNKNOWN
