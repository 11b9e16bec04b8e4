"""串流探索模組。

讀取 $streams 系統串流還原串流名稱，並逐一探測是否仍存在。
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from eventstore_core.config import GatewayConfig
from eventstore_core.exceptions import StreamNotFoundError
from eventstore_core.store.base import STREAMS_SYSTEM_STREAM, ProbeResult, StreamStore

logger = logging.getLogger(__name__)


def parse_stream_name(data: bytes) -> str:
    """從 $streams 記錄還原真實串流名稱。

    記錄格式為 `<position>@<stream name>`（通常是 `0@`），
    只移除第一個 `@` 之前的位置前綴；沒有前綴時原樣回傳。

    Args:
        data: 連結事件的資料

    Returns:
        串流名稱
    """
    text = data.decode('utf-8')
    prefix, sep, name = text.partition('@')
    if sep and prefix.isdigit():
        return name
    return text


async def iter_stream_names(store: StreamStore, config: GatewayConfig) -> AsyncIterator[str]:
    """依 $streams 中出現的順序產生候選串流名稱（不去重）。

    單次讀取，受 discovery_read_limit 限制；被截斷時結果不完整。
    """
    try:
        records = await store.read(STREAMS_SYSTEM_STREAM, limit=config.discovery_read_limit)
    except StreamNotFoundError:
        # 尚未建立任何串流，或 $streams projection 未啟用
        logger.info('$streams 不存在，沒有可探索的串流')
        return

    if len(records) >= config.discovery_read_limit:
        logger.warning(
            '$streams 讀取已達上限，探索結果可能不完整',
            extra={'limit': config.discovery_read_limit},
        )

    for record in records:
        yield parse_stream_name(record.data)


async def list_active_streams(store: StreamStore, config: GatewayConfig) -> list[str]:
    """列出仍存在的串流。

    探測結果為 NOT_FOUND 的串流被排除；UNKNOWN 視為存在並記錄警告。

    Args:
        store: 串流儲存
        config: Gateway 配置

    Returns:
        串流名稱列表，順序與 $streams 一致，可能含重複名稱
    """
    active: list[str] = []
    async for name in iter_stream_names(store, config):
        try:
            result = await store.probe(name)
        except Exception as e:
            logger.warning('串流探測拋出例外', extra={'stream_name': name, 'error': str(e)})
            result = ProbeResult.UNKNOWN

        if result is ProbeResult.NOT_FOUND:
            logger.debug('串流已不存在，略過', extra={'stream_name': name})
            continue
        if result is ProbeResult.UNKNOWN:
            logger.warning('無法確認串流狀態，視為存在', extra={'stream_name': name})
        active.append(name)

    logger.info('串流探索完成', extra={'active': len(active)})
    return active
