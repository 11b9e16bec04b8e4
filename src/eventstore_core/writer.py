"""串流寫入模組。

每次寫入都建立一個新的隨機命名串流，並追加單一事件。
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from eventstore_core.config import GatewayConfig
from eventstore_core.payload import normalize_payload
from eventstore_core.store.base import StreamStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteResult:
    """寫入結果。

    Attributes:
        stream_name: 新建立的串流名稱
        event_id: 寫入事件的識別符
        commit_position: store 回傳的 commit position
    """

    stream_name: str
    event_id: uuid.UUID
    commit_position: int


def new_stream_name(config: GatewayConfig) -> str:
    """產生帶隨機 UUID 後綴的串流名稱。"""
    return f'{config.stream_prefix}{uuid.uuid4()}'


async def write_event(store: StreamStore, payload: Any, config: GatewayConfig) -> WriteResult:
    """正規化 payload 並寫入新串流。

    失敗時例外直接向上拋出，不重試。

    Args:
        store: 串流儲存
        payload: 已解析的 JSON 值
        config: Gateway 配置

    Returns:
        寫入結果
    """
    if isinstance(payload, dict):
        logger.info('payload 為 JSON 物件，注入時間戳')

    data = normalize_payload(payload)
    event_id = uuid.uuid4()
    stream_name = new_stream_name(config)

    logger.info('寫入事件到串流', extra={'stream_name': stream_name, 'event_id': str(event_id)})
    commit_position = await store.append(stream_name, config.event_type, data, event_id)

    logger.info('事件寫入成功', extra={'stream_name': stream_name})
    return WriteResult(
        stream_name=stream_name,
        event_id=event_id,
        commit_position=commit_position,
    )
