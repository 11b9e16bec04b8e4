"""批次刪除策略模組。

提供兩種策略：刪除前半數串流，或刪除首筆事件超過存活門檻的串流。
每個 tombstone 互相獨立，單一失敗不會中斷整批刪除。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from eventstore_core.config import GatewayConfig
from eventstore_core.discovery import iter_stream_names, list_active_streams
from eventstore_core.exceptions import StoreError, StreamNotFoundError
from eventstore_core.store.base import StreamStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletionFailure:
    """單一串流刪除失敗的紀錄。"""

    stream_name: str
    message: str


@dataclass
class DeletionReport:
    """批次刪除結果。

    Attributes:
        candidates: 策略考慮的串流數量，0 表示沒有可刪除的串流
        selected: 被策略選中的串流
        deleted: 成功 tombstone 的串流
        failed: 刪除失敗的串流與錯誤訊息
    """

    candidates: int = 0
    selected: list[str] = field(default_factory=lambda: [])
    deleted: list[str] = field(default_factory=lambda: [])
    failed: list[DeletionFailure] = field(default_factory=lambda: [])

    @property
    def ok(self) -> bool:
        """所有選中的串流都已刪除。"""
        return not self.failed

    def describe_failures(self) -> str:
        """將失敗紀錄格式化為單行文字。"""
        details = '; '.join(f'{f.stream_name}: {f.message}' for f in self.failed)
        return f'deleted {len(self.deleted)} of {len(self.selected)}; {details}'


async def tombstone_all(store: StreamStore, stream_names: list[str]) -> DeletionReport:
    """依序 tombstone 每個串流，失敗時記錄並繼續。

    Args:
        store: 串流儲存
        stream_names: 要刪除的串流

    Returns:
        批次刪除結果
    """
    report = DeletionReport(candidates=len(stream_names), selected=list(stream_names))
    for name in stream_names:
        try:
            await store.tombstone(name)
        except Exception as e:
            logger.error('串流刪除失敗', extra={'stream_name': name, 'error': str(e)})
            report.failed.append(DeletionFailure(stream_name=name, message=str(e)))
            continue
        logger.info('串流已刪除', extra={'stream_name': name})
        report.deleted.append(name)
    return report


async def delete_half(store: StreamStore, config: GatewayConfig) -> DeletionReport:
    """刪除探索結果的前半數串流（向下取整）。

    Args:
        store: 串流儲存
        config: Gateway 配置

    Returns:
        批次刪除結果；沒有串流時為空結果
    """
    candidates = await list_active_streams(store, config)
    if not candidates:
        logger.info('沒有可刪除的串流')
        return DeletionReport()

    half = len(candidates) // 2
    logger.info('刪除前半數串流', extra={'candidates': len(candidates), 'selected': half})
    report = await tombstone_all(store, candidates[:half])
    report.candidates = len(candidates)
    return report


async def select_old_streams(
    store: StreamStore,
    config: GatewayConfig,
    now: datetime | None = None,
) -> list[str]:
    """找出首筆事件建立時間早於存活門檻的串流。

    重新從 $streams 推導候選串流並讀取各自的首筆事件。
    不存在的串流被略過；其他讀取錯誤無法判斷年齡，記錄警告後略過。

    Args:
        store: 串流儲存
        config: Gateway 配置
        now: 基準時間（可選，預設為目前時間）

    Returns:
        待刪除的串流名稱，順序與 $streams 首次出現一致，不重複
    """
    threshold = (now or datetime.now(timezone.utc)) - config.max_stream_age
    selected: list[str] = []
    seen: set[str] = set()

    async for name in iter_stream_names(store, config):
        if name in seen:
            continue
        seen.add(name)

        try:
            events = await store.read(name, limit=1)
        except StreamNotFoundError:
            continue
        except StoreError as e:
            logger.warning('無法讀取串流，略過年齡判斷', extra={'stream_name': name, 'error': str(e)})
            continue

        if not events:
            continue
        created = events[0].created
        if created is None:
            logger.warning('首筆事件缺少建立時間', extra={'stream_name': name})
            continue
        if created < threshold:
            selected.append(name)

    return selected


async def delete_old(
    store: StreamStore,
    config: GatewayConfig,
    now: datetime | None = None,
) -> DeletionReport:
    """刪除所有超過存活門檻的串流。

    Args:
        store: 串流儲存
        config: Gateway 配置
        now: 基準時間（可選，預設為目前時間）

    Returns:
        批次刪除結果；沒有符合條件的串流時為空結果
    """
    selected = await select_old_streams(store, config, now=now)
    if not selected:
        logger.info('沒有超過存活門檻的串流')
        return DeletionReport()

    logger.info(
        '刪除過期串流',
        extra={'selected': len(selected), 'max_age_seconds': config.max_stream_age.total_seconds()},
    )
    return await tombstone_all(store, selected)
