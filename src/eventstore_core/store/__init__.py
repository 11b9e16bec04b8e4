"""StreamStore 抽象層。

提供可抽換的串流儲存後端，支援 EventStoreDB 與記憶體兩種實作。
"""

from eventstore_core.config import StoreConfig
from eventstore_core.store.base import (
    STREAMS_SYSTEM_STREAM,
    ProbeResult,
    RecordedEvent,
    StreamStore,
)
from eventstore_core.store.memory import MemoryStreamStore


def create_store(config: StoreConfig) -> StreamStore:
    """根據配置建立 StreamStore。

    Args:
        config: 連線配置

    Returns:
        尚未連線的 StreamStore 實例
    """
    if config.backend == 'memory':
        return MemoryStreamStore()

    # 延遲匯入，memory 後端不需載入 gRPC
    from eventstore_core.store.esdb import EsdbStreamStore

    return EsdbStreamStore(config)


__all__ = [
    'STREAMS_SYSTEM_STREAM',
    'MemoryStreamStore',
    'ProbeResult',
    'RecordedEvent',
    'StreamStore',
    'create_store',
]
