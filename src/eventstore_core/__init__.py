"""EventStore Core - EventStoreDB 串流寫入、探索與批次刪除的編排核心。"""

__version__ = '0.1.0'

from eventstore_core.config import GatewayConfig, StoreConfig
from eventstore_core.deletion import DeletionReport, delete_half, delete_old
from eventstore_core.discovery import list_active_streams
from eventstore_core.store import MemoryStreamStore, StreamStore, create_store
from eventstore_core.writer import WriteResult, write_event

__all__ = [
    'DeletionReport',
    'GatewayConfig',
    'MemoryStreamStore',
    'StoreConfig',
    'StreamStore',
    'WriteResult',
    'create_store',
    'delete_half',
    'delete_old',
    'list_active_streams',
    'write_event',
]
