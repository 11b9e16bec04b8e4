"""Store 通用例外模組。

定義 store-agnostic 的例外類別，讓編排邏輯不需要依賴 esdbclient 的例外。
"""

from __future__ import annotations


class StoreError(Exception):
    """Store 基礎例外。"""


class StreamNotFoundError(StoreError):
    """串流不存在。"""

    def __init__(self, stream_name: str) -> None:
        super().__init__(f"Stream '{stream_name}' not found")
        self.stream_name = stream_name


class StreamDeletedError(StreamNotFoundError):
    """串流已被 tombstone，名稱不可再使用。"""

    def __init__(self, stream_name: str) -> None:
        StoreError.__init__(self, f"Stream '{stream_name}' is deleted")
        self.stream_name = stream_name


class StoreConnectionError(StoreError):
    """連線失敗或請求超時。"""
