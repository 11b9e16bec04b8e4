"""Payload 正規化模組。

JSON 物件會注入目前的 UTC 時間戳，其他 JSON 值原樣序列化。
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

TIMESTAMP_FIELD = 'timestamp'


def format_timestamp(moment: datetime) -> str:
    """將 datetime 格式化為 ISO-8601 UTC 字串（以 Z 結尾）。"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')


def normalize_payload(value: Any, now: datetime | None = None) -> bytes:
    """正規化並序列化 payload。

    Args:
        value: 任意 JSON 值（dict、list、str、數字、bool 或 None）
        now: 注入的時間（可選，預設為目前時間）

    Returns:
        UTF-8 編碼的緊湊 JSON bytes

    Raises:
        TypeError: 值無法序列化為 JSON
        ValueError: 值包含循環參照或非有限浮點數
    """
    if isinstance(value, dict):
        moment = now or datetime.now(timezone.utc)
        # 複製後覆寫，不修改呼叫端的 dict
        value = {**value, TIMESTAMP_FIELD: format_timestamp(moment)}

    encoded = json.dumps(value, ensure_ascii=False, separators=(',', ':'), allow_nan=False)
    return encoded.encode('utf-8')
