"""全域測試設定。"""

from __future__ import annotations

import pytest
from dotenv import load_dotenv

from eventstore_core.config import GatewayConfig, StoreConfig
from eventstore_core.store import MemoryStreamStore

# 載入 .env，確保 smoke test 也能讀取 EventStoreDB 連線字串
load_dotenv()


@pytest.fixture
def store() -> MemoryStreamStore:
    """每個測試使用獨立的記憶體 StreamStore。"""
    return MemoryStreamStore()


@pytest.fixture
def gateway_config() -> GatewayConfig:
    """不依賴環境變數的 Gateway 配置。"""
    return GatewayConfig(store=StoreConfig(backend='memory'), discovery_read_limit=1000)


def pytest_addoption(parser: pytest.Parser) -> None:
    """新增自訂命令列參數。"""
    parser.addoption(
        '--run-smoke',
        action='store_true',
        default=False,
        help='執行 smoke test（會連線真實的 EventStoreDB）',
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """根據命令列參數決定是否跳過 smoke test。"""
    if config.getoption('--run-smoke'):
        return

    skip_smoke = pytest.mark.skip(reason='需要加 --run-smoke 才會執行')
    for item in items:
        if 'smoke' in item.keywords:
            item.add_marker(skip_smoke)
