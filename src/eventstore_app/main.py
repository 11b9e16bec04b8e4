"""FastAPI 應用程序入口。

提供事件寫入、串流列表與批次刪除的 API 端點，回應皆為純文字。
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from eventstore_core.config import GatewayConfig
from eventstore_core.deletion import DeletionReport, delete_half, delete_old
from eventstore_core.discovery import list_active_streams
from eventstore_core.store import StreamStore, create_store
from eventstore_core.writer import write_event

# 在建立配置之前加載 .env
load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """應用程序生命週期管理。

    整個進程共用一個 StreamStore，啟動時建立、關閉時釋放。
    """
    config = GatewayConfig()
    store = create_store(config.store)
    await store.connect()
    app.state.config = config
    app.state.store = store
    logger.info('應用程序啟動', extra={'backend': config.store.backend})

    yield

    await store.close()
    logger.info('應用程序關閉')


app = FastAPI(title='EventStore Gateway API', lifespan=lifespan)


# --- 依賴注入 ---
def get_store(request: Request) -> StreamStore:
    """取得進程共用的 StreamStore。"""
    store: StreamStore = request.app.state.store
    return store


def get_config(request: Request) -> GatewayConfig:
    """取得 Gateway 配置。"""
    config: GatewayConfig = request.app.state.config
    return config


StoreDep = Annotated[StreamStore, Depends(get_store)]
ConfigDep = Annotated[GatewayConfig, Depends(get_config)]


# --- 輔助函數 ---
def _deletion_response(report: DeletionReport) -> PlainTextResponse:
    """將批次刪除結果轉換為 HTTP 回應。

    Args:
        report: 批次刪除結果

    Returns:
        全部成功時回傳 200，部分失敗時回傳 500
    """
    if report.candidates == 0:
        return PlainTextResponse('No streams to delete.')
    if not report.ok:
        return PlainTextResponse(
            f'Failed to delete streams: {report.describe_failures()}',
            status_code=500,
        )
    return PlainTextResponse(f'Successfully deleted {len(report.deleted)} streams.')


# --- API 路由 ---
@app.post('/api/events')
async def create_event(request: Request, store: StoreDep, config: ConfigDep) -> PlainTextResponse:
    """寫入事件端點。

    接受任意 JSON 本體，寫入一個新的 payments-order 串流。

    Args:
        request: HTTP 請求
        store: 串流儲存
        config: Gateway 配置

    Returns:
        純文字結果
    """
    try:
        logger.info('收到 payload')
        payload: Any = await request.json()
        result = await write_event(store, payload, config)
    except Exception as e:
        logger.exception('事件寫入失敗')
        return PlainTextResponse(f'Failed to write event: {e}', status_code=500)

    return PlainTextResponse(f'Event written successfully to stream: {result.stream_name}')


@app.get('/api/streams')
async def list_streams(store: StoreDep, config: ConfigDep) -> Response:
    """列出仍存在的串流端點。

    Returns:
        串流名稱 JSON 陣列；失敗時回傳空本體的 500
    """
    try:
        streams = await list_active_streams(store, config)
    except Exception:
        logger.exception('串流列表讀取失敗')
        return Response(status_code=500)

    return JSONResponse(streams)


@app.get('/api/streams/delete-half')
async def delete_half_streams(store: StoreDep, config: ConfigDep) -> PlainTextResponse:
    """刪除前半數串流端點。"""
    try:
        report = await delete_half(store, config)
    except Exception as e:
        logger.exception('批次刪除失敗')
        return PlainTextResponse(f'Failed to delete streams: {e}', status_code=500)

    return _deletion_response(report)


@app.get('/api/streams/delete-old')
async def delete_old_streams(store: StoreDep, config: ConfigDep) -> PlainTextResponse:
    """刪除超過存活門檻（預設 12 小時）的串流端點。"""
    try:
        report = await delete_old(store, config)
    except Exception as e:
        logger.exception('批次刪除失敗')
        return PlainTextResponse(f'Failed to delete streams: {e}', status_code=500)

    return _deletion_response(report)


@app.get('/health')
async def health() -> JSONResponse:
    """健康檢查端點。"""
    return JSONResponse({'status': 'healthy'})

