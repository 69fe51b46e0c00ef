"""
FastAPI router for real-time price streaming.

Provides:
- WebSocket endpoint pushing STOCK_UPDATE envelopes
- Stream and broadcast-loop status endpoint
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool
from starlette.requests import HTTPConnection

from trakvest.application.portfolio.authenticate import AuthenticateUseCase
from trakvest.domain.portfolio.entities import User
from trakvest.domain.portfolio.errors import AuthenticationError
from trakvest.interfaces.portfolio.dependencies import (
    get_authenticate_use_case,
    get_current_user,
)
from trakvest.interfaces.portfolio.schemas import RealtimeStatusResponse
from trakvest.realtime.scheduler import PriceBroadcastLoop
from trakvest.realtime.stream import PriceStreamManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def get_stream_manager(connection: HTTPConnection) -> PriceStreamManager:
    """Return the stream manager the app lifespan stored on app.state."""
    manager = getattr(connection.app.state, "stream_manager", None)
    if manager is None:
        raise RuntimeError(
            "PriceStreamManager not initialized. "
            "Ensure the app lifespan starts the realtime components."
        )
    return manager


def get_broadcast_loop(connection: HTTPConnection) -> Optional[PriceBroadcastLoop]:
    return getattr(connection.app.state, "broadcast_loop", None)


# ------------------------------------------------------------------
# WebSocket endpoint
# ------------------------------------------------------------------


@router.websocket("/ws/prices")
async def ws_prices(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    authenticate: AuthenticateUseCase = Depends(get_authenticate_use_case),
    manager: PriceStreamManager = Depends(get_stream_manager),
) -> None:
    """WebSocket endpoint for live price updates.

    The bearer token is passed as the `token` query parameter; an invalid
    token closes the socket with 1008 (policy violation).

    Protocol (JSON):
        ← {"type": "CONNECTION_ESTABLISHED", "data": {"message": "..."}, "timestamp": "..."}
        ← {"type": "STOCK_UPDATE", "data": {"symbol": "INFY", ...}, "timestamp": "..."}

        → {"type": "PING"}
        ← {"type": "PONG", "data": {}, "timestamp": "..."}
    """
    try:
        user = await run_in_threadpool(authenticate.execute, token)
    except AuthenticationError as exc:
        logger.info("Rejected WebSocket connection: %s", exc.code)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(websocket)
    logger.debug("WebSocket subscriber user=%s", user.id)

    try:
        while True:
            raw = await websocket.receive_text()
            await manager.handle_client_message(websocket, raw)
    except WebSocketDisconnect:
        manager.disconnect(websocket)


# ------------------------------------------------------------------
# Status endpoint
# ------------------------------------------------------------------


@router.get(
    "/realtime/status",
    response_model=RealtimeStatusResponse,
    summary="Price stream and broadcast loop status",
)
async def realtime_status(
    limit: int = Query(20, ge=1, le=200),
    _user: User = Depends(get_current_user),
    manager: PriceStreamManager = Depends(get_stream_manager),
    loop: Optional[PriceBroadcastLoop] = Depends(get_broadcast_loop),
) -> RealtimeStatusResponse:
    return RealtimeStatusResponse(
        stream=manager.stats,
        loop=loop.status if loop is not None else None,
        recent_events=manager.get_recent_events(limit=limit),
    )
