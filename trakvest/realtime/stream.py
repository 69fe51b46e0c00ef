"""
WebSocket price stream manager.

Keeps the set of connected subscribers and fans out price updates
produced by the broadcast loop.

Architecture:
    PriceBroadcastLoop  ──▶  PriceStreamManager.broadcast_price()
                                   │
                             ┌─────┴──────┐
                             │ Connected  │
                             │ clients    │
                             └─────┬──────┘
                                   │ one send per client, with timeout
                                   ▼
                      {"type": "STOCK_UPDATE", "data": {...}, "timestamp": "..."}

Delivery is best effort: no acknowledgement, no replay. A client whose
send fails or times out is dropped.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from trakvest.domain.portfolio.entities import Instrument

logger = logging.getLogger(__name__)

CONNECTION_ESTABLISHED = "CONNECTION_ESTABLISHED"
STOCK_UPDATE = "STOCK_UPDATE"
PONG = "PONG"


@dataclass
class StreamEvent:
    """A single envelope pushed to connected clients."""

    type: str
    data: dict
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_json(self) -> str:
        return json.dumps(
            {"type": self.type, "data": self.data, "timestamp": self.timestamp}, default=str
        )


def price_payload(instrument: Instrument) -> dict:
    """Build the STOCK_UPDATE data block for an instrument."""
    return {
        "symbol": instrument.symbol,
        "current_price": instrument.current_price,
        "day_high": instrument.day_high,
        "day_low": instrument.day_low,
        "volume": instrument.volume,
        "last_updated": instrument.last_updated.isoformat(),
    }


class PriceStreamManager:
    """Registry of push subscribers with broadcast-only fan-out.

    Created and started by the application lifespan, then shared by the
    WebSocket router and the broadcast loop.

    Usage in FastAPI:
        manager = PriceStreamManager()
        manager.start()

        @router.websocket("/ws/prices")
        async def ws_endpoint(ws: WebSocket):
            await manager.connect(ws)
            try:
                while True:
                    await manager.handle_client_message(ws, await ws.receive_text())
            except WebSocketDisconnect:
                manager.disconnect(ws)

        # From the broadcast loop:
        await manager.broadcast_price(instrument)
    """

    def __init__(self, send_timeout: float = 5.0, max_history: int = 200) -> None:
        self._clients: set[Any] = set()
        self._send_timeout = send_timeout
        self._event_history: list[StreamEvent] = []
        self._max_history = max_history
        self._running = False
        self._stats = {
            "total_connections": 0,
            "total_events_broadcast": 0,
            "total_messages_sent": 0,
            "dropped_clients": 0,
        }

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def active_connections(self) -> int:
        return len(self._clients)

    @property
    def stats(self) -> dict:
        return {
            **self._stats,
            "active_connections": self.active_connections,
            "running": self._running,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self._running = True
        logger.info("PriceStreamManager started.")

    async def stop(self) -> None:
        """Stop accepting clients and close the connected ones."""
        self._running = False
        clients = list(self._clients)
        self._clients.clear()
        for websocket in clients:
            try:
                await websocket.close(code=1001)
            except Exception as exc:
                logger.debug("Error closing WebSocket on shutdown: %s", exc)
        logger.info("PriceStreamManager stopped (%d clients closed).", len(clients))

    # ------------------------------------------------------------------
    # WebSocket lifecycle
    # ------------------------------------------------------------------

    async def connect(self, websocket: Any) -> None:
        """Accept a new WebSocket connection and confirm it."""
        await websocket.accept()
        self._clients.add(websocket)
        self._stats["total_connections"] += 1
        logger.info("WebSocket client connected. Active: %d", self.active_connections)

        welcome = StreamEvent(
            type=CONNECTION_ESTABLISHED,
            data={"message": "Connected to Trakvest real-time price stream"},
        )
        await websocket.send_text(welcome.to_json())

    def disconnect(self, websocket: Any) -> None:
        """Remove a client. Unknown clients are ignored."""
        if websocket in self._clients:
            self._clients.discard(websocket)
            logger.info(
                "WebSocket client disconnected. Active: %d", self.active_connections
            )

    async def handle_client_message(self, websocket: Any, raw: str) -> None:
        """Answer `{"type": "PING"}` with a PONG; anything else is ignored."""
        try:
            msg = json.loads(raw)
        except json.JSONDecodeError:
            return

        if isinstance(msg, dict) and str(msg.get("type", "")).upper() == "PING":
            pong = StreamEvent(type=PONG, data={})
            await websocket.send_text(pong.to_json())

    # ------------------------------------------------------------------
    # Broadcasting
    # ------------------------------------------------------------------

    async def broadcast(self, event: StreamEvent) -> int:
        """Send an event to every client concurrently.

        Returns the number of clients that received the message.
        """
        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            self._event_history = self._event_history[-self._max_history:]
        self._stats["total_events_broadcast"] += 1

        clients = list(self._clients)
        if not clients:
            return 0

        message = event.to_json()
        results = await asyncio.gather(
            *(self._send(ws, message) for ws in clients), return_exceptions=True
        )

        sent = 0
        for ws, result in zip(clients, results):
            if result is True:
                sent += 1
            else:
                self._stats["dropped_clients"] += 1
                self.disconnect(ws)

        self._stats["total_messages_sent"] += sent
        return sent

    async def broadcast_price(self, instrument: Instrument) -> int:
        """Broadcast a STOCK_UPDATE for a refreshed instrument."""
        return await self.broadcast(StreamEvent(type=STOCK_UPDATE, data=price_payload(instrument)))

    async def _send(self, websocket: Any, message: str) -> bool:
        try:
            await asyncio.wait_for(websocket.send_text(message), timeout=self._send_timeout)
            return True
        except Exception as exc:
            logger.info("Dropping WebSocket client after failed send: %s", exc)
            return False

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_recent_events(self, limit: int = 50, symbol: str | None = None) -> list[dict]:
        """Return recent envelopes, optionally filtered by symbol."""
        events = self._event_history
        if symbol:
            events = [
                e for e in events if str(e.data.get("symbol", "")).upper() == symbol.upper()
            ]
        return [json.loads(e.to_json()) for e in events[-limit:]]
