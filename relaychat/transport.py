"""Live connections and delivery of outbound events."""
import asyncio
import logging
from typing import Dict, Iterable, List

from fastapi import WebSocket

from .framing import encode_frame
from .models import Delivery
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class WebSocketConnection:
    """Send capability over one accepted FastAPI WebSocket."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def send_frame(self, frame: dict):
        await self.websocket.send_text(encode_frame(frame))

    def __repr__(self):
        client = self.websocket.client
        return f"<WebSocketConnection {client.host}:{client.port}>" if client else "<WebSocketConnection>"


class ConnectionHub:
    """Every connection currently attached to the server, identified or not."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry
        self._live: Dict[int, object] = {}
        self.lock = asyncio.Lock()

    async def add(self, connection):
        async with self.lock:
            self._live[id(connection)] = connection

    async def remove(self, connection):
        async with self.lock:
            self._live.pop(id(connection), None)

    def __len__(self):
        return len(self._live)

    def recipients(self, delivery: Delivery) -> List[object]:
        if delivery.connection is not None:
            return [delivery.connection] if id(delivery.connection) in self._live else []
        if delivery.everyone:
            return [c for c in list(self._live.values()) if c is not delivery.exclude]
        targets = []
        for user_id in delivery.user_ids:
            connection = self.registry.lookup(user_id)
            if connection is not None:
                targets.append(connection)
        return targets

    async def send(self, connection, frame: dict) -> bool:
        try:
            await connection.send_frame(frame)
            return True
        except Exception as e:
            # the receive loop of that connection will run the disconnect path
            logger.warning("SEND_FAILED connection=%r type=%s error=%s", connection, frame.get("type"), e)
            return False

    async def deliver(self, deliveries: Iterable[Delivery]):
        for delivery in deliveries:
            frame = delivery.frame()
            for connection in self.recipients(delivery):
                await self.send(connection, frame)
