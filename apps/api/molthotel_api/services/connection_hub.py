"""WebSocket fanout for hotel events."""

from __future__ import annotations

import json
import logging
from typing import Any
import uuid

from fastapi import WebSocket


logger = logging.getLogger("molthotel_api.connection_hub")


class ConnectionHub:
    """Tracks open sockets and which agent (if any) each one registered.

    Implements the core `EventSink` protocol. A socket whose send fails stops
    receiving events; its receive loop will notice the close on its own.
    """

    def __init__(self) -> None:
        self._sockets: dict[str, WebSocket] = {}
        self._agent_by_connection: dict[str, str] = {}
        self._connection_by_agent: dict[str, str] = {}

    def connection_count(self) -> int:
        return len(self._sockets)

    def add(self, websocket: WebSocket) -> str:
        connection_id = uuid.uuid4().hex
        self._sockets[connection_id] = websocket
        return connection_id

    def bind(self, connection_id: str, agent_id: str) -> None:
        if connection_id not in self._sockets:
            return
        self._agent_by_connection[connection_id] = agent_id
        self._connection_by_agent[agent_id] = connection_id

    def agent_for(self, connection_id: str) -> str | None:
        return self._agent_by_connection.get(connection_id)

    def discard(self, connection_id: str) -> str | None:
        self._sockets.pop(connection_id, None)
        agent_id = self._agent_by_connection.pop(connection_id, None)
        if agent_id is not None and self._connection_by_agent.get(agent_id) == connection_id:
            del self._connection_by_agent[agent_id]
        return agent_id

    async def send_direct(self, connection_id: str, event: dict[str, Any]) -> None:
        websocket = self._sockets.get(connection_id)
        if websocket is None:
            return
        await self._deliver(connection_id, websocket, json.dumps(event))

    async def send_to(self, agent_id: str, event: dict[str, Any]) -> None:
        connection_id = self._connection_by_agent.get(agent_id)
        if connection_id is None:
            return
        await self.send_direct(connection_id, event)

    async def broadcast(self, event: dict[str, Any], exclude_id: str | None = None) -> None:
        message = json.dumps(event)
        for connection_id, websocket in list(self._sockets.items()):
            if exclude_id is not None and self._agent_by_connection.get(connection_id) == exclude_id:
                continue
            await self._deliver(connection_id, websocket, message)

    async def _deliver(self, connection_id: str, websocket: WebSocket, message: str) -> None:
        try:
            await websocket.send_text(message)
        except Exception as exc:
            logger.info("[FANOUT] Dropping connection %s after send failure: %s", connection_id[:8], exc)
            # Agent binding stays until the receive loop discards the connection.
            self._sockets.pop(connection_id, None)

    def clear(self) -> None:
        self._sockets.clear()
        self._agent_by_connection.clear()
        self._connection_by_agent.clear()
