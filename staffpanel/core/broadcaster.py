"""In-process registry of open live-update sockets with best-effort fan-out.

Delivery is at-most-once and unordered across clients. Clients must be able to
rebuild state from the regular read endpoints; these events only save a poll.
"""

import asyncio
import json
import logging
from typing import Any, Protocol, Set

from fastapi import Request
from starlette.websockets import WebSocketState

logger = logging.getLogger(__name__)


class LiveConnection(Protocol):
    client_state: WebSocketState
    application_state: WebSocketState

    async def send_text(self, data: str) -> None: ...


def _is_writable(conn: LiveConnection) -> bool:
    return (
        conn.client_state == WebSocketState.CONNECTED
        and conn.application_state == WebSocketState.CONNECTED
    )


class Broadcaster:
    def __init__(self) -> None:
        self._connections: Set[LiveConnection] = set()
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._connections)

    async def register(self, conn: LiveConnection) -> None:
        async with self._lock:
            self._connections.add(conn)
        logger.info("Live client connected (%d open)", len(self._connections))

    async def unregister(self, conn: LiveConnection) -> None:
        async with self._lock:
            self._connections.discard(conn)
        logger.info("Live client disconnected (%d open)", len(self._connections))

    async def broadcast(self, event: str, data: Any) -> int:
        """Send {"type": event, "data": data} to every writable connection.

        Connections that are closed or fail to write are dropped. Returns the number
        of connections the event was written to.
        """
        message = json.dumps({"type": event, "data": data}, default=str)
        async with self._lock:
            targets = list(self._connections)

        delivered = 0
        dead = []
        for conn in targets:
            if not _is_writable(conn):
                dead.append(conn)
                continue
            try:
                await conn.send_text(message)
                delivered += 1
            except Exception as e:
                logger.warning("Dropping live client after failed write: %s", e)
                dead.append(conn)

        if dead:
            async with self._lock:
                for conn in dead:
                    self._connections.discard(conn)
        return delivered


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster
