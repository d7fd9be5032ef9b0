"""WebSocket handler for real-time article and pipeline log changes."""
import asyncio
from typing import Any, Dict, Optional, Set
from fastapi import WebSocket, WebSocketDisconnect
from shared.config import settings


class ConnectionManager:
    """Manages WebSocket connections for change events."""

    def __init__(self):
        # Map of table name to connections that only want that table
        self.table_connections: Dict[str, Set[WebSocket]] = {}
        # All connections (for broadcast)
        self.all_connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket, table: Optional[str] = None):
        """Accept a new WebSocket connection."""
        await websocket.accept()
        if table:
            self.table_connections.setdefault(table, set()).add(websocket)
        else:
            self.all_connections.add(websocket)

    def disconnect(self, websocket: WebSocket, table: Optional[str] = None):
        """Remove a WebSocket connection."""
        self.all_connections.discard(websocket)

        if table and table in self.table_connections:
            self.table_connections[table].discard(websocket)
            if not self.table_connections[table]:
                del self.table_connections[table]

    async def _send_all(self, connections: Set[WebSocket], message: Dict[str, Any], table: Optional[str] = None):
        disconnected = set()
        for connection in list(connections):
            try:
                await connection.send_json(message)
            except Exception:
                disconnected.add(connection)

        # Clean up disconnected clients
        for conn in disconnected:
            self.disconnect(conn, table)

    async def broadcast(self, event: Dict[str, Any]):
        """Send a change event to every client interested in it."""
        table = event.get("table")
        await self._send_all(self.all_connections, event)
        if table in self.table_connections:
            await self._send_all(self.table_connections[table], event, table)


# Global connection manager
manager = ConnectionManager()


async def websocket_endpoint(websocket: WebSocket, table: Optional[str] = None):
    """WebSocket endpoint for change events."""
    await manager.connect(websocket, table)

    try:
        while True:
            # Keep connection alive with heartbeat
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=settings.ws_heartbeat_interval
                )
                # Handle ping/pong
                if data == "ping":
                    await websocket.send_text("pong")
            except asyncio.TimeoutError:
                # Send heartbeat
                await websocket.send_json({"type": "heartbeat"})
    except WebSocketDisconnect:
        manager.disconnect(websocket, table)
