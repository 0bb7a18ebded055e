"""WebSocket connection manager"""
import json
import uuid
from typing import Any, Dict, Set

from config.logger import logger
from fastapi import WebSocket

# Server -> client events
EVENT_CONNECTED = "connected"
EVENT_DATA_NEW = "data:new"
EVENT_STREAM_RESPONSE = "data:stream:response"
EVENT_ERROR = "error"
EVENT_HEARTBEAT = "heartbeat"

# Client -> server events
EVENT_SUBSCRIBE = "subscribe:dataset"
EVENT_STREAM = "data:stream"


def encode_event(event: str, data: Any) -> str:
    """Serialize an event envelope"""
    return json.dumps({"event": event, "data": data})


def dataset_channel(dataset_id: str) -> str:
    return f"dataset:{dataset_id}"


class ConnectionManager:
    """
    Registry of connected dashboards.

    Every accepted connection gets an id and may join any number of named
    channels. Broadcasts go to every connection; a connection whose send
    fails is dropped from the registry.
    """

    def __init__(self):
        self.active_connections: Dict[WebSocket, str] = {}
        self.channels: Dict[str, Set[WebSocket]] = {}
        self.memberships: Dict[WebSocket, Set[str]] = {}

    def connect(self, websocket: WebSocket) -> str:
        """Register an accepted connection and return its id"""
        connection_id = uuid.uuid4().hex
        self.active_connections[websocket] = connection_id
        self.memberships[websocket] = set()
        return connection_id

    def disconnect(self, websocket: WebSocket):
        """Forget a connection and release its channel memberships"""
        for channel in self.memberships.pop(websocket, set()):
            members = self.channels.get(channel)
            if members is None:
                continue
            members.discard(websocket)
            if not members:
                del self.channels[channel]
        self.active_connections.pop(websocket, None)

    def subscribe(self, websocket: WebSocket, channel: str):
        """Add a connection to a channel; earlier memberships are kept"""
        if websocket not in self.active_connections:
            return
        self.channels.setdefault(channel, set()).add(websocket)
        self.memberships[websocket].add(channel)

    def channel_members(self, channel: str) -> Set[WebSocket]:
        return set(self.channels.get(channel, set()))

    def connection_id(self, websocket: WebSocket) -> str:
        return self.active_connections.get(websocket, "unknown")

    def get_connection_count(self) -> int:
        """Get number of active connections"""
        return len(self.active_connections)

    async def send(self, websocket: WebSocket, event: str, data: Any):
        """Send one event to a single connection"""
        await websocket.send_text(encode_event(event, data))

    async def broadcast(self, event: str, data: Any) -> int:
        """Send an event to every connected dashboard, return delivery count"""
        message = encode_event(event, data)
        disconnected = set()
        delivered = 0
        for connection in list(self.active_connections):
            try:
                await connection.send_text(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping connection {self.connection_id(connection)}: {e}")
                disconnected.add(connection)

        # Remove disconnected connections
        for connection in disconnected:
            self.disconnect(connection)
        return delivered

    async def broadcast_new_point(self, point: dict) -> int:
        """Push a freshly ingested data point to all dashboards"""
        return await self.broadcast(EVENT_DATA_NEW, point)
