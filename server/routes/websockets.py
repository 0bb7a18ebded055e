"""WebSocket routes"""
import asyncio
import json
from datetime import datetime, timezone

from config.logger import logger
from config.settings import HEARTBEAT_INTERVAL_SECONDS
from context.dependencies import get_websocket_analytics, get_websocket_connections
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from models.errors import AnalyticsError
from services.analytics import AnalyticsService
from services.websocket_manager import (
    EVENT_CONNECTED,
    EVENT_ERROR,
    EVENT_HEARTBEAT,
    EVENT_STREAM,
    EVENT_STREAM_RESPONSE,
    EVENT_SUBSCRIBE,
    ConnectionManager,
    dataset_channel,
)

router = APIRouter()


async def on_subscribe(connections: ConnectionManager, websocket: WebSocket, dataset_id: str):
    """Join the dataset channel; nothing is sent back"""
    connections.subscribe(websocket, dataset_channel(dataset_id))
    logger.info(f"Connection {connections.connection_id(websocket)} subscribed to {dataset_id}")


async def on_stream_request(
    connections: ConnectionManager,
    service: AnalyticsService,
    websocket: WebSocket,
    dataset_id: str,
):
    """Reply to the requester only with the most recent points of a dataset"""
    try:
        points = await service.get_stream_snapshot(dataset_id)
    except AnalyticsError as e:
        await connections.send(websocket, EVENT_ERROR, e.message)
        return
    await connections.send(
        websocket,
        EVENT_STREAM_RESPONSE,
        [point.to_document() for point in points],
    )


async def handle_message(
    connections: ConnectionManager,
    service: AnalyticsService,
    websocket: WebSocket,
    raw: str,
):
    """Dispatch one client event; problems are reported as `error` events"""
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        await connections.send(websocket, EVENT_ERROR, "Invalid JSON message")
        return

    if not isinstance(message, dict) or "event" not in message:
        await connections.send(websocket, EVENT_ERROR, "Message must be an object with an 'event' field")
        return

    event = message["event"]
    dataset_id = message.get("data")
    if event not in (EVENT_SUBSCRIBE, EVENT_STREAM):
        await connections.send(websocket, EVENT_ERROR, f"Unknown event: {event}")
        return
    if not isinstance(dataset_id, str):
        await connections.send(websocket, EVENT_ERROR, f"{event} expects a dataset id string")
        return

    if event == EVENT_SUBSCRIBE:
        await on_subscribe(connections, websocket, dataset_id)
    else:
        await on_stream_request(connections, service, websocket, dataset_id)


@router.websocket("/ws")
async def websocket_dashboard(
    websocket: WebSocket,
    connections: ConnectionManager = Depends(get_websocket_connections),
    service: AnalyticsService = Depends(get_websocket_analytics),
):
    """
    WebSocket endpoint for dashboards.
    Receives `data:new` broadcasts and answers dataset stream requests.
    """
    client_host = websocket.client.host if websocket.client else "Unknown"
    await websocket.accept()
    connection_id = connections.connect(websocket)
    logger.info(f"Dashboard {connection_id} CONNECTED from {client_host} (Total: {connections.get_connection_count()})")

    # Heartbeat task to keep connection alive
    async def heartbeat():
        """Send periodic heartbeat to keep connection alive"""
        while True:
            await asyncio.sleep(HEARTBEAT_INTERVAL_SECONDS)
            try:
                await connections.send(
                    websocket,
                    EVENT_HEARTBEAT,
                    {"timestamp": datetime.now(timezone.utc).isoformat()},
                )
            except Exception:
                break

    heartbeat_task = asyncio.create_task(heartbeat())

    try:
        await connections.send(websocket, EVENT_CONNECTED, {"id": connection_id})
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"Dashboard {connection_id} DISCONNECTED")
                break

            data = message.get("text")
            if data is None:
                await connections.send(websocket, EVENT_ERROR, "Only text frames are accepted")
                continue
            logger.debug(f"Received from Dashboard {connection_id}: {data[:150]}")
            await handle_message(connections, service, websocket, data)
    except WebSocketDisconnect:
        logger.info(f"Dashboard {connection_id} DISCONNECTED")
    except Exception as e:
        logger.error(f"Dashboard {connection_id} ERROR: {type(e).__name__}: {e}", exc_info=True)
    finally:
        heartbeat_task.cancel()
        try:
            await heartbeat_task
        except asyncio.CancelledError:
            pass
        connections.disconnect(websocket)
        logger.info(f"Active dashboards: {connections.get_connection_count()}")
