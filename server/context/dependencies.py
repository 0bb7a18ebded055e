"""Request-scoped access to process-wide resources"""
from database.db import DocumentStore
from fastapi import Depends, Request, WebSocket
from services.analytics import AnalyticsService
from services.reports import ReportRegistry
from services.websocket_manager import ConnectionManager


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_connections(request: Request) -> ConnectionManager:
    return request.app.state.connections


def get_analytics_service(
    store: DocumentStore = Depends(get_store),
    connections: ConnectionManager = Depends(get_connections),
) -> AnalyticsService:
    return AnalyticsService(store, connections)


def get_report_registry(store: DocumentStore = Depends(get_store)) -> ReportRegistry:
    return ReportRegistry(store)


def get_websocket_analytics(websocket: WebSocket) -> AnalyticsService:
    state = websocket.app.state
    return AnalyticsService(state.store, state.connections)


def get_websocket_connections(websocket: WebSocket) -> ConnectionManager:
    return websocket.app.state.connections
