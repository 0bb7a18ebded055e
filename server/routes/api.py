"""API routes"""
from datetime import datetime, timezone

from context.dependencies import get_connections
from fastapi import APIRouter, Depends
from models.schemas import ApiInfoResponse, HealthResponse
from services.websocket_manager import ConnectionManager

router = APIRouter()


@router.get("/", response_model=ApiInfoResponse)
async def home():
    """API info endpoint"""
    return {
        "message": "InsightHub Analytics Server",
        "websocket": "/ws",
        "dashboard": "/api/analytics/dashboard",
        "reports": "/api/reports",
        "status": "running"
    }


@router.get("/health", response_model=HealthResponse)
async def health(connections: ConnectionManager = Depends(get_connections)):
    """Health check endpoint"""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "active_connections": connections.get_connection_count()
    }
