from routes.analytics import router as analytics_router
from routes.api import router as api_router
from routes.reports import router as reports_router
from routes.websockets import router as websocket_router

__all__ = ["analytics_router", "api_router", "reports_router", "websocket_router"]
