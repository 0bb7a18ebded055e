"""Main FastAPI application"""
from typing import Optional

from config.logger import logger
from config.settings import CORS_ORIGIN, HOST, PORT
from context.lifespan import lifespan
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from middleware.logging import log_requests
from middleware.security import add_security_headers
from models.errors import AnalyticsError, format_validation_errors
from routes import analytics_router, api_router, reports_router, websocket_router


async def analytics_error_handler(request: Request, exc: AnalyticsError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": format_validation_errors(exc.errors())})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path} crashed: {type(exc).__name__}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app(db_path: Optional[str] = None) -> FastAPI:
    """Build the application; `db_path` overrides the configured store location"""
    app = FastAPI(
        title="InsightHub Analytics Server",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.db_path = db_path

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[CORS_ORIGIN],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.middleware("http")(add_security_headers)

    # Request logging middleware
    app.middleware("http")(log_requests)

    app.add_exception_handler(AnalyticsError, analytics_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include routers
    app.include_router(api_router)
    app.include_router(analytics_router)
    app.include_router(reports_router)
    app.include_router(websocket_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HOST, port=PORT)
