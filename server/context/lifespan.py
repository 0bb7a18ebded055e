"""Application lifespan management"""
from contextlib import asynccontextmanager

from config.logger import logger
from config.settings import DB_PATH
from database.db import DocumentStore
from services.websocket_manager import ConnectionManager


@asynccontextmanager
async def lifespan(app):
    """
    Manage application lifespan (startup and shutdown).

    Opens the document store and creates the connection registry; both
    live on `app.state` until shutdown.
    """
    # Startup
    logger.info("Starting application...")
    store = DocumentStore(getattr(app.state, "db_path", None) or DB_PATH)
    await store.open()
    app.state.store = store
    app.state.connections = ConnectionManager()
    logger.info("Application started successfully")

    yield  # Application is running

    # Shutdown
    logger.info("Shutting down application...")
    await store.close()
    logger.info("Application shut down successfully")
