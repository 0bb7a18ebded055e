"""Application configuration"""
import os

from dotenv import load_dotenv

load_dotenv()

# Document store
DB_PATH = os.getenv("INSIGHTHUB_DB_PATH", "insighthub.db")

# HTTP server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
CORS_ORIGIN = os.getenv("CORS_ORIGIN", "http://localhost:3000")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Query limits
DASHBOARD_LATEST_LIMIT = 100
DATASET_HISTORY_LIMIT = 1000
STREAM_RESPONSE_LIMIT = 50

# Dashboard client
CLIENT_BUFFER_SIZE = 100

# WebSocket settings
HEARTBEAT_INTERVAL_SECONDS = 30
