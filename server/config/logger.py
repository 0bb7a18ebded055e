"""Logging configuration"""
import logging
import sys

from config.settings import LOG_LEVEL

# Configure logging format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Configure root logger (console only, no file)
logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT,
    datefmt=DATE_FORMAT,
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

# Create logger for application
logger = logging.getLogger("insighthub")
logger.setLevel(LOG_LEVEL)
