"""Request logging middleware"""
import time

from config.logger import logger
from fastapi import Request


async def log_requests(request: Request, call_next):
    """Access log: one line per HTTP request, errors (4xx, 5xx) as warnings"""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    line = f"{request.method} {request.url.path} - Status: {response.status_code} ({elapsed_ms:.1f} ms)"
    if response.status_code >= 400:
        logger.warning(line)
    else:
        logger.info(line)
    return response
