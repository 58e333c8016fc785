"""Middleware configuration for FastAPI application"""
import json
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import Request

from webhook_ledger.core.logging import api_access_logger

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """Best-effort client address, honouring X-Forwarded-For from a proxy"""
    client_ip = request.headers.get("X-Forwarded-For", "").split(",")[0].strip()
    if not client_ip:
        client_ip = request.client.host if request.client else "unknown"
    return client_ip


def log_api_access(
    request: Request,
    status_code: int = 200,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None
):
    """Log detailed API access information"""
    log_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "method": request.method,
        "path": request.url.path,
        "query": str(request.url.query) if request.url.query else None,
        "client_ip": get_client_ip(request),
        "user_agent": request.headers.get("User-Agent", "unknown"),
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2) if duration_ms is not None else None,
        "error": error
    }

    if error or status_code >= 400:
        api_access_logger.warning(f"API Access: {json.dumps(log_data)}")
    else:
        api_access_logger.info(f"API Access: {json.dumps(log_data)}")


async def access_log_middleware(request: Request, call_next):
    """Log every request after it completes

    Never touches the request body, so the raw-byte capture on the
    webhook route sees exactly what was sent.
    """
    started = time.perf_counter()
    status_code = 500
    error = None

    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    except Exception as e:
        error = str(e)
        raise
    finally:
        log_api_access(
            request,
            status_code=status_code,
            duration_ms=(time.perf_counter() - started) * 1000,
            error=error
        )
