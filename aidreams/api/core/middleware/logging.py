import time
import uuid

import structlog
from fastapi import Request

from aidreams.utils.logger import get_client_ip, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UNLOGGED_PREFIXES = ("/health", "/docs", "/redoc", "/openapi.json")


async def logging_middleware(request: Request, call_next):
    """Bind per-request log context and emit one line per request."""
    path = request.url.path
    if path.startswith(UNLOGGED_PREFIXES):
        return await call_next(request)

    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        ip_address=get_client_ip(request),
        method=request.method,
        path=path,
    )

    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000)

    log = logger.warning if response.status_code >= 500 else logger.info
    log("request", status_code=response.status_code, duration_ms=duration_ms)

    response.headers[REQUEST_ID_HEADER] = request_id
    return response
