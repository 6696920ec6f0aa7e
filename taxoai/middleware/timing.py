"""
Request timing and access logging
"""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from taxoai.core.logging import log


class TimingMiddleware(BaseHTTPMiddleware):
    """Add X-Process-Time and log one access line per request"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        log.info(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(process_time * 1000, 2),
        )
        return response
