"""
Request context middleware.

Binds the request ID (accepted from X-Request-ID or generated) and an
HTTP-level operation name to the log context, so use cases called by
the embedding routers log under the request that triggered them.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from src.logging_config import get_logger, log_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SLOW_REQUEST_MS = 1000


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        with log_context(request_id=request_id, operation=f"{request.method} {request.url.path}"):
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000, 1)

            response.headers[REQUEST_ID_HEADER] = request_id
            log = logger.warning if duration_ms > SLOW_REQUEST_MS else logger.debug
            log(
                "Request finished",
                extra={"status_code": response.status_code, "duration_ms": duration_ms},
            )
            return response
