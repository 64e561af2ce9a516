"""Access logging with request correlation."""

import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .context import bind_request, current_actor
from .pipeline import get_logger

REQUEST_ID_HEADER = "x-request-id"

logger = get_logger("requests")


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Binds a request id, echoes it back and logs one line per request."""

    async def dispatch(self, request: Request, call_next):
        request_id = bind_request(request.headers.get(REQUEST_ID_HEADER))
        started = time.perf_counter()

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "%s %s -> %s",
            request.method,
            request.url.path,
            response.status_code,
            extra={
                "status_code": response.status_code,
                "duration_ms": elapsed_ms,
                "user_id": current_actor(),
            },
        )
        return response
