"""
Request middleware: request IDs, access logging and recovery
"""

import logging
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from ..logging_config import log_action, reset_request_id, set_request_id
from .errors import INTERNAL_ERROR_MESSAGE, error_response


REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Attaches a request ID to every request and response, logs one access
    line per request and turns unhandled exceptions into a 500 error body.

    The request ID is taken from the X-Request-ID header when the caller
    sends one, otherwise a UUID4 is generated.
    """

    def __init__(self, app, logger: Optional[logging.Logger] = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger("transfer_system.api")

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = set_request_id(request_id)
        start = time.perf_counter()
        failed = False

        try:
            try:
                response = await call_next(request)
            except Exception:
                failed = True
                log_action(
                    self.logger, "error", "panic recovered",
                    action="recover", resource=request.url.path, exc_info=True
                )
                response = error_response(request_id, 500, "internal_error", INTERNAL_ERROR_MESSAGE)

            response.headers[REQUEST_ID_HEADER] = request_id

            fields = {
                "status": response.status_code,
                "latency_ms": round((time.perf_counter() - start) * 1000, 3),
                "method": request.method,
                "path": request.url.path,
                "query": request.url.query,
                "client_ip": request.client.host if request.client else None,
            }
            if failed or response.status_code >= 500:
                log_action(self.logger, "error", "request completed with errors",
                           action="http_request", extra=fields)
            else:
                log_action(self.logger, "info", "request completed",
                           action="http_request", extra=fields)
            return response
        finally:
            reset_request_id(token)
