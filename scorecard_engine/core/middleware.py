# scorecard_engine/core/middleware.py
"""
HTTP middleware: request correlation ids and one access-log line per request.
"""
from __future__ import annotations

import time
import uuid
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from scorecard_engine.core.logging import get_logger, request_id as request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with a correlation id.

    An id sent by an upstream proxy is kept, otherwise a UUID4 is minted.
    The id is visible to every log record emitted while the request runs
    and is echoed back in the response headers.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = correlation_id

        token = request_id_var.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[self.header_name] = correlation_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    """
    Log method, path, status and latency of every scorecard request.

    4xx/5xx responses are logged at warning level; an exception escaping the
    application is logged with its traceback and re-raised.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        fields = {"method": request.method, "path": request.url.path}

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
                extra={**fields, "error_type": type(exc).__name__},
                exc_info=True,
            )
            raise

        elapsed = time.perf_counter() - started
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed:.4f}"

        fields.update(status_code=response.status_code, duration_ms=round(elapsed * 1000, 2))
        if response.status_code >= 400:
            logger.warning("Scorecard request failed", extra=fields)
        else:
            logger.info("Scorecard request served", extra=fields)
        return response


def register_middlewares(app: FastAPI) -> None:
    """
    Attach the middleware stack.

    Starlette runs the last registered middleware first, so the request id
    is bound before the access log line is written.
    """
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)


__all__ = [
    "RequestIDMiddleware",
    "AccessLogMiddleware",
    "register_middlewares",
]
