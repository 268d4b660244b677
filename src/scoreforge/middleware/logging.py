# src/scoreforge/middleware/logging.py

"""Request/response logging middleware for ScoreForge API."""

import logging
import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("scoreforge.api")

REQUEST_ID_HEADER = "X-Request-ID"


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its outcome and latency.

    A caller-supplied X-Request-ID is reused; otherwise a short random id is
    generated. Either way it is stored on ``request.state.request_id`` and
    echoed in the response headers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        target = request.url.path
        if request.query_params:
            target = f"{target}?{request.query_params}"
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }

        logger.debug(
            "request_id=%s started %s %s",
            request_id,
            request.method,
            target,
            extra={
                **context,
                "client_ip": request.client.host if request.client else "unknown",
            },
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_id=%s %s %s raised after %sms",
                request_id,
                request.method,
                target,
                _elapsed_ms(started),
                extra=context,
            )
            raise

        duration_ms = _elapsed_ms(started)
        # 5xx responses were already rendered by an exception handler
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "request_id=%s %s %s status=%d duration=%sms",
            request_id,
            request.method,
            target,
            response.status_code,
            duration_ms,
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response  # type: ignore[no-any-return]
