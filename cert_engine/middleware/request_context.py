"""Request context + instrumentation middleware.

For every request:
  1. take X-Request-ID from the client or mint a UUID, store it in a
     ContextVar so every log line of the request carries it
  2. time the request and track it in the in-flight gauge
  3. record http_requests_total / http_request_duration_seconds
  4. log one summary line, echo X-Request-ID and any X-RateLimit-* headers
     set by the rate-limit dependency

The endpoint label uses the matched route template
(/v1/certificates/verify/{code}) rather than the raw path, otherwise every
verification code would become its own Prometheus series.  The template is
read after the handler runs, from the route the router stored in the scope.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from cert_engine.core.logging import request_id_var, user_id_var
from cert_engine.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

logger = logging.getLogger(__name__)

_UNMATCHED = "<unmatched>"


def _route_template(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or _UNMATCHED


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)
        user_id_var.set(None)

        # Scrapes of /metrics would otherwise dominate the request counters
        if request.url.path == "/metrics":
            return await call_next(request)

        status_code = "500"
        ACTIVE_REQUESTS.inc()
        start = time.monotonic()
        try:
            response = await call_next(request)
            status_code = str(response.status_code)
        finally:
            duration = time.monotonic() - start
            ACTIVE_REQUESTS.dec()
            endpoint = _route_template(request)
            REQUEST_COUNT.labels(
                method=request.method, endpoint=endpoint, status_code=status_code
            ).inc()
            REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(
                duration
            )

        duration_ms = round(duration * 1000, 1)
        logger.info(
            "%s %s → %s (%.1fms)",
            request.method,
            endpoint,
            status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": endpoint,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "user_id": getattr(request.state, "user_id", None),
            },
        )
        response.headers["X-Request-ID"] = req_id
        for name, value in getattr(request.state, "rate_limit_headers", {}).items():
            response.headers.setdefault(name, value)
        return response
