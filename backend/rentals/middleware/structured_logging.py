# backend/rentals/middleware/structured_logging.py
from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..config import settings

log = logging.getLogger("rentals.access")

_QUIET_PATHS = ("/api/health",)


def _route_ids(request: Request) -> dict[str, str]:
    """Pull the property / lead id out of the matched route, if any."""
    params = request.path_params or {}
    out: dict[str, str] = {}
    if "property_unique_id" in params:
        out["property_id"] = str(params["property_unique_id"])
    if "leads_unique_id" in params:
        out["lead_id"] = str(params["leads_unique_id"])
    return out


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """
    Access log: one record per request, with method, path, status and
    duration as structured extras.

    Health checks are logged at DEBUG so they do not drown the pipeline
    traffic. 5xx responses are logged at ERROR.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 1)

            if status_code >= 500:
                level = logging.ERROR
            elif request.url.path.startswith(_QUIET_PATHS):
                level = logging.DEBUG
            else:
                level = logging.INFO

            extra = {
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_ms": elapsed_ms,
                "user_email": request.headers.get(settings.dev_header_user_email),
                **_route_ids(request),
            }
            log.log(level, "%s %s -> %s", request.method, request.url.path, status_code, extra=extra)
