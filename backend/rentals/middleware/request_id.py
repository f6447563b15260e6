# backend/rentals/middleware/request_id.py
from __future__ import annotations

import re
import uuid
from contextvars import ContextVar
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Front-ends and the Supabase edge send either spelling.
INBOUND_HEADERS = ("X-Request-ID", "X-Correlation-ID")
OUTBOUND_HEADER = "X-Request-ID"

_SAFE_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def get_request_id() -> str | None:
    return request_id_ctx.get()


def _inbound_id(request: Request) -> str | None:
    for name in INBOUND_HEADERS:
        raw = (request.headers.get(name) or "").strip()
        if raw and _SAFE_ID.match(raw):
            return raw
    return None


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id.

    A well-formed caller id is reused so a browser action can be followed from
    the front-end into log lines and audit rows. Missing or malformed ids get
    a fresh uuid4 hex.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = _inbound_id(request) or uuid.uuid4().hex
        token = request_id_ctx.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)

        response.headers[OUTBOUND_HEADER] = rid
        return response
