# backend/rentals/logging_config.py
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .config import settings
from .middleware.request_id import get_request_id

# Attributes every LogRecord carries; anything else came in through extra=.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("x", 0, "x", 0, "x", None, None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """
    Renders records as single-line JSON.

    Every ``extra={...}`` key a caller passes (property_id, lead_id, bucket,
    section_ids, ...) lands at the top level, so the pipeline logs can be
    filtered per property or lead without a fixed field list.
    """

    def __init__(self, *, env: str, version: str) -> None:
        super().__init__()
        self.env = env
        self.version = version

    def format(self, record: logging.LogRecord) -> str:
        doc: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "env": self.env,
            "version": self.version,
        }

        rid = get_request_id()
        if rid:
            doc["request_id"] = rid

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                doc[key] = value

        if record.exc_info:
            doc["exc"] = self.formatException(record.exc_info)

        return json.dumps(doc, ensure_ascii=False, default=str)


def configure_logging() -> None:
    root = logging.getLogger()
    # idempotent: create_app() runs once per TestClient and per reload
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter(env=settings.app_env, version=settings.app_version))
    root.addHandler(handler)
    root.setLevel(settings.log_level.upper())

    # uvicorn's own access line duplicates StructuredLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    for name, level in (("sqlalchemy.engine", settings.sql_log_level), ("httpx", settings.httpx_log_level)):
        logging.getLogger(name).setLevel(level.upper())
