# backend/rentals/main.py
from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .clients.supabase_storage import require_supabase_config
from .config import settings
from .logging_config import configure_logging
from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.health import router as health_router

from .routers.properties import router as properties_router
from .routers.section_reviews import router as section_reviews_router
from .routers.tasks import router as tasks_router
from .routers.visits import router as visits_router
from .routers.tenants import router as tenants_router
from .routers.rentals import router as rentals_router
from .routers.documents import router as documents_router
from .routers.kanban import router as kanban_router

from .routers.leads import router as leads_router
from .routers.lead_properties import router as lead_properties_router
from .routers.lead_documents import router as lead_documents_router

from .routers.places import router as places_router
from .routers.admin_users import router as admin_users_router
from .routers.events import router as events_router
from .routers.audit import router as audit_router

log = logging.getLogger(__name__)

API_PREFIX = "/api"


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = ".".join(str(x) for x in first.get("loc", ()) if x not in ("body", "query", "path", "form"))
        msg = first.get("msg") or "Invalid request"
        return JSONResponse(
            status_code=400,
            content={"error": f"{loc}: {msg}" if loc else msg, "details": _jsonable_errors(errors)},
        )

    @app.exception_handler(SQLAlchemyError)
    async def _db_error(request: Request, exc: SQLAlchemyError):
        log.error("database error", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Database error", "message": str(exc)})

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        log.error("unhandled error", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error", "message": str(exc)})


def _jsonable_errors(errors: list) -> list[dict]:
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")} for e in errors]


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Rentals Backend", version=settings.app_version)

    # RequestID wraps the access log (last added is outermost)
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_error_handlers(app)

    # Core
    app.include_router(health_router, prefix=API_PREFIX)

    guarded = [Depends(require_supabase_config)]

    # Properties pipeline
    app.include_router(properties_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(section_reviews_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(tasks_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(visits_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(tenants_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(rentals_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(documents_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(kanban_router, prefix=API_PREFIX, dependencies=guarded)

    # Leads
    app.include_router(leads_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(lead_properties_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(lead_documents_router, prefix=API_PREFIX, dependencies=guarded)

    # Admin + notifications
    app.include_router(places_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(admin_users_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(events_router, prefix=API_PREFIX, dependencies=guarded)
    app.include_router(audit_router, prefix=API_PREFIX, dependencies=guarded)

    return app


app = create_app()
