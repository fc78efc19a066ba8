"""
main.py — FastAPI application for the catalog approval and BOQ service

Wires routers, session cookies, request-id / security-header middleware and
the exception handlers that render every failure as ErrorResponse JSON.

Business Rules:
- Every response carries X-Request-ID (uuid4()[:8]) and security headers
- Domain errors (BoqError) map to their status_code; HTTPException and
  validation errors keep theirs; anything else is a 500
- Schema migrations run in lifespan, skipped when TESTING is set

Called by: uvicorn (boqcore.main:app)
Depends on: routers/*, startup.py, logging_config.py, config.py
"""

import os
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .config import APP_VERSION, settings
from .exceptions import BoqError
from .logging_config import setup_logging
from .routers import boq, catalog, taxonomy, templates
from .schemas.errors import ErrorResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if os.environ.get("TESTING"):
        logger.info("TESTING mode — skipping startup migrations")
    else:
        from .startup import run_startup_migrations

        run_startup_migrations()
    logger.info("BOQ service v{} started", APP_VERSION)
    yield


app = FastAPI(title="BOQ Catalog", version=APP_VERSION, lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    https_only=settings.is_production,
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# ── Error handlers ───────────────────────────────────────────────────


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


def _error(request: Request, status_code: int, error: str, detail: list | None = None):
    body = ErrorResponse(
        error=error,
        status_code=status_code,
        request_id=_request_id(request),
        detail=detail,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(BoqError)
async def boq_error_handler(request: Request, exc: BoqError):
    if exc.status_code >= 500:
        logger.error("{} on {} {}: {}", type(exc).__name__, request.method, request.url.path, exc.message)
    return _error(request, exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(request, exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error(request, 422, "Validation error", jsonable_encoder(exc.errors()))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on {} {}", request.method, request.url.path)
    return _error(request, 500, "Internal server error")


# ── Routers ──────────────────────────────────────────────────────────

app.include_router(taxonomy.router)
app.include_router(catalog.router)
app.include_router(templates.router)
app.include_router(boq.router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": APP_VERSION}
