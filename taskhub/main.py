# taskhub/main.py
# PURPOSE: assemble the ASGI app: routers, error handlers, middleware, metrics.

from contextlib import asynccontextmanager
import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from . import db_models  # noqa: F401 (register tables on Base.metadata)
from .api.errors import register_exception_handlers
from .api.router import api_router
from .config import settings
from .db import Base, engine
from .logging_utils import setup_logging
from .rate_limit import limiter, _rate_limit_exceeded_handler
from .routers import ops

logger = logging.getLogger(__name__)
access_log = logging.getLogger("taskhub.request")

# Sent on every response unless a route already set them.
HARDENING_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}
HSTS_VALUE = "max-age=15552000; includeSubDomains; preload"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    if settings.DB_AUTO_CREATE:
        Base.metadata.create_all(bind=engine)
    logger.info("taskhub started environment=%s", settings.ENVIRONMENT)
    yield
    engine.dispose()


app = FastAPI(
    title="Taskhub API",
    version="1.0.0",
    description=(
        "Multi-user task management. "
        "Log in at /auth/login and send the token as `Authorization: Bearer <token>`."
    ),
    openapi_tags=[
        {"name": "auth", "description": "Login and the current user."},
        {"name": "users", "description": "Registration and profile."},
        {"name": "tasks", "description": "Owner-scoped CRUD with filters and pages."},
    ],
    lifespan=lifespan,
)

app.include_router(ops.router)
app.include_router(api_router)
register_exception_handlers(app)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Request id in and out, hardening headers, one access-log line."""
    started = time.perf_counter()
    req_id = request.headers.get(settings.REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = req_id

    response = await call_next(request)

    headers = response.headers
    headers.setdefault(settings.REQUEST_ID_HEADER, req_id)
    for name, value in HARDENING_HEADERS.items():
        headers.setdefault(name, value)
    if settings.SECURITY_CSP:
        headers["Content-Security-Policy"] = settings.SECURITY_CSP
    if settings.SECURITY_ENABLE_HSTS:
        headers.setdefault("Strict-Transport-Security", HSTS_VALUE)

    access_log.info(
        "method=%s path=%s status=%s duration_ms=%d request_id=%s",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
        req_id,
    )
    return response


Instrumentator().instrument(app).expose(app, include_in_schema=False)
