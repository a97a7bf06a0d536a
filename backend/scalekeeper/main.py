"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdFilter, CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from secure import Secure

from scalekeeper.api import api_router
from scalekeeper.core.clock import resolve_timezone
from scalekeeper.core.config import get_settings
from scalekeeper.db.session import dispose_engine

logger = logging.getLogger(__name__)

settings = get_settings()

_ALLOWED_ORIGINS = [origin for origin in settings.cors_allow_origins if origin]
if not _ALLOWED_ORIGINS:
    _ALLOWED_ORIGINS = ["http://localhost:5173"]


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info(
        "Starting %s (%s) in calendar timezone %s",
        settings.app_name,
        settings.app_env,
        resolve_timezone(settings.timezone),
    )
    try:
        yield
    finally:
        try:
            await dispose_engine()
        except Exception:  # pragma: no cover - shutdown is best effort
            logger.exception("Failed to dispose database engine")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_ALLOWED_ORIGINS,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")

_secure_headers = Secure.with_default_headers()


@app.middleware("http")
async def _apply_security_headers(request, call_next):
    response = await call_next(request)
    _secure_headers.set_headers(response)
    return response


for _logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error", ""):
    _logger = logging.getLogger(_logger_name)
    if not any(isinstance(flt, CorrelationIdFilter) for flt in _logger.filters):
        _logger.addFilter(CorrelationIdFilter(uuid_length=32))

app.include_router(api_router)


@app.get("/", include_in_schema=False)
async def root() -> dict[str, str]:
    """Return a simple welcome message."""
    return {"message": settings.app_name}
