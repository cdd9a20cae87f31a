"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status
from sqlalchemy import text

import app.modules  # noqa: F401
from app.core.config import get_settings
from app.core.database import SessionLocal, close_engine, utc_now
from app.core.metrics import build_metrics_response, instrument_http_request
from app.modules.audit.router import router as audit_router
from app.modules.goals.router import router as goals_router
from app.modules.identity.repository import IdentityRepository
from app.modules.identity.router import router as identity_router
from app.modules.identity.service import IdentityService
from app.modules.lesson_requests.router import router as lesson_requests_router
from app.modules.lessons.router import router as lessons_router
from app.modules.lifecycle.router import router as lifecycle_router
from app.modules.quotes.router import router as quotes_router
from app.modules.teachers.router import router as teachers_router
from app.shared.exceptions import register_exception_handlers

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Application startup and shutdown hooks."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger.info("Starting %s", settings.app_name)

    async with SessionLocal() as session:
        try:
            service = IdentityService(IdentityRepository(session))
            await service.ensure_default_roles()
            await session.commit()
            logger.info("Default roles ensured")
        except Exception:
            await session.rollback()
            logger.exception("Failed during startup initialization")
            raise

    yield

    logger.info("Shutting down %s", settings.app_name)
    await close_engine()


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)
app.middleware("http")(instrument_http_request)

register_exception_handlers(app)

app.include_router(identity_router, prefix=settings.api_prefix)
app.include_router(teachers_router, prefix=settings.api_prefix)
app.include_router(lesson_requests_router, prefix=settings.api_prefix)
app.include_router(quotes_router, prefix=settings.api_prefix)
app.include_router(lessons_router, prefix=settings.api_prefix)
app.include_router(goals_router, prefix=settings.api_prefix)
app.include_router(lifecycle_router, prefix=settings.api_prefix)
app.include_router(audit_router, prefix=settings.api_prefix)


@app.get("/health")
async def healthcheck() -> dict[str, str]:
    """Liveness endpoint."""
    return {"status": "ok"}


async def _is_database_ready() -> bool:
    """Return True if DB accepts basic queries."""
    try:
        async with SessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database readiness check failed")
        return False


@app.get("/ready")
async def readiness_check() -> dict[str, str]:
    """Report whether the service can reach its database."""
    if not await _is_database_ready():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not ready",
        )
    return {
        "status": "ready",
        "service": settings.app_name,
        "database": "ok",
        "timestamp": utc_now().isoformat(),
    }


@app.get("/metrics", include_in_schema=False)
async def metrics_endpoint(_: Request) -> Response:
    """Prometheus metrics endpoint."""
    return build_metrics_response()
