"""Refurb Ops Dashboard API.

Operational views (reorder queue, sell-through temperature, reprice
queue, inventory health, pulse KPIs) over the sales, P&L and inventory
exports the warehouse system emails out every night.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from opsboard.routes import api_router
from opsboard.routes.errors import ApiError
from opsboard.services.scheduler import EmailFetchScheduler
from opsboard.settings import Settings, get_settings
from opsboard.stores.postgres import init_db, close_db, ping_db
from opsboard.stores.redis import init_redis, close_redis

logger = logging.getLogger("uvicorn.error")


def _error_response(status_code: int, code: str, message: str, detail: object = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, "detail": detail}},
    )


async def _connect_backends() -> None:
    # Both are optional at boot: views fail per-request without Postgres,
    # locks degrade to unlocked runs without Redis.
    try:
        await init_db()
        await ping_db()
        logger.info("Postgres connected")
    except Exception:
        logger.exception("Postgres init failed")

    try:
        await init_redis()
    except Exception:
        logger.exception("Redis init failed")


def _start_scheduler(settings: Settings) -> EmailFetchScheduler | None:
    if not (settings.email_fetch_enabled and settings.imap_configured):
        logger.info("[email] Scheduler disabled (EMAIL_FETCH_ENABLED off or IMAP not configured)")
        return None
    scheduler = EmailFetchScheduler(settings=settings)
    scheduler.start()
    return scheduler


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Connect backends and run the email scheduler for the app's lifetime."""
    await _connect_backends()
    scheduler = _start_scheduler(get_settings())
    app.state.email_scheduler = scheduler

    yield

    if scheduler is not None:
        await scheduler.stop()
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Build the dashboard API app."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Operations dashboard for a refurbished electronics reseller",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
        return _error_response(exc.status_code, exc.code, exc.message, exc.detail)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = str(exc) if settings.debug else "Internal server error"
        return _error_response(500, "INTERNAL_ERROR", message)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Liveness probe."""
        return {"ok": True}

    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("opsboard.main:app", host=settings.host, port=settings.port, reload=settings.debug)
