import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from newsroom.config import get_settings
from newsroom.database import async_session_factory, engine
from newsroom.errors import register_error_handlers

settings = get_settings()


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


configure_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

_STARTED_AT = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown events."""
    # Startup: create all database tables if they don't exist
    from newsroom.database import Base
    from newsroom import models  # noqa: F401 - Import models to register them with Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Newsroom API started")
    yield
    # Shutdown: dispose the async engine connection pool
    await engine.dispose()


app = FastAPI(
    title="Newsroom",
    description="Bilingual (English/Bengali) publishing backend",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# --- Router includes ---
from newsroom.api.catalog import router as catalog_router  # noqa: E402
from newsroom.api.search import router as search_router  # noqa: E402

app.include_router(search_router, prefix=settings.API_PREFIX)
app.include_router(catalog_router, prefix=settings.API_PREFIX)


async def _ping_database() -> str:
    async with async_session_factory() as session:
        result = await session.execute(text("SELECT version()"))
        return str(result.scalar())


@app.get(f"{settings.API_PREFIX}/health", tags=["health"])
async def health_check() -> JSONResponse:
    """Health check endpoint.

    Reports uptime and whether the database answers, with its round-trip
    latency. Responds 500 when the database is unreachable.
    """
    started = time.perf_counter()
    body = {
        "ok": True,
        "time": datetime.now(UTC).isoformat(),
        "uptimeSec": round(time.monotonic() - _STARTED_AT, 3),
    }
    try:
        version = await _ping_database()
    except Exception:
        logger.exception("Health check: database ping failed")
        body.update(ok=False, latencyMs=int((time.perf_counter() - started) * 1000), db={"ok": False})
        return JSONResponse(status_code=500, content=body)

    body.update(latencyMs=int((time.perf_counter() - started) * 1000), db={"ok": True, "version": version})
    return JSONResponse(content=body)
