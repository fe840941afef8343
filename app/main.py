"""FastAPI application entrypoint. Wiring, lifespan and middleware only."""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_exception_handlers
from app.api.routes import router as api_router
from app.core.config import settings
from app.core.database import SessionLocal
from app.core.logging import configure_logging
from app.services.preferences import PreferenceCache, run_auto_refresh

configure_logging(settings)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the preference cache before serving; run periodic reloads if configured."""
    cache = PreferenceCache(SessionLocal)
    cache.load()
    app.state.preference_cache = cache

    refresh_task = None
    if settings.PREFERENCE_REFRESH_INTERVAL_SEC > 0:
        refresh_task = asyncio.create_task(
            run_auto_refresh(cache, settings.PREFERENCE_REFRESH_INTERVAL_SEC)
        )
        logger.info(
            "Preference auto refresh every %ss", settings.PREFERENCE_REFRESH_INTERVAL_SEC
        )
    try:
        yield
    finally:
        if refresh_task is not None:
            refresh_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await refresh_task


app = FastAPI(
    title="Backoffice API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Backoffice API"}
