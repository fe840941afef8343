"""Liveness endpoint reporting database reachability and preference cache size."""

from fastapi import APIRouter

from app.api.deps import DbSession, Preferences
from app.core.config import settings
from app.core.database import check_db_connected
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def get_health(db: DbSession, cache: Preferences) -> HealthResponse:
    return HealthResponse(
        environment=settings.APP_ENV,
        database="connected" if check_db_connected(db) else "disconnected",
        preferences=cache.get_stats()["total_items"],
    )
