"""Admin dashboard counters."""

from fastapi import APIRouter

from app.api.deps import DbSession, StaffUser
from app.schemas.dashboard import DashboardStats
from app.services.dashboard import dashboard_stats

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def get_stats(_staff: StaffUser, db: DbSession) -> DashboardStats:
    return dashboard_stats(db)
