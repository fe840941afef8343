"""Counters for the admin dashboard."""

from datetime import UTC, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models import ActivityLog, Attachment, User
from app.schemas.dashboard import DashboardStats

BYTES_PER_GB = 1024**3


def dashboard_stats(db: Session, now: datetime | None = None) -> DashboardStats:
    now = now or datetime.now(UTC)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    total_bytes = db.query(func.coalesce(func.sum(Attachment.file_size), 0)).scalar() or 0
    return DashboardStats(
        total_users=db.query(func.count(User.id)).scalar() or 0,
        total_files=db.query(func.count(Attachment.id)).scalar() or 0,
        total_storage_gb=round(int(total_bytes) / BYTES_PER_GB, 2),
        today_activities=(
            db.query(func.count(ActivityLog.id)).filter(ActivityLog.created_at >= today).scalar() or 0
        ),
    )
