"""Activity log viewer endpoints (ADMIN and MANAGER)."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query

from app.api.deps import DbSession, StaffUser
from app.schemas.activity_log import ActivityLogFilter, ActivityLogListResponse, ActivityLogOut, ActivityStats
from app.services import activity_log

router = APIRouter()


@router.get("", response_model=ActivityLogListResponse)
def list_activity(
    _staff: StaffUser,
    db: DbSession,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=500)] = 50,
    action: str | None = None,
    user_id: int | None = None,
    target_type: str | None = None,
    target_id: int | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    ip: str | None = None,
    search: str | None = None,
) -> ActivityLogListResponse:
    flt = ActivityLogFilter(
        action=action,
        user_id=user_id,
        target_type=target_type,
        target_id=target_id,
        start_date=start_date,
        end_date=end_date,
        ip=ip,
        search=search,
    )
    return activity_log.find_all(db, flt, page, per_page)


@router.get("/recent", response_model=list[ActivityLogOut])
def recent_activity(
    _staff: StaffUser, db: DbSession, limit: Annotated[int, Query(ge=1, le=100)] = 10
) -> list[ActivityLogOut]:
    return activity_log.get_recent(db, limit)


@router.get("/stats", response_model=ActivityStats)
def activity_stats(
    _staff: StaffUser,
    db: DbSession,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> ActivityStats:
    return activity_log.get_stats(db, start_date, end_date)


@router.get("/user/{user_id}", response_model=ActivityLogListResponse)
def user_activity(
    user_id: int,
    _staff: StaffUser,
    db: DbSession,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=500)] = 20,
) -> ActivityLogListResponse:
    return activity_log.find_by_user(db, user_id, page, per_page)


@router.get("/target/{target_type}/{target_id}", response_model=ActivityLogListResponse)
def target_activity(
    target_type: str,
    target_id: int,
    _staff: StaffUser,
    db: DbSession,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=500)] = 20,
) -> ActivityLogListResponse:
    return activity_log.find_by_target(db, target_type, target_id, page, per_page)
