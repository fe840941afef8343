"""Audit trail: record actions with request context and query them back."""

import logging
import math
from datetime import datetime
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload
from starlette.requests import Request

from app.models import ActivityAction, ActivityLog, User
from app.schemas.activity_log import (
    ActionCount,
    ActivityLogFilter,
    ActivityLogListResponse,
    ActivityLogOut,
    ActivityStats,
    UserActivityCount,
)
from app.schemas.auth import CurrentUser

logger = logging.getLogger(__name__)

TOP_USERS_LIMIT = 10


def client_ip(request: Request) -> str | None:
    """First hop of X-Forwarded-For, then X-Real-IP, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else None


def create(db: Session, **fields: Any) -> ActivityLog:
    entry = ActivityLog(**fields)
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def log(
    db: Session,
    action: ActivityAction,
    request: Request,
    actor: CurrentUser | User | None = None,
    target_type: str | None = None,
    target_id: int | None = None,
    target_name: str | None = None,
    metadata: dict[str, Any] | None = None,
    message: str | None = None,
) -> ActivityLog:
    """Record one action, filling actor and request fields from the arguments."""
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    entry = create(
        db,
        action=action.value,
        user_id=actor.id if actor else None,
        user_email=actor.email if actor else None,
        user_name=actor.name if actor else None,
        target_type=target_type,
        target_id=target_id,
        target_name=target_name,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        method=request.method,
        path=path,
        extra=metadata,
        message=message,
    )
    logger.debug("Activity recorded: %s user_id=%s", action.value, entry.user_id)
    return entry


def _filtered(db: Session, flt: ActivityLogFilter | None):
    query = db.query(ActivityLog)
    if flt is None:
        return query
    if flt.action:
        query = query.filter(ActivityLog.action == flt.action)
    if flt.user_id is not None:
        query = query.filter(ActivityLog.user_id == flt.user_id)
    if flt.target_type:
        query = query.filter(ActivityLog.target_type == flt.target_type)
    if flt.target_id is not None:
        query = query.filter(ActivityLog.target_id == flt.target_id)
    if flt.ip:
        query = query.filter(ActivityLog.ip.contains(flt.ip))
    if flt.start_date:
        query = query.filter(ActivityLog.created_at >= flt.start_date)
    if flt.end_date:
        query = query.filter(ActivityLog.created_at <= flt.end_date)
    if flt.search:
        query = query.filter(
            or_(
                ActivityLog.user_email.contains(flt.search),
                ActivityLog.user_name.contains(flt.search),
                ActivityLog.message.contains(flt.search),
            )
        )
    return query


def find_all(
    db: Session, flt: ActivityLogFilter | None = None, page: int = 1, per_page: int = 50
) -> ActivityLogListResponse:
    page = max(page, 1)
    per_page = max(per_page, 1)
    query = _filtered(db, flt)
    total = query.count()
    rows = (
        query.options(joinedload(ActivityLog.user))
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return ActivityLogListResponse(
        data=[ActivityLogOut.model_validate(row) for row in rows],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=math.ceil(total / per_page),
    )


def find_by_user(db: Session, user_id: int, page: int = 1, per_page: int = 20) -> ActivityLogListResponse:
    return find_all(db, ActivityLogFilter(user_id=user_id), page, per_page)


def find_by_target(
    db: Session, target_type: str, target_id: int, page: int = 1, per_page: int = 20
) -> ActivityLogListResponse:
    return find_all(db, ActivityLogFilter(target_type=target_type, target_id=target_id), page, per_page)


def get_recent(db: Session, limit: int = 10) -> list[ActivityLogOut]:
    rows = (
        db.query(ActivityLog)
        .options(joinedload(ActivityLog.user))
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(max(limit, 1))
        .all()
    )
    return [ActivityLogOut.model_validate(row) for row in rows]


def get_stats(
    db: Session, start_date: datetime | None = None, end_date: datetime | None = None
) -> ActivityStats:
    """Total count, counts per action and the ten most active users in the window."""
    flt = ActivityLogFilter(start_date=start_date, end_date=end_date)
    total = _filtered(db, flt).count()

    count = func.count(ActivityLog.id)
    by_action = (
        _filtered(db, flt)
        .with_entities(ActivityLog.action, count)
        .group_by(ActivityLog.action)
        .order_by(count.desc(), ActivityLog.action)
        .all()
    )
    by_user = (
        _filtered(db, flt)
        .filter(ActivityLog.user_id.is_not(None))
        .with_entities(ActivityLog.user_id, count)
        .group_by(ActivityLog.user_id)
        .order_by(count.desc(), ActivityLog.user_id)
        .limit(TOP_USERS_LIMIT)
        .all()
    )
    user_ids = [user_id for user_id, _ in by_user]
    users = {u.id: u for u in db.query(User).filter(User.id.in_(user_ids)).all()} if user_ids else {}

    return ActivityStats(
        total_logs=total,
        action_stats=[ActionCount(action=action, count=n) for action, n in by_action],
        top_users=[
            UserActivityCount(
                user_id=user_id,
                email=users[user_id].email if user_id in users else None,
                name=users[user_id].name if user_id in users else None,
                count=n,
            )
            for user_id, n in by_user
        ],
    )
