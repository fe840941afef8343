"""Admin user management: list, inspect, create, update, delete and counts by role."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.security import hash_password
from app.models import Attachment, Role, User
from app.schemas.user import (
    RoleCount,
    UserCreate,
    UserListItem,
    UsersListResponse,
    UserStats,
    UserUpdate,
)
from app.services.errors import BadRequest, Conflict, Forbidden, NotFound

logger = logging.getLogger(__name__)


def _email_taken(db: Session, email: str, exclude_id: int | None = None) -> bool:
    query = db.query(User.id).filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def _username_taken(db: Session, username: str, exclude_id: int | None = None) -> bool:
    query = db.query(User.id).filter(User.username == username)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def list_users(db: Session) -> UsersListResponse:
    """All users, newest first, with the number of files each has uploaded."""
    file_counts = dict(
        db.query(Attachment.user_id, func.count(Attachment.id))
        .filter(Attachment.user_id.is_not(None))
        .group_by(Attachment.user_id)
        .all()
    )
    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    items = [
        UserListItem.model_validate(u).model_copy(update={"file_count": file_counts.get(u.id, 0)})
        for u in users
    ]
    return UsersListResponse(data=items, total=len(items))


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found.")
    return user


def create_user(db: Session, body: UserCreate) -> User:
    if not body.email and not body.username:
        raise BadRequest("Either email or username is required.")
    if body.email and _email_taken(db, body.email):
        raise Conflict("Email is already in use.")
    if body.username and _username_taken(db, body.username):
        raise Conflict("Username is already in use.")

    user = User(
        email=body.email,
        username=body.username,
        name=body.name,
        role=body.role.value,
        password_hash=hash_password(body.password),
        must_change_password=body.must_change_password,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User created: id=%s role=%s", user.id, user.role)
    return user


def update_user(db: Session, user_id: int, body: UserUpdate, actor_role: str | None = None) -> User:
    """
    Apply a partial update. A MANAGER cannot grant the ADMIN role.
    Setting a password also clears must_change_password.
    """
    user = get_user(db, user_id)
    if actor_role == Role.MANAGER.value and body.role == Role.ADMIN:
        raise Forbidden("Managers cannot assign the ADMIN role.")
    if body.email and body.email != user.email and _email_taken(db, body.email, exclude_id=user.id):
        raise Conflict("Email is already in use.")
    if (
        body.username
        and body.username != user.username
        and _username_taken(db, body.username, exclude_id=user.id)
    ):
        raise Conflict("Username is already in use.")

    if body.email is not None:
        user.email = body.email
    if body.username is not None:
        user.username = body.username
    if body.name is not None:
        user.name = body.name
    if body.role is not None:
        user.role = body.role.value
    if body.is_active is not None:
        user.is_active = body.is_active
    if body.password:
        user.password_hash = hash_password(body.password)
        user.must_change_password = False
    db.commit()
    db.refresh(user)
    logger.info("User updated: id=%s", user.id)
    return user


def delete_user(db: Session, user_id: int) -> None:
    """Delete a user with no uploaded files."""
    user = get_user(db, user_id)
    file_count = db.query(func.count(Attachment.id)).filter(Attachment.user_id == user_id).scalar()
    if file_count:
        raise BadRequest(
            f"User has {file_count} uploaded file(s). Delete the files first."
        )
    db.delete(user)
    db.commit()
    logger.info("User deleted: id=%s", user_id)


def user_stats(db: Session) -> UserStats:
    total = db.query(func.count(User.id)).scalar() or 0
    active = db.query(func.count(User.id)).filter(User.is_active.is_(True)).scalar() or 0
    admins = db.query(func.count(User.id)).filter(User.role == Role.ADMIN.value).scalar() or 0
    by_role = db.query(User.role, func.count(User.id)).group_by(User.role).order_by(User.role).all()
    return UserStats(
        total_users=total,
        active_users=active,
        admin_count=admins,
        users_by_role=[RoleCount(role=role, count=count) for role, count in by_role],
    )
