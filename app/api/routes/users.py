"""Admin user management endpoints (ADMIN and MANAGER)."""

from fastapi import APIRouter, Request, status

from app.api.deps import DbSession, StaffUser
from app.models import ActivityAction
from app.schemas.user import MessageResponse, UserCreate, UserOut, UsersListResponse, UserStats, UserUpdate
from app.services import activity_log, users

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(_staff: StaffUser, db: DbSession) -> UsersListResponse:
    return users.list_users(db)


@router.get("/stats", response_model=UserStats)
def user_stats(_staff: StaffUser, db: DbSession) -> UserStats:
    return users.user_stats(db)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, _staff: StaffUser, db: DbSession) -> UserOut:
    return UserOut.model_validate(users.get_user(db, user_id))


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, request: Request, staff: StaffUser, db: DbSession) -> UserOut:
    user = users.create_user(db, body)
    activity_log.log(
        db,
        ActivityAction.USER_REGISTER,
        request,
        actor=staff,
        target_type="user",
        target_id=user.id,
        target_name=user.email or user.username,
        metadata={"role": user.role},
    )
    return UserOut.model_validate(user)


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int, body: UserUpdate, request: Request, staff: StaffUser, db: DbSession
) -> UserOut:
    """Partial update. Managers cannot grant ADMIN."""
    user = users.update_user(db, user_id, body, actor_role=staff.role)
    changed = sorted(body.model_dump(exclude_unset=True, exclude={"password"}))
    activity_log.log(
        db,
        ActivityAction.USER_PASSWORD_CHANGE if body.password else ActivityAction.USER_UPDATE,
        request,
        actor=staff,
        target_type="user",
        target_id=user.id,
        target_name=user.email or user.username,
        metadata={"fields": changed},
    )
    return UserOut.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, request: Request, staff: StaffUser, db: DbSession) -> MessageResponse:
    user = users.get_user(db, user_id)
    label = user.email or user.username
    users.delete_user(db, user_id)
    activity_log.log(
        db,
        ActivityAction.USER_DELETE,
        request,
        actor=staff,
        target_type="user",
        target_id=user_id,
        target_name=label,
    )
    return MessageResponse(message="User deleted.")
