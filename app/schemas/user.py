"""Request/response schemas for admin user management."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.enums import Role


class UserCreate(BaseModel):
    """Admin-created account. At least one of email or username is required."""

    email: EmailStr | None = None
    username: str | None = Field(default=None, min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    role: Role = Role.USER
    password: str = Field(..., min_length=8, max_length=128)
    must_change_password: bool = True


class UserUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    email: EmailStr | None = None
    username: str | None = Field(default=None, min_length=1, max_length=255)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    role: Role | None = None
    is_active: bool | None = None
    password: str | None = Field(default=None, min_length=8, max_length=128)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str | None = None
    username: str | None = None
    name: str | None = None
    role: str
    is_active: bool
    must_change_password: bool
    profile_image: str | None = None
    created_at: datetime
    updated_at: datetime


class UserListItem(UserOut):
    file_count: int = 0


class UsersListResponse(BaseModel):
    data: list[UserListItem]
    total: int


class RoleCount(BaseModel):
    role: str
    count: int


class UserStats(BaseModel):
    total_users: int
    active_users: int
    admin_count: int
    users_by_role: list[RoleCount]


class MessageResponse(BaseModel):
    message: str
