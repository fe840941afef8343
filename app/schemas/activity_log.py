"""Response schemas for the activity log viewer."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActivityLogActor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str | None = None
    name: str | None = None
    role: str


class ActivityLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    user_id: int | None = None
    user_email: str | None = None
    user_name: str | None = None
    target_type: str | None = None
    target_id: int | None = None
    target_name: str | None = None
    ip: str | None = None
    user_agent: str | None = None
    method: str | None = None
    path: str | None = None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias="extra")
    message: str | None = None
    created_at: datetime
    user: ActivityLogActor | None = None


class ActivityLogListResponse(BaseModel):
    data: list[ActivityLogOut]
    total: int
    page: int
    per_page: int
    total_pages: int


class ActionCount(BaseModel):
    action: str
    count: int


class UserActivityCount(BaseModel):
    user_id: int
    email: str | None = None
    name: str | None = None
    count: int


class ActivityStats(BaseModel):
    total_logs: int
    action_stats: list[ActionCount]
    top_users: list[UserActivityCount]


class ActivityLogFilter(BaseModel):
    """Optional filters for the activity log list; all given filters must match."""

    action: str | None = None
    user_id: int | None = None
    target_type: str | None = None
    target_id: int | None = None
    ip: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    search: str | None = None
