"""Request/response schemas for attachments and file uploads."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ViewRole = Literal["ADMIN", "MANAGER", "USER"]


class AttachmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int | None = None
    file_name: str
    saved_name: str
    file_size: int
    mime: str
    storage: str
    view_role: str | None = None
    created_at: datetime
    updated_at: datetime
    file_url: str = ""


class AttachmentUpdate(BaseModel):
    """Editable metadata. view_role=None makes the file visible to everyone."""

    file_name: str | None = Field(default=None, min_length=1, max_length=1024)
    view_role: ViewRole | None = None


class AttachmentContentUpdate(BaseModel):
    content: str


class AttachmentsListResponse(BaseModel):
    data: list[AttachmentOut]
    total: int
    page: int
    per_page: int
    total_pages: int


class UploadResponse(BaseModel):
    id: int
    file_name: str
    file_url: str


class SuccessResponse(BaseModel):
    success: bool = True
