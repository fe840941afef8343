"""Request/response schemas for CMS pages."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PageCreate(BaseModel):
    route: str = Field(..., min_length=1, max_length=255, pattern=r"^[A-Za-z0-9_\-/]+$")
    domain: str = Field(default="default", min_length=1, max_length=255)
    title: str = Field(default="", max_length=512)
    content: str = ""


class PageUpdate(BaseModel):
    title: str = Field(..., max_length=512)
    content: str = ""


class PageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    route: str
    domain: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime


class PagesListResponse(BaseModel):
    data: list[PageOut]
    total: int
