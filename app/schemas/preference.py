"""Request/response schemas for admin preference management."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

PreferenceType = Literal["string", "number", "boolean", "json", "array", "text"]


class PreferenceCreate(BaseModel):
    domain: str = Field(default="default", min_length=1, max_length=255)
    category: str = Field(default="general", min_length=1, max_length=255)
    key: str = Field(..., min_length=1, max_length=255)
    value: str | None = None
    type: PreferenceType = "string"
    name: str | None = Field(default=None, max_length=255)
    sort: int = 0
    comment: str | None = None


class PreferenceValueUpdate(BaseModel):
    """Only the value of an existing preference can change."""

    value: str


class PreferenceBulkItem(BaseModel):
    key: str = Field(..., min_length=1, max_length=255)
    value: str
    domain: str = Field(default="default", min_length=1, max_length=255)


class PreferenceBulkUpdate(BaseModel):
    updates: list[PreferenceBulkItem] = Field(..., min_length=1, max_length=500)


class PreferenceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    domain: str
    category: str
    key: str
    value: str | None = None
    type: str
    name: str | None = None
    sort: int
    comment: str | None = None


class PreferencesListResponse(BaseModel):
    data: list[PreferenceOut]
    total: int


class PreferenceCacheStats(BaseModel):
    total_items: int
    categories: int
    category_list: list[str]
    domains: list[str]


class PublicPreferences(BaseModel):
    """Parsed values for one domain, served from the cache."""

    domain: str
    values: dict[str, Any]
