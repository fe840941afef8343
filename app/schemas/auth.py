"""Request/response schemas for auth endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Credentials for login. identifier is an email or a username depending on LOGIN_METHOD."""

    identifier: str = Field(..., min_length=1, max_length=255, description="Email or username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")
    device_id: str | None = Field(
        default=None, max_length=255, description="Client-generated device uuid"
    )
    platform: str | None = Field(
        default=None, max_length=32, description="web, mobile, android or ios"
    )
    remember_me: bool = Field(
        default=False,
        description="Client-side persistence hint only; server token lifetimes depend on platform",
    )
    app_version: str | None = Field(default=None, max_length=64)
    os_version: str | None = Field(default=None, max_length=64)
    device_model: str | None = Field(default=None, max_length=255)


class UserSummary(BaseModel):
    """Sanitized user returned to clients (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str | None = None
    username: str | None = None
    name: str | None = None
    role: str
    profile_image: str | None = None


class LoginResponse(BaseModel):
    """Tokens issued on login. refresh_token is present only when a device was identified."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    refresh_token: str | None = Field(default=None, description="JWT refresh token bound to the device")
    refresh_expires_in: int | None = Field(default=None, description="Refresh token lifetime in seconds")
    user: UserSummary


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)
    device_id: str | None = Field(default=None, max_length=255)
    app_version: str | None = Field(default=None, max_length=64)
    os_version: str | None = Field(default=None, max_length=64)
    device_model: str | None = Field(default=None, max_length=255)


class RefreshResponse(BaseModel):
    """New access token; the refresh token itself is unchanged."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    expires_at: datetime
    user: UserSummary


class LogoutRequest(BaseModel):
    device_id: str | None = Field(default=None, max_length=255)
    all_devices: bool = False


class LogoutResponse(BaseModel):
    message: str
    device_count: int | None = None


class DeviceItem(BaseModel):
    """Active session entry for GET /auth/devices."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    platform: str
    domain: str
    uuid: str
    device_model: str | None = None
    os_version: str | None = None
    app_version: str | None = None
    user_agent: str | None = None
    token_expires_at: datetime | None = None
    last_active_at: datetime | None = None
    created_at: datetime | None = None


class DevicesResponse(BaseModel):
    devices: list[DeviceItem]


class CurrentUser(BaseModel):
    """Caller identity resolved from a verified access token."""

    id: int
    role: str
    roles: list[str]
    email: str | None = None
    username: str | None = None
    name: str | None = None


class VerifyResponse(BaseModel):
    user: CurrentUser
