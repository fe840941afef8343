"""Pydantic request/response schemas."""

from app.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    LogoutResponse,
    RefreshRequest,
    RefreshResponse,
    UserSummary,
)
from app.schemas.health import HealthResponse
from app.schemas.preference import PreferenceCreate, PreferenceOut
from app.schemas.user import UserCreate, UserOut, UserUpdate

__all__ = [
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "LogoutRequest",
    "LogoutResponse",
    "PreferenceCreate",
    "PreferenceOut",
    "RefreshRequest",
    "RefreshResponse",
    "UserCreate",
    "UserOut",
    "UserSummary",
    "UserUpdate",
]
