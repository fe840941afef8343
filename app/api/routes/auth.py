"""Login, token refresh, logout and device session endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.deps import Authenticated, DbSession, get_session_manager
from app.core.config import settings
from app.models import ActivityAction, User
from app.schemas.auth import (
    DevicesResponse,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    LogoutResponse,
    RefreshRequest,
    RefreshResponse,
    UserSummary,
    VerifyResponse,
)
from app.services import activity_log
from app.services.device_info import DeviceInfo, extract_device_info
from app.services.errors import Unauthenticated
from app.services.sessions import SessionManager

router = APIRouter()

Sessions = Annotated[SessionManager, Depends(get_session_manager)]


def _device_info(request: Request, platform: str | None = None, **explicit: str | None) -> DeviceInfo:
    """Header-derived metadata, overridden by values sent in the request body."""
    info = extract_device_info(request.headers, default_domain=settings.DEFAULT_DOMAIN)
    if platform:
        info.platform = platform
    for name, value in explicit.items():
        if value:
            setattr(info, name, value)
    return info


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, request: Request, sessions: Sessions, db: DbSession) -> LoginResponse:
    """
    Authenticate with email or username (per LOGIN_METHOD) and password.
    A refresh token is issued only when both device_id and platform are sent.
    """
    metadata = _device_info(
        request,
        platform=body.platform,
        app_version=body.app_version,
        os_version=body.os_version,
        device_model=body.device_model,
    )
    result = sessions.login(
        body.identifier,
        body.password,
        device_id=body.device_id,
        platform=body.platform,
        metadata=metadata,
    )
    actor = db.get(User, result.user.id)
    activity_log.log(
        db,
        ActivityAction.USER_LOGIN,
        request,
        actor=actor,
        metadata={"platform": body.platform or "web", "device_id": body.device_id},
    )
    return result


@router.post("/refresh", response_model=RefreshResponse)
def refresh(body: RefreshRequest, request: Request, sessions: Sessions) -> RefreshResponse:
    metadata = _device_info(
        request,
        app_version=body.app_version,
        os_version=body.os_version,
        device_model=body.device_model,
    )
    return sessions.refresh(body.refresh_token, device_id=body.device_id, metadata=metadata)


@router.post("/logout", response_model=LogoutResponse)
def logout(
    request: Request,
    user: Authenticated,
    sessions: Sessions,
    db: DbSession,
    body: LogoutRequest | None = None,
) -> LogoutResponse:
    """Revoke one device (device_id), every device (all_devices) or the most recent one."""
    body = body or LogoutRequest()
    result = sessions.logout(user.id, device_id=body.device_id, all_devices=body.all_devices)
    activity_log.log(
        db,
        ActivityAction.USER_LOGOUT,
        request,
        actor=user,
        metadata={"all_devices": body.all_devices, "device_count": result.device_count},
    )
    return result


@router.get("/devices", response_model=DevicesResponse)
def list_devices(user: Authenticated, sessions: Sessions) -> DevicesResponse:
    return DevicesResponse(devices=sessions.list_devices(user.id))


@router.post("/logout-device/{device_id}", response_model=LogoutResponse)
def logout_device(device_id: int, user: Authenticated, sessions: Sessions) -> LogoutResponse:
    return sessions.logout_device(user.id, device_id)


@router.get("/verify", response_model=VerifyResponse)
def verify(user: Authenticated) -> VerifyResponse:
    return VerifyResponse(user=user)


@router.get("/me", response_model=UserSummary)
def me(user: Authenticated, db: DbSession) -> UserSummary:
    """Current profile from the database; a deleted or deactivated account is 401."""
    row = db.get(User, user.id)
    if row is None or not row.is_active:
        raise Unauthenticated()
    return UserSummary.model_validate(row)

