"""Shared FastAPI dependencies: token transport, role gate, and service handles."""

from functools import lru_cache, partial
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.security import TokenCodec
from app.schemas.auth import CurrentUser
from app.services.errors import Unauthenticated
from app.services.file_storage import FileStorage
from app.services.preferences import PreferenceCache
from app.services.role_gate import (
    ADMIN_ONLY,
    ADMIN_OR_MANAGER,
    AUTHENTICATED,
    FILE_MANAGERS,
    RouteAccess,
    authorize,
)
from app.services.sessions import SessionManager, verify_access_token

AUTH_COOKIE_NAME = "auth-token"

security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_codec() -> TokenCodec:
    return TokenCodec(settings.JWT_SECRET.get_secret_value(), settings.JWT_ALGORITHM)


def get_session_manager(
    db: Annotated[Session, Depends(get_db)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> SessionManager:
    return SessionManager(db, codec, login_method=settings.LOGIN_METHOD)


def bearer_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    """
    Token from "Authorization: Bearer <token>". The auth-token cookie is
    consulted only when ALLOW_COOKIE_TOKEN is on and no header was sent.
    """
    if credentials is not None:
        return credentials.credentials
    if settings.ALLOW_COOKIE_TOKEN:
        return request.cookies.get(AUTH_COOKIE_NAME) or None
    return None


def app_path(request: Request) -> str:
    """Request path relative to the application, without any proxy root_path."""
    return request.url.path.removeprefix(request.scope.get("root_path", ""))


def require(access: RouteAccess):
    """Build a dependency enforcing access on the current request path."""

    def dependency(
        request: Request,
        token: Annotated[str | None, Depends(bearer_token)],
        codec: Annotated[TokenCodec, Depends(get_token_codec)],
    ) -> CurrentUser | None:
        user = authorize(
            app_path(request),
            access,
            token,
            partial(verify_access_token, codec),
            api_prefix=settings.API_PREFIX,
        )
        # Routes carrying this dependency always need a caller unless public.
        if user is None and not access.public:
            raise Unauthenticated()
        return user

    return dependency



require_authenticated = require(AUTHENTICATED)
require_admin = require(ADMIN_ONLY)
require_admin_or_manager = require(ADMIN_OR_MANAGER)
require_file_manager = require(FILE_MANAGERS)


def optional_user(
    token: Annotated[str | None, Depends(bearer_token)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> CurrentUser | None:
    """Caller on public routes; an invalid token is treated as anonymous."""
    if not token:
        return None
    try:
        return verify_access_token(codec, token)
    except Unauthenticated:
        return None


def get_preference_cache(request: Request) -> PreferenceCache:
    return request.app.state.preference_cache


@lru_cache
def get_file_storage() -> FileStorage:
    return FileStorage(settings.STORAGE_DIR, settings.MAX_UPLOAD_BYTES)


DbSession = Annotated[Session, Depends(get_db)]
Authenticated = Annotated[CurrentUser, Depends(require_authenticated)]
AdminUser = Annotated[CurrentUser, Depends(require_admin)]
StaffUser = Annotated[CurrentUser, Depends(require_admin_or_manager)]
FileManager = Annotated[CurrentUser, Depends(require_file_manager)]
OptionalUser = Annotated[CurrentUser | None, Depends(optional_user)]
Preferences = Annotated[PreferenceCache, Depends(get_preference_cache)]
Storage = Annotated[FileStorage, Depends(get_file_storage)]
