"""
Session manager: login, access-token refresh and logout across a user's devices.

A session moves Unauthenticated -> Authenticated -> AccessExpired and ends
either in RefreshExpired (device row past its expiry) or LoggedOut (device
token cleared). Access tokens are stateless; only device rows are persisted.
"""

import base64
import binascii
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Literal, NoReturn

from sqlalchemy.orm import Session

from app.core.security import ExpiredToken, InvalidToken, TokenCodec, verify_password
from app.models import Role, User
from app.schemas.auth import (
    CurrentUser,
    DeviceItem,
    LoginResponse,
    LogoutResponse,
    RefreshResponse,
    UserSummary,
)
from app.services.device_info import DeviceInfo
from app.services.devices import DeviceRegistry
from app.services.errors import (
    DeviceNotFound,
    InvalidCredentials,
    InvalidRefreshToken,
    RefreshTokenExpired,
    Unauthenticated,
)

logger = logging.getLogger(__name__)

REFRESH_TOKEN_TYPE = "refresh"

WEB_ACCESS_TTL_SEC = 3600  # 1 hour
WEB_REFRESH_TTL_SEC = 604800  # 7 days
MOBILE_TTL_SEC = 7776000  # 90 days, access and refresh
MOBILE_PLATFORMS = frozenset({"mobile", "android", "ios"})


@dataclass(frozen=True)
class TokenTTL:
    access: int
    refresh: int


def ttl_for_platform(platform: str | None) -> TokenTTL:
    """Token lifetimes keyed strictly by platform; anything unrecognized is treated as web."""
    if platform and platform.strip().lower() in MOBILE_PLATFORMS:
        return TokenTTL(access=MOBILE_TTL_SEC, refresh=MOBILE_TTL_SEC)
    return TokenTTL(access=WEB_ACCESS_TTL_SEC, refresh=WEB_REFRESH_TTL_SEC)


def _encode_name(name: str) -> str:
    return base64.b64encode(name.encode("utf-8")).decode("ascii")


def _decode_name(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None


def access_token_payload(user: User) -> dict[str, Any]:
    """Canonical access-token claims. Never carries the refresh type marker or a device id."""
    role = user.role or Role.USER.value
    payload: dict[str, Any] = {"sub": str(user.id), "role": role, "roles": [role]}
    if user.email:
        payload["email"] = user.email
    if user.username:
        payload["username"] = user.username
    if user.name:
        payload["name"] = _encode_name(user.name)
    return payload


def refresh_token_payload(user: User, device_id: str) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "sub": str(user.id),
        "role": user.role or Role.USER.value,
        "type": REFRESH_TOKEN_TYPE,
        "device_id": device_id,
    }
    if user.email:
        payload["email"] = user.email
    if user.username:
        payload["username"] = user.username
    return payload


def claims_to_current_user(claims: dict[str, Any]) -> CurrentUser:
    """Map verified access-token claims to CurrentUser. Raises Unauthenticated on a bad shape."""
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise Unauthenticated() from None
    role = claims.get("role")
    roles = claims.get("roles")
    if not isinstance(roles, list) or not roles:
        roles = [role] if role else []
    if not role and roles:
        role = roles[0]
    if not role:
        raise Unauthenticated()
    return CurrentUser(
        id=user_id,
        role=str(role),
        roles=[str(r) for r in roles],
        email=claims.get("email"),
        username=claims.get("username"),
        name=_decode_name(claims.get("name")),
    )


def _summary(user: User) -> UserSummary:
    return UserSummary.model_validate(user)


class SessionManager:
    """
    Orchestrates the token codec and the device registry.

    login_method is decided once at process start ("email" or "username") and
    injected here; it is never re-read per request.
    """

    def __init__(
        self,
        session: Session,
        codec: TokenCodec,
        login_method: Literal["email", "username"] = "email",
    ) -> None:
        self.session = session
        self.codec = codec
        self.login_method = login_method
        self.devices = DeviceRegistry(session)

    def _find_user(self, identifier: str) -> User | None:
        column = User.username if self.login_method == "username" else User.email
        return self.session.query(User).filter(column == identifier).first()

    def login(
        self,
        identifier: str,
        password: str,
        device_id: str | None = None,
        platform: str | None = None,
        metadata: DeviceInfo | None = None,
    ) -> LoginResponse:
        """
        Check credentials and issue tokens.

        An access token is always issued; a refresh token only when both
        device_id and platform are given, in which case the device row is
        upserted with the new token.
        """
        user = self._find_user(identifier.strip())
        if user is None or not user.password_hash or not user.is_active:
            logger.warning("Login rejected: method=%s", self.login_method)
            raise InvalidCredentials()
        if not verify_password(password, user.password_hash):
            logger.warning("Login rejected: user_id=%s bad password", user.id)
            raise InvalidCredentials()

        ttl = ttl_for_platform(platform)
        access_token = self.codec.issue(access_token_payload(user), ttl.access)

        refresh_token = None
        if device_id and platform:
            refresh_token = self.codec.issue(refresh_token_payload(user, device_id), ttl.refresh)
            self.devices.upsert(
                user_id=user.id,
                platform=platform,
                uuid=device_id,
                refresh_token=refresh_token,
                expires_at=datetime.now(UTC) + timedelta(seconds=ttl.refresh),
                metadata=metadata,
            )

        logger.info(
            "Login succeeded: user_id=%s platform=%s refresh=%s",
            user.id,
            platform or "web",
            refresh_token is not None,
        )
        return LoginResponse(
            access_token=access_token,
            expires_in=ttl.access,
            refresh_token=refresh_token,
            refresh_expires_in=ttl.refresh if refresh_token else None,
            user=_summary(user),
        )

    @staticmethod
    def _refresh_subject(claims: dict[str, Any]) -> int:
        if claims.get("type") != REFRESH_TOKEN_TYPE:
            raise InvalidRefreshToken()
        try:
            return int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            raise InvalidRefreshToken() from None

    def _expire_session(self, refresh_token: str, device_id: str | None) -> NoReturn:
        """The token's own exp has passed: clear its device row and end the session."""
        try:
            claims = self.codec.verify(refresh_token, allow_expired=True)
        except InvalidToken:
            raise InvalidRefreshToken() from None
        user_id = self._refresh_subject(claims)
        device = self.devices.find_by_refresh_token(user_id, refresh_token, uuid=device_id)
        if device is None:
            raise InvalidRefreshToken()
        self.devices.clear_token(device)
        logger.info("Refresh rejected: user_id=%s device=%s token expired", user_id, device.id)
        raise RefreshTokenExpired()

    def refresh(
        self,
        refresh_token: str,
        device_id: str | None = None,
        metadata: DeviceInfo | None = None,
    ) -> RefreshResponse:
        """
        Exchange a refresh token for a new access token.

        The refresh token is not rotated, so two concurrent refreshes with the
        same token both succeed.
        """
        try:
            claims = self.codec.verify(refresh_token)
        except ExpiredToken:
            self._expire_session(refresh_token, device_id)
        except InvalidToken:
            raise InvalidRefreshToken() from None
        user_id = self._refresh_subject(claims)

        device = self.devices.find_by_refresh_token(user_id, refresh_token, uuid=device_id)
        if device is None:
            logger.warning("Refresh rejected: user_id=%s no matching device", user_id)
            raise InvalidRefreshToken()

        now = datetime.now(UTC)
        if device.token_expires_at is None or device.token_expires_at <= now:
            self.devices.clear_token(device)
            logger.info("Refresh rejected: user_id=%s device=%s expired", user_id, device.id)
            raise RefreshTokenExpired()

        user = self.session.get(User, user_id)
        if user is None or not user.is_active:
            raise InvalidRefreshToken()

        ttl = ttl_for_platform(device.platform)
        access_token = self.codec.issue(access_token_payload(user), ttl.access, now=now)
        self.devices.touch(device, metadata)
        return RefreshResponse(
            access_token=access_token,
            expires_in=ttl.access,
            expires_at=now + timedelta(seconds=ttl.access),
            user=_summary(user),
        )

    def logout(
        self,
        user_id: int,
        device_id: str | None = None,
        all_devices: bool = False,
    ) -> LogoutResponse:
        """Revoke refresh tokens: all devices, one device by uuid, or the most recent one."""
        if all_devices:
            count = self.devices.clear_all_for_user(user_id)
            logger.info("Logout: user_id=%s all devices cleared=%s", user_id, count)
            return LogoutResponse(message="Logged out from all devices.", device_count=count)

        if device_id:
            device = self.devices.find_by_uuid(user_id, device_id)
            if device is None:
                raise DeviceNotFound()
            self.devices.clear_token(device)
            logger.info("Logout: user_id=%s device=%s", user_id, device.id)
            return LogoutResponse(message="Logged out.", device_count=1)

        device = self.devices.most_recent(user_id)
        if device is None:
            return LogoutResponse(message="Logged out.", device_count=0)
        self.devices.clear_token(device)
        logger.info("Logout: user_id=%s most recent device=%s", user_id, device.id)
        return LogoutResponse(message="Logged out.", device_count=1)

    def logout_device(self, user_id: int, device_pk: int) -> LogoutResponse:
        """Revoke one device listed by list_devices."""
        device = self.devices.get_for_user(user_id, device_pk)
        if device is None:
            raise DeviceNotFound()
        self.devices.clear_token(device)
        logger.info("Logout: user_id=%s device=%s revoked", user_id, device.id)
        return LogoutResponse(message="Device logged out.", device_count=1)

    def list_devices(self, user_id: int) -> list[DeviceItem]:
        return [DeviceItem.model_validate(d) for d in self.devices.list_active(user_id)]

    def verify(self, bearer_token: str | None) -> CurrentUser:
        """
        Resolve the caller from an access token.
        Every failure, including a refresh token presented here, is Unauthenticated.
        """
        if not bearer_token:
            raise Unauthenticated()
        return verify_access_token(self.codec, bearer_token)


def verify_access_token(codec: TokenCodec, token: str) -> CurrentUser:
    """Stateless access-token check shared by SessionManager.verify and the role gate."""
    try:
        claims = codec.verify(token)
    except InvalidToken:
        raise Unauthenticated() from None
    if claims.get("type") == REFRESH_TOKEN_TYPE:
        raise Unauthenticated()
    return claims_to_current_user(claims)

