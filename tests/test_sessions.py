"""Session manager: login, refresh, logout and access-token verification."""

import unittest
from datetime import UTC, datetime, timedelta

from app.models import Device, Role
from app.services.errors import (
    DeviceNotFound,
    InvalidCredentials,
    InvalidRefreshToken,
    RefreshTokenExpired,
    Unauthenticated,
)
from app.services.sessions import (
    MOBILE_TTL_SEC,
    WEB_ACCESS_TTL_SEC,
    WEB_REFRESH_TTL_SEC,
    SessionManager,
    access_token_payload,
    refresh_token_payload,
    ttl_for_platform,
)
from tests.helpers import PASSWORD, DatabaseTestCase, add_user


class TestTTLTable(unittest.TestCase):
    def test_web_and_unknown_platforms(self) -> None:
        for platform in ("web", None, "", "desktop"):
            ttl = ttl_for_platform(platform)
            self.assertEqual((ttl.access, ttl.refresh), (WEB_ACCESS_TTL_SEC, WEB_REFRESH_TTL_SEC))

    def test_mobile_platforms_case_insensitive(self) -> None:
        for platform in ("mobile", "android", "ios", "IOS", "Android"):
            ttl = ttl_for_platform(platform)
            self.assertEqual((ttl.access, ttl.refresh), (MOBILE_TTL_SEC, MOBILE_TTL_SEC))

    def test_constants(self) -> None:
        self.assertEqual(WEB_ACCESS_TTL_SEC, 3600)
        self.assertEqual(WEB_REFRESH_TTL_SEC, 604800)
        self.assertEqual(MOBILE_TTL_SEC, 7776000)


class SessionTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = add_user(self.db, email="ana@example.com", name="Ana Kim", role=Role.MANAGER)
        self.sessions = SessionManager(self.db, self.codec)


class TestLogin(SessionTestCase):
    def test_web_login_without_device_issues_access_only(self) -> None:
        result = self.sessions.login("ana@example.com", PASSWORD)
        self.assertIsNone(result.refresh_token)
        self.assertEqual(result.expires_in, WEB_ACCESS_TTL_SEC)
        self.assertEqual(result.user.email, "ana@example.com")
        self.assertEqual(self.db.query(Device).count(), 0)

    def test_android_login_uses_mobile_ttl_for_both_tokens(self) -> None:
        result = self.sessions.login("ana@example.com", PASSWORD, device_id="phone-1", platform="android")
        self.assertEqual(result.expires_in, MOBILE_TTL_SEC)
        self.assertEqual(result.refresh_expires_in, MOBILE_TTL_SEC)
        device = self.db.query(Device).one()
        self.assertEqual(device.refresh_token, result.refresh_token)
        remaining = device.token_expires_at - datetime.now(UTC)
        self.assertGreater(remaining, timedelta(days=89))

    def test_access_token_claims(self) -> None:
        result = self.sessions.login("ana@example.com", PASSWORD, device_id="d1", platform="web")
        claims = self.codec.verify(result.access_token)
        self.assertEqual(claims["sub"], str(self.user.id))
        self.assertEqual(claims["role"], "MANAGER")
        self.assertEqual(claims["roles"], ["MANAGER"])
        self.assertNotIn("device_id", claims)
        self.assertNotIn("type", claims)
        self.assertEqual(self.sessions.verify(result.access_token).name, "Ana Kim")

    def test_second_login_same_device_reuses_row(self) -> None:
        self.sessions.login("ana@example.com", PASSWORD, device_id="d1", platform="web")
        self.sessions.login("ana@example.com", PASSWORD, device_id="d1", platform="web")
        self.assertEqual(self.db.query(Device).count(), 1)

    def test_wrong_password_and_unknown_user_look_the_same(self) -> None:
        with self.assertRaises(InvalidCredentials) as bad_password:
            self.sessions.login("ana@example.com", "wrong-password")
        with self.assertRaises(InvalidCredentials) as unknown:
            self.sessions.login("nobody@example.com", PASSWORD)
        self.assertEqual(bad_password.exception.message, unknown.exception.message)

    def test_inactive_user_cannot_login(self) -> None:
        self.user.is_active = False
        self.db.commit()
        with self.assertRaises(InvalidCredentials):
            self.sessions.login("ana@example.com", PASSWORD)

    def test_username_login_method(self) -> None:
        add_user(self.db, email=None, username="bob")
        sessions = SessionManager(self.db, self.codec, login_method="username")
        self.assertEqual(sessions.login("bob", PASSWORD).user.username, "bob")
        with self.assertRaises(InvalidCredentials):
            sessions.login("ana@example.com", PASSWORD)


class TestRefresh(SessionTestCase):
    def _login(self, device_id: str = "d1", platform: str = "web"):
        return self.sessions.login("ana@example.com", PASSWORD, device_id=device_id, platform=platform)

    def test_refresh_issues_access_token_and_keeps_refresh_token(self) -> None:
        login = self._login()
        result = self.sessions.refresh(login.refresh_token, device_id="d1")
        self.assertEqual(result.expires_in, WEB_ACCESS_TTL_SEC)
        self.assertEqual(self.sessions.verify(result.access_token).id, self.user.id)
        self.assertEqual(self.db.query(Device).one().refresh_token, login.refresh_token)

    def test_refresh_twice_with_same_token_succeeds(self) -> None:
        login = self._login()
        self.sessions.refresh(login.refresh_token)
        self.sessions.refresh(login.refresh_token)

    def test_access_token_is_not_a_refresh_token(self) -> None:
        login = self._login()
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh(login.access_token)

    def test_garbage_token(self) -> None:
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh("garbage")

    def test_wrong_device_id(self) -> None:
        login = self._login()
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh(login.refresh_token, device_id="other-device")

    def test_expired_device_row_is_cleared(self) -> None:
        login = self._login()
        device = self.db.query(Device).one()
        device.token_expires_at = datetime.now(UTC) - timedelta(seconds=1)
        self.db.commit()
        with self.assertRaises(RefreshTokenExpired):
            self.sessions.refresh(login.refresh_token)
        self.db.expire_all()
        self.assertIsNone(self.db.query(Device).one().refresh_token)
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh(login.refresh_token)

    def test_naturally_expired_refresh_token(self) -> None:
        issued = datetime.now(UTC) - timedelta(days=8)
        token = self.codec.issue(refresh_token_payload(self.user, "d1"), WEB_REFRESH_TTL_SEC, now=issued)
        self.sessions.devices.upsert(
            user_id=self.user.id,
            platform="web",
            uuid="d1",
            refresh_token=token,
            expires_at=issued + timedelta(seconds=WEB_REFRESH_TTL_SEC),
        )
        with self.assertRaises(RefreshTokenExpired):
            self.sessions.refresh(token)
        self.db.expire_all()
        self.assertIsNone(self.db.query(Device).one().refresh_token)
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh(token)

    def test_expired_access_token_is_not_a_refresh_token(self) -> None:
        issued = datetime.now(UTC) - timedelta(hours=2)
        token = self.codec.issue(access_token_payload(self.user), WEB_ACCESS_TTL_SEC, now=issued)
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh(token)

    def test_deactivated_user_cannot_refresh(self) -> None:

        login = self._login()
        self.user.is_active = False
        self.db.commit()
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh(login.refresh_token)


class TestLogout(SessionTestCase):
    def _login(self, device_id: str):
        return self.sessions.login("ana@example.com", PASSWORD, device_id=device_id, platform="web")

    def test_logout_all_then_every_refresh_fails(self) -> None:
        a = self._login("a")
        b = self._login("b")
        result = self.sessions.logout(self.user.id, all_devices=True)
        self.assertEqual(result.device_count, 2)
        for login in (a, b):
            with self.assertRaises(InvalidRefreshToken):
                self.sessions.refresh(login.refresh_token)

    def test_logout_one_device_leaves_the_other(self) -> None:
        a = self._login("a")
        b = self._login("b")
        self.sessions.logout(self.user.id, device_id="a")
        with self.assertRaises(InvalidRefreshToken):
            self.sessions.refresh(a.refresh_token)
        self.sessions.refresh(b.refresh_token)

    def test_logout_unknown_device(self) -> None:
        with self.assertRaises(DeviceNotFound):
            self.sessions.logout(self.user.id, device_id="missing")

    def test_logout_without_device_clears_most_recent(self) -> None:
        self._login("a")
        result = self.sessions.logout(self.user.id)
        self.assertEqual(result.device_count, 1)
        self.assertEqual(self.sessions.logout(self.user.id).device_count, 0)

    def test_logout_device_by_primary_key(self) -> None:
        self._login("a")
        devices = self.sessions.list_devices(self.user.id)
        self.assertEqual(len(devices), 1)
        self.sessions.logout_device(self.user.id, devices[0].id)
        self.assertEqual(self.sessions.list_devices(self.user.id), [])

    def test_logout_device_of_another_user(self) -> None:
        other = add_user(self.db, email="other@example.com")
        self.sessions.login("other@example.com", PASSWORD, device_id="x", platform="web")
        device = self.db.query(Device).filter(Device.user_id == other.id).one()
        with self.assertRaises(DeviceNotFound):
            self.sessions.logout_device(self.user.id, device.id)


class TestVerify(SessionTestCase):
    def test_refresh_token_rejected_as_access_token(self) -> None:
        login = self.sessions.login("ana@example.com", PASSWORD, device_id="d1", platform="web")
        with self.assertRaises(Unauthenticated):
            self.sessions.verify(login.refresh_token)

    def test_missing_and_expired(self) -> None:
        with self.assertRaises(Unauthenticated):
            self.sessions.verify(None)
        expired = self.codec.issue({"sub": str(self.user.id), "role": "USER"}, 0)
        with self.assertRaises(Unauthenticated):
            self.sessions.verify(expired)

    def test_role_only_token_yields_single_role(self) -> None:
        token = self.codec.issue({"sub": "5", "role": "ASSISTANT"}, 60)
        user = self.sessions.verify(token)
        self.assertEqual(user.roles, ["ASSISTANT"])
