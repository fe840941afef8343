"""Unit tests for the session purge CLI."""

import unittest
from unittest.mock import MagicMock, patch

from app import purge_sessions


class TestPurgeSessionsDisabled(unittest.TestCase):
    """When SESSION_PURGE_ENABLED is False, the job exits without touching the database."""

    def test_returns_zero_and_does_not_open_session(self) -> None:
        settings = MagicMock()
        settings.SESSION_PURGE_ENABLED = False
        with (
            patch.object(purge_sessions, "get_settings", return_value=settings),
            patch.object(purge_sessions, "configure_logging"),
            patch.object(purge_sessions, "SessionLocal") as session_local,
        ):
            self.assertEqual(purge_sessions.main(), 0)
        session_local.assert_not_called()


class TestPurgeSessionsRuns(unittest.TestCase):
    def _settings(self) -> MagicMock:
        settings = MagicMock()
        settings.SESSION_PURGE_ENABLED = True
        return settings

    def test_purges_and_closes_session(self) -> None:
        session = MagicMock()
        with (
            patch.object(purge_sessions, "get_settings", return_value=self._settings()),
            patch.object(purge_sessions, "configure_logging"),
            patch.object(purge_sessions, "SessionLocal", return_value=session),
            patch.object(purge_sessions, "DeviceRegistry") as registry_cls,
        ):
            registry_cls.return_value.purge_expired.return_value = 3
            self.assertEqual(purge_sessions.main(), 0)
        registry_cls.assert_called_once_with(session)
        session.close.assert_called_once()

    def test_failure_returns_one_and_closes_session(self) -> None:
        session = MagicMock()
        with (
            patch.object(purge_sessions, "get_settings", return_value=self._settings()),
            patch.object(purge_sessions, "configure_logging"),
            patch.object(purge_sessions, "SessionLocal", return_value=session),
            patch.object(purge_sessions, "DeviceRegistry") as registry_cls,
        ):
            registry_cls.return_value.purge_expired.side_effect = RuntimeError("db down")
            self.assertEqual(purge_sessions.main(), 1)
        session.close.assert_called_once()
