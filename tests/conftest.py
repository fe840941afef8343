"""Test-wide environment. Runs before any app module reads settings."""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-for-unit-tests-only"
os.environ["APP_ENV"] = "dev"
os.environ["LOGIN_METHOD"] = "email"
os.environ["ALLOW_COOKIE_TOKEN"] = "false"
os.environ["LOG_TO_FILE"] = "false"
os.environ["PREFERENCE_REFRESH_INTERVAL_SEC"] = "0"
os.environ["STORAGE_DIR"] = tempfile.mkdtemp(prefix="backoffice-files-")
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="backoffice-logs-")
