"""Enumerations stored as plain strings (portable across SQLite and Postgres)."""

from enum import Enum


class Role(str, Enum):
    """User roles, strongest first."""

    ADMIN = "ADMIN"  # system administrator, bypasses every role restriction
    MANAGER = "MANAGER"  # admin pages and file management
    ASSISTANT = "ASSISTANT"  # file management only
    USER = "USER"


class ActivityAction(str, Enum):
    """Audit actions recorded in the activity log."""

    USER_LOGIN = "USER_LOGIN"
    USER_LOGOUT = "USER_LOGOUT"
    USER_REGISTER = "USER_REGISTER"
    USER_UPDATE = "USER_UPDATE"
    USER_DELETE = "USER_DELETE"
    USER_PASSWORD_CHANGE = "USER_PASSWORD_CHANGE"

    FILE_UPLOAD = "FILE_UPLOAD"
    FILE_DOWNLOAD = "FILE_DOWNLOAD"
    FILE_DELETE = "FILE_DELETE"

    PAGE_CREATE = "PAGE_CREATE"
    PAGE_UPDATE = "PAGE_UPDATE"
    PAGE_DELETE = "PAGE_DELETE"
    PAGE_VIEW = "PAGE_VIEW"

    PREFERENCE_UPDATE = "PREFERENCE_UPDATE"

    SYSTEM_ERROR = "SYSTEM_ERROR"
    ACCESS_DENIED = "ACCESS_DENIED"

