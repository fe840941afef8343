"""SQLAlchemy ORM models."""

from app.models.activity_log import ActivityLog
from app.models.attachment import Attachment
from app.models.base import Base
from app.models.device import Device
from app.models.enums import ActivityAction, Role
from app.models.page import Page
from app.models.preference import Preference
from app.models.user import User

__all__ = [
    "ActivityAction",
    "ActivityLog",
    "Attachment",
    "Base",
    "Device",
    "Page",
    "Preference",
    "Role",
    "User",
]
