"""ORM model for per-device sessions (refresh token binding)."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.models.base import Base, UTCDateTime, utcnow


class Device(Base):
    """
    One row per (user, platform, client uuid).

    refresh_token is null once the device has logged out; a non-null token
    always has a token_expires_at.
    """

    __tablename__ = "devices"
    __table_args__ = (
        UniqueConstraint("user_id", "platform", "uuid", name="uq_devices_user_platform_uuid"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    platform = Column(String(32), nullable=False)
    domain = Column(String(255), nullable=False, default="default")
    uuid = Column(String(255), nullable=False)
    refresh_token = Column(Text, nullable=True)
    token_expires_at = Column(UTCDateTime, nullable=True)
    device_model = Column(String(255), nullable=True)
    os_version = Column(String(64), nullable=True)
    app_version = Column(String(64), nullable=True)
    user_agent = Column(String(1024), nullable=True)
    last_active_at = Column(UTCDateTime, nullable=True, default=utcnow)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="devices")
