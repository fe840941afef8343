"""ORM model for the audit trail."""

from sqlalchemy import JSON, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.models.base import Base, UTCDateTime, utcnow


class ActivityLog(Base):
    """One audited action. Actor fields are denormalized so rows outlive the user."""

    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(64), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    user_email = Column(String(255), nullable=True)
    user_name = Column(String(255), nullable=True)
    target_type = Column(String(64), nullable=True)
    target_id = Column(Integer, nullable=True)
    target_name = Column(String(1024), nullable=True)
    ip = Column(String(64), nullable=True)
    user_agent = Column(String(1024), nullable=True)
    method = Column(String(16), nullable=True)
    path = Column(String(2048), nullable=True)
    # "metadata" is reserved on declarative classes
    extra = Column("metadata", JSON, nullable=True)
    message = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)

    user = relationship("User")
