"""ORM model for uploaded file metadata."""

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from app.models.base import Base, UTCDateTime, utcnow


class Attachment(Base):
    """
    Metadata for a file stored on local disk.

    view_role gates visibility: null or USER for everyone, MANAGER for
    managers and admins, ADMIN for admins only.
    """

    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    file_name = Column(String(1024), nullable=False)
    saved_name = Column(String(255), nullable=False, unique=True, index=True)
    real_path = Column(String(2048), nullable=False)
    file_size = Column(BigInteger, nullable=False, default=0)
    mime = Column(String(255), nullable=False, default="application/octet-stream")
    storage = Column(String(32), nullable=False, default="local")
    view_role = Column(String(32), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="attachments")
