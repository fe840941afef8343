"""ORM model for application users (auth and RBAC)."""

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from app.models.base import Base, UTCDateTime, utcnow
from app.models.enums import Role


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    Login uses either email or username depending on LOGIN_METHOD; at least one
    of them is set for password accounts. password_hash is null for accounts
    that cannot sign in with a password.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=True, unique=True, index=True)
    username = Column(String(255), nullable=True, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    name = Column(String(255), nullable=True)
    role = Column(String(32), nullable=False, default=Role.USER.value)
    is_active = Column(Boolean, nullable=False, default=True)
    must_change_password = Column(Boolean, nullable=False, default=False)
    profile_image = Column(String(1024), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    devices = relationship("Device", back_populates="user", cascade="all, delete-orphan")
    attachments = relationship("Attachment", back_populates="user", passive_deletes=True)
