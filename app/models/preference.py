"""ORM model for domain-scoped settings."""

from sqlalchemy import Column, Integer, String, Text, UniqueConstraint

from app.models.base import Base


class Preference(Base):
    """Typed key/value setting; value is stored as text and parsed by type."""

    __tablename__ = "preferences"
    __table_args__ = (UniqueConstraint("key", "domain", name="uq_preferences_key_domain"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    domain = Column(String(255), nullable=False, default="default")
    category = Column(String(255), nullable=False, default="general")
    key = Column(String(255), nullable=False)
    value = Column(Text, nullable=True)
    type = Column(String(16), nullable=False, default="string")
    name = Column(String(255), nullable=True)
    sort = Column(Integer, nullable=False, default=0)
    comment = Column(Text, nullable=True)
