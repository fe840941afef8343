"""ORM model for CMS pages."""

from sqlalchemy import Column, Integer, String, Text, UniqueConstraint

from app.models.base import Base, UTCDateTime, utcnow


class Page(Base):
    __tablename__ = "pages"
    __table_args__ = (UniqueConstraint("route", "domain", name="uq_pages_route_domain"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    route = Column(String(255), nullable=False)
    domain = Column(String(255), nullable=False, default="default")
    title = Column(String(512), nullable=False, default="")
    content = Column(Text, nullable=False, default="")
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)
