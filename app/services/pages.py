"""CMS pages keyed by (route, domain)."""

import logging

from sqlalchemy.orm import Session

from app.models import Page
from app.schemas.page import PageCreate, PagesListResponse, PageOut, PageUpdate
from app.services.errors import Conflict, NotFound

logger = logging.getLogger(__name__)


def list_pages(db: Session) -> PagesListResponse:
    pages = db.query(Page).order_by(Page.domain, Page.route).all()
    return PagesListResponse(data=[PageOut.model_validate(p) for p in pages], total=len(pages))


def find_page(db: Session, route: str, domain: str) -> Page | None:
    return db.query(Page).filter(Page.route == route, Page.domain == domain).first()


def get_page(db: Session, route: str, domain: str) -> Page:
    page = find_page(db, route, domain)
    if page is None:
        raise NotFound("Page not found.")
    return page


def create_page(db: Session, body: PageCreate) -> Page:
    if find_page(db, body.route, body.domain) is not None:
        raise Conflict(f"Page '{body.route}' already exists for domain '{body.domain}'.")
    page = Page(route=body.route, domain=body.domain, title=body.title, content=body.content)
    db.add(page)
    db.commit()
    db.refresh(page)
    logger.info("Page created: %s:%s", page.domain, page.route)
    return page


def update_page(db: Session, route: str, domain: str, body: PageUpdate) -> Page:
    page = get_page(db, route, domain)
    page.title = body.title
    page.content = body.content
    db.commit()
    db.refresh(page)
    return page


def delete_page(db: Session, route: str, domain: str) -> None:
    page = get_page(db, route, domain)
    db.delete(page)
    db.commit()
    logger.info("Page deleted: %s:%s", domain, route)
