"""CMS page endpoints: admin CRUD and the public read."""

from typing import Annotated

from fastapi import APIRouter, Query, Request, status

from app.api.deps import AdminUser, DbSession
from app.core.config import settings
from app.models import ActivityAction
from app.schemas.page import PageCreate, PageOut, PagesListResponse, PageUpdate
from app.schemas.user import MessageResponse
from app.services import activity_log, pages

admin_router = APIRouter()
public_router = APIRouter()

Domain = Annotated[str | None, Query(max_length=255)]


@admin_router.get("", response_model=PagesListResponse)
def list_pages(_admin: AdminUser, db: DbSession) -> PagesListResponse:
    return pages.list_pages(db)


@admin_router.post("", response_model=PageOut, status_code=status.HTTP_201_CREATED)
def create_page(body: PageCreate, request: Request, admin: AdminUser, db: DbSession) -> PageOut:
    page = pages.create_page(db, body)
    activity_log.log(
        db,
        ActivityAction.PAGE_CREATE,
        request,
        actor=admin,
        target_type="page",
        target_id=page.id,
        target_name=f"{page.domain}:{page.route}",
    )
    return PageOut.model_validate(page)


@admin_router.get("/{route:path}", response_model=PageOut)
def get_page(route: str, _admin: AdminUser, db: DbSession, domain: Domain = None) -> PageOut:
    return PageOut.model_validate(pages.get_page(db, route, domain or settings.DEFAULT_DOMAIN))


@admin_router.put("/{route:path}", response_model=PageOut)
def update_page(
    route: str,
    body: PageUpdate,
    request: Request,
    admin: AdminUser,
    db: DbSession,
    domain: Domain = None,
) -> PageOut:
    page = pages.update_page(db, route, domain or settings.DEFAULT_DOMAIN, body)
    activity_log.log(
        db,
        ActivityAction.PAGE_UPDATE,
        request,
        actor=admin,
        target_type="page",
        target_id=page.id,
        target_name=f"{page.domain}:{page.route}",
    )
    return PageOut.model_validate(page)


@admin_router.delete("/{route:path}", response_model=MessageResponse)
def delete_page(
    route: str, request: Request, admin: AdminUser, db: DbSession, domain: Domain = None
) -> MessageResponse:
    domain = domain or settings.DEFAULT_DOMAIN
    page_id = pages.get_page(db, route, domain).id
    pages.delete_page(db, route, domain)
    activity_log.log(
        db,
        ActivityAction.PAGE_DELETE,
        request,
        actor=admin,
        target_type="page",
        target_id=page_id,
        target_name=f"{domain}:{route}",
    )
    return MessageResponse(message="Page deleted.")


@public_router.get("/{route:path}", response_model=PageOut)
def read_page(route: str, db: DbSession, domain: Domain = None) -> PageOut:
    """Public page content by route; domain defaults to DEFAULT_DOMAIN."""
    return PageOut.model_validate(pages.get_page(db, route, domain or settings.DEFAULT_DOMAIN))
