"""Attachment metadata with view-role visibility, search, pagination and file replacement."""

import json
import logging
import math
from collections.abc import Iterable
from typing import BinaryIO

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.models import Attachment, Role
from app.schemas.attachment import AttachmentOut, AttachmentsListResponse, AttachmentUpdate
from app.services.errors import BadRequest, Forbidden, NotFound
from app.services.file_storage import FileStorage

logger = logging.getLogger(__name__)

SORT_FIELDS = ("id", "file_name", "file_size", "mime", "created_at", "updated_at")
SEARCH_TYPES = ("all", "filename", "mime")
JSON_MIME = "application/json"


def visible_view_roles(roles: Iterable[str]) -> set[str]:
    """view_role values the caller may see, besides null."""
    roles = set(roles)
    visible = {Role.USER.value}
    if roles & {Role.MANAGER.value, Role.ADMIN.value}:
        visible.add(Role.MANAGER.value)
    if Role.ADMIN.value in roles:
        visible.add(Role.ADMIN.value)
    return visible


def can_view(view_role: str | None, roles: Iterable[str]) -> bool:
    return view_role is None or view_role in visible_view_roles(roles)


def file_url(saved_name: str, api_prefix: str) -> str:
    return f"{api_prefix}/file/{saved_name}"


def to_out(attachment: Attachment, api_prefix: str) -> AttachmentOut:
    out = AttachmentOut.model_validate(attachment)
    return out.model_copy(update={"file_url": file_url(attachment.saved_name, api_prefix)})


def _type_filter(file_types: str):
    clauses = []
    for kind in (t.strip() for t in file_types.split(",")):
        if kind == "image":
            clauses.append(Attachment.mime.startswith("image/"))
        elif kind == "pdf":
            clauses.append(Attachment.mime == "application/pdf")
        elif kind == "audio":
            clauses.append(Attachment.mime.startswith("audio/"))
    return or_(*clauses) if clauses else None


def list_attachments(
    db: Session,
    roles: Iterable[str],
    api_prefix: str,
    page: int = 1,
    per_page: int = 10,
    sort_field: str = "id",
    sort_order: str = "desc",
    search_term: str = "",
    search_type: str = "all",
    file_types: str = "all",
) -> AttachmentsListResponse:
    """
    One page of attachments the caller may see.

    Search and file-type filters combine with AND. Unknown sort fields fall
    back to id; unknown file types are ignored.
    """
    page = max(page, 1)
    per_page = max(per_page, 1)
    query = db.query(Attachment).filter(
        or_(Attachment.view_role.is_(None), Attachment.view_role.in_(visible_view_roles(roles)))
    )

    if search_term:
        pattern = f"%{search_term}%"
        if search_type == "filename":
            query = query.filter(Attachment.file_name.like(pattern))
        elif search_type == "mime":
            query = query.filter(Attachment.mime.like(pattern))
        else:
            query = query.filter(
                or_(Attachment.file_name.like(pattern), Attachment.mime.like(pattern))
            )

    if file_types and file_types != "all":
        type_clause = _type_filter(file_types)
        if type_clause is not None:
            query = query.filter(type_clause)

    column = getattr(Attachment, sort_field if sort_field in SORT_FIELDS else "id")
    order = column.asc() if sort_order == "asc" else column.desc()

    total = query.count()
    rows = query.order_by(order, Attachment.id.desc()).offset((page - 1) * per_page).limit(per_page).all()
    return AttachmentsListResponse(
        data=[to_out(row, api_prefix) for row in rows],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=math.ceil(total / per_page),
    )


def _get(db: Session, attachment_id: int) -> Attachment:
    attachment = db.get(Attachment, attachment_id)
    if attachment is None:
        raise NotFound("File not found.")
    return attachment


def get_attachment(db: Session, attachment_id: int, roles: Iterable[str]) -> Attachment:
    attachment = _get(db, attachment_id)
    if not can_view(attachment.view_role, roles):
        raise Forbidden("You do not have permission to view this file.")
    return attachment


def find_by_saved_name(db: Session, saved_name: str) -> Attachment | None:
    return db.query(Attachment).filter(Attachment.saved_name == saved_name).first()


def create_attachment(
    db: Session,
    storage: FileStorage,
    source: BinaryIO,
    file_name: str,
    mime: str | None,
    user_id: int | None = None,
) -> Attachment:
    stored = storage.save(source, file_name)
    attachment = Attachment(
        user_id=user_id,
        file_name=file_name,
        saved_name=stored.saved_name,
        real_path=stored.real_path,
        file_size=stored.size,
        mime=mime or "application/octet-stream",
        storage="local",
    )
    db.add(attachment)
    try:
        db.commit()
    except Exception:
        db.rollback()
        storage.delete(stored.real_path)
        raise
    db.refresh(attachment)
    logger.info("Attachment created: id=%s name=%s", attachment.id, file_name)
    return attachment


def update_attachment(
    db: Session, attachment_id: int, body: AttachmentUpdate, roles: Iterable[str]
) -> Attachment:
    """Rename or re-gate a file the caller can see; the new view_role must stay visible to them."""
    roles = set(roles)
    attachment = get_attachment(db, attachment_id, roles)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("view_role") and not can_view(changes["view_role"], roles):
        raise Forbidden("You cannot restrict a file to a role above your own.")
    if "file_name" in changes and changes["file_name"]:
        attachment.file_name = changes["file_name"]
    if "view_role" in changes:
        attachment.view_role = changes["view_role"]
    db.commit()
    db.refresh(attachment)
    return attachment


def delete_attachment(db: Session, storage: FileStorage, attachment_id: int) -> None:
    """Remove the file from disk, then the row."""
    attachment = _get(db, attachment_id)
    storage.delete(attachment.real_path)
    db.delete(attachment)
    db.commit()
    logger.info("Attachment deleted: id=%s", attachment_id)


def update_content(
    db: Session, storage: FileStorage, attachment_id: int, content: str, roles: Iterable[str]
) -> None:
    """Overwrite a JSON attachment in place after checking the new content parses."""
    attachment = get_attachment(db, attachment_id, roles)
    if attachment.mime != JSON_MIME:
        raise BadRequest("Only JSON files can be edited.")
    try:
        json.loads(content)
    except json.JSONDecodeError:
        raise BadRequest("Invalid JSON content.") from None
    storage.write_text(attachment.real_path, content)
    attachment.file_size = len(content.encode("utf-8"))
    db.commit()


def replace_file(
    db: Session,
    storage: FileStorage,
    attachment_id: int,
    source: BinaryIO,
    file_name: str,
    mime: str | None,
    roles: Iterable[str],
) -> Attachment:
    """Swap the stored file; the row keeps its id and display name."""
    attachment = get_attachment(db, attachment_id, roles)
    stored = storage.replace(attachment.real_path, source, file_name)
    attachment.saved_name = stored.saved_name
    attachment.real_path = stored.real_path
    attachment.file_size = stored.size
    attachment.mime = mime or attachment.mime
    db.commit()
    db.refresh(attachment)
    logger.info("Attachment file replaced: id=%s", attachment.id)
    return attachment
