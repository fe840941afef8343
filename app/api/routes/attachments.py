"""Admin attachment endpoints (ADMIN and MANAGER)."""

from typing import Annotated, Literal

from fastapi import APIRouter, File, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from app.api.deps import DbSession, StaffUser, Storage
from app.core.config import settings
from app.models import ActivityAction
from app.schemas.attachment import (
    AttachmentContentUpdate,
    AttachmentOut,
    AttachmentsListResponse,
    AttachmentUpdate,
    SuccessResponse,
    UploadResponse,
)
from app.services import activity_log, attachments
from app.services.errors import BadRequest
from app.services.file_storage import FileStorage
from app.services.role_gate import caller_roles

router = APIRouter()

MAX_FILES_PER_REQUEST = 10


def store_uploads(
    db: Session, storage: FileStorage, files: list[UploadFile], user_id: int
) -> list[UploadResponse]:
    """Persist each upload and return its id and download URL."""
    if not files:
        raise BadRequest("No files were uploaded.")
    if len(files) > MAX_FILES_PER_REQUEST:
        raise BadRequest(f"At most {MAX_FILES_PER_REQUEST} files per request.")
    results = []
    for upload in files:
        attachment = attachments.create_attachment(
            db,
            storage,
            upload.file,
            upload.filename or "upload",
            upload.content_type,
            user_id=user_id,
        )
        results.append(
            UploadResponse(
                id=attachment.id,
                file_name=attachment.file_name,
                file_url=attachments.file_url(attachment.saved_name, settings.API_PREFIX),
            )
        )
    return results


@router.get("", response_model=AttachmentsListResponse)
def list_attachments(
    staff: StaffUser,
    db: DbSession,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=200)] = 10,
    sort_field: str = "id",
    sort_order: Literal["asc", "desc"] = "desc",
    search_term: str = "",
    search_type: Literal["all", "filename", "mime"] = "all",
    file_types: str = "all",
) -> AttachmentsListResponse:
    """file_types is "all" or a comma list of image, pdf and audio."""
    return attachments.list_attachments(
        db,
        caller_roles(staff),
        settings.API_PREFIX,
        page=page,
        per_page=per_page,
        sort_field=sort_field,
        sort_order=sort_order,
        search_term=search_term,
        search_type=search_type,
        file_types=file_types,
    )


@router.post("", response_model=list[UploadResponse], status_code=status.HTTP_201_CREATED)
def upload_attachments(
    request: Request,
    staff: StaffUser,
    db: DbSession,
    storage: Storage,
    files: Annotated[list[UploadFile], File()],
) -> list[UploadResponse]:
    results = store_uploads(db, storage, files, staff.id)
    for item in results:
        activity_log.log(
            db,
            ActivityAction.FILE_UPLOAD,
            request,
            actor=staff,
            target_type="attachment",
            target_id=item.id,
            target_name=item.file_name,
        )
    return results


@router.get("/{attachment_id}", response_model=AttachmentOut)
def get_attachment(attachment_id: int, staff: StaffUser, db: DbSession) -> AttachmentOut:
    attachment = attachments.get_attachment(db, attachment_id, caller_roles(staff))
    return attachments.to_out(attachment, settings.API_PREFIX)


@router.put("/{attachment_id}", response_model=AttachmentOut)
def update_attachment(
    attachment_id: int, body: AttachmentUpdate, staff: StaffUser, db: DbSession
) -> AttachmentOut:
    attachment = attachments.update_attachment(db, attachment_id, body, caller_roles(staff))
    return attachments.to_out(attachment, settings.API_PREFIX)


@router.delete("/{attachment_id}", response_model=SuccessResponse)
def delete_attachment(
    attachment_id: int, request: Request, staff: StaffUser, db: DbSession, storage: Storage
) -> SuccessResponse:
    file_name = attachments.get_attachment(db, attachment_id, caller_roles(staff)).file_name
    attachments.delete_attachment(db, storage, attachment_id)
    activity_log.log(
        db,
        ActivityAction.FILE_DELETE,
        request,
        actor=staff,
        target_type="attachment",
        target_id=attachment_id,
        target_name=file_name,
    )
    return SuccessResponse()


@router.put("/{attachment_id}/content", response_model=SuccessResponse)
def update_content(
    attachment_id: int,
    body: AttachmentContentUpdate,
    staff: StaffUser,
    db: DbSession,
    storage: Storage,
) -> SuccessResponse:
    """Edit a JSON attachment in place."""
    attachments.update_content(db, storage, attachment_id, body.content, caller_roles(staff))
    return SuccessResponse()


@router.put("/{attachment_id}/replace", response_model=UploadResponse)
def replace_file(
    attachment_id: int,
    request: Request,
    staff: StaffUser,
    db: DbSession,
    storage: Storage,
    file: Annotated[UploadFile, File()],
) -> UploadResponse:
    attachment = attachments.replace_file(
        db,
        storage,
        attachment_id,
        file.file,
        file.filename or "upload",
        file.content_type,
        caller_roles(staff),
    )
    activity_log.log(
        db,
        ActivityAction.FILE_UPLOAD,
        request,
        actor=staff,
        target_type="attachment",
        target_id=attachment.id,
        target_name=attachment.file_name,
        message="replaced",
    )
    return UploadResponse(
        id=attachment.id,
        file_name=attachment.file_name,
        file_url=attachments.file_url(attachment.saved_name, settings.API_PREFIX),
    )
