"""Public file download with Range support, and uploads for file managers."""

from pathlib import Path
from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, File, Header, Request, UploadFile, status
from fastapi.responses import StreamingResponse

from app.api.deps import DbSession, FileManager, OptionalUser, Storage
from app.api.routes.attachments import store_uploads
from app.models import ActivityAction, Role
from app.schemas.attachment import UploadResponse
from app.services import activity_log, attachments
from app.services.errors import Forbidden, NotFound
from app.services.file_storage import iter_file, parse_byte_range
from app.services.role_gate import caller_roles

router = APIRouter()


@router.post("/upload", response_model=list[UploadResponse], status_code=status.HTTP_201_CREATED)
def upload_files(
    request: Request,
    user: FileManager,
    db: DbSession,
    storage: Storage,
    files: Annotated[list[UploadFile], File()],
) -> list[UploadResponse]:
    results = store_uploads(db, storage, files, user.id)
    for item in results:
        activity_log.log(
            db,
            ActivityAction.FILE_UPLOAD,
            request,
            actor=user,
            target_type="attachment",
            target_id=item.id,
            target_name=item.file_name,
        )
    return results


@router.get("/{saved_name}")
def download_file(
    saved_name: str,
    user: OptionalUser,
    db: DbSession,
    range_header: Annotated[str | None, Header(alias="range")] = None,
) -> StreamingResponse:
    """
    Stream a stored file. Anonymous callers see only unrestricted files.
    A Range header yields 206 Partial Content; a bad range yields 416.
    """
    attachment = attachments.find_by_saved_name(db, saved_name)
    if attachment is None or not Path(attachment.real_path).is_file():
        raise NotFound("File not found.")
    roles = caller_roles(user) if user else {Role.USER.value}
    if not attachments.can_view(attachment.view_role, roles):
        raise Forbidden("You do not have permission to view this file.")

    size = Path(attachment.real_path).stat().st_size
    headers = {
        "Accept-Ranges": "bytes",
        "Content-Disposition": f"inline; filename*=UTF-8''{quote(attachment.file_name, safe='')}",
    }
    byte_range = parse_byte_range(range_header, size)
    if byte_range is None:
        headers["Content-Length"] = str(size)
        return StreamingResponse(
            iter_file(attachment.real_path), media_type=attachment.mime, headers=headers
        )

    start, end = byte_range
    headers["Content-Range"] = f"bytes {start}-{end}/{size}"
    headers["Content-Length"] = str(end - start + 1)
    return StreamingResponse(
        iter_file(attachment.real_path, start, end),
        status_code=status.HTTP_206_PARTIAL_CONTENT,
        media_type=attachment.mime,
        headers=headers,
    )
