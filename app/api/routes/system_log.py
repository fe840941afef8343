"""System log file viewer (ADMIN only)."""

from typing import Annotated

from fastapi import APIRouter, Query

from app.api.deps import AdminUser
from app.core.config import settings
from app.schemas.system_log import LogFileContent, LogFilesResponse
from app.services import system_log

router = APIRouter()


@router.get("/files", response_model=LogFilesResponse)
def list_files(_admin: AdminUser) -> LogFilesResponse:
    return LogFilesResponse(files=system_log.list_log_files(settings.LOG_DIR))


@router.get("/files/{filename}", response_model=LogFileContent)
def read_file(
    filename: str,
    _admin: AdminUser,
    level: str | None = None,
    search: str | None = None,
    limit: Annotated[int | None, Query(ge=1, le=10000)] = None,
) -> LogFileContent:
    """Entries newest first, optionally filtered by exact level and a search term."""
    return system_log.read_log_file(settings.LOG_DIR, filename, level=level, search=search, limit=limit)
