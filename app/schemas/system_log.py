"""Response schemas for the system log file viewer."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class LogFile(BaseModel):
    filename: str
    size: int
    created_at: datetime
    modified_at: datetime


class LogFilesResponse(BaseModel):
    files: list[LogFile]


class LogEntry(BaseModel):
    timestamp: str
    level: str
    context: str
    message: str
    metadata: Any | None = None


class LogFileContent(BaseModel):
    filename: str
    size: int
    lines: int
    entries: list[LogEntry]
