"""
Read-only access to the application's own log files.

Lines follow the format written by app.core.logging:
    2025-01-29T12:34:56Z [INFO] [app.services.sessions] Message {"optional": "json"}
"""

import json
import logging
import re
from datetime import UTC, datetime
from pathlib import Path

from app.schemas.system_log import LogEntry, LogFile, LogFileContent
from app.services.errors import BadRequest, NotFound

logger = logging.getLogger(__name__)

_LINE_RE = re.compile(r"^(\S+)\s+\[(\w+)\]\s+(?:\[([^\]]+)\]\s+)?(.+)$")
_TRAILING_JSON_RE = re.compile(r"\s(\{.+\})$")


def parse_line(line: str) -> LogEntry:
    """Split one line into its fields. Lines that do not match are kept whole with level UNKNOWN."""
    m = _LINE_RE.match(line)
    if not m:
        return LogEntry(timestamp="", level="UNKNOWN", context="", message=line)
    timestamp, level, context, rest = m.groups()
    message, metadata = rest, None
    tail = _TRAILING_JSON_RE.search(rest)
    if tail:
        try:
            metadata = json.loads(tail.group(1))
            message = rest[: tail.start()].strip()
        except json.JSONDecodeError:
            pass
    return LogEntry(
        timestamp=timestamp, level=level, context=context or "", message=message, metadata=metadata
    )


def _mtime(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=UTC)


def list_log_files(log_dir: str | Path) -> list[LogFile]:
    """*.log files in log_dir, most recently modified first. Missing directory gives []."""
    directory = Path(log_dir)
    if not directory.is_dir():
        return []
    files = []
    for path in directory.glob("*.log"):
        if not path.is_file():
            continue
        stat = path.stat()
        files.append(
            LogFile(
                filename=path.name,
                size=stat.st_size,
                created_at=datetime.fromtimestamp(stat.st_ctime, tz=UTC),
                modified_at=_mtime(path),
            )
        )
    files.sort(key=lambda f: f.modified_at, reverse=True)
    return files


def read_log_file(
    log_dir: str | Path,
    filename: str,
    level: str | None = None,
    search: str | None = None,
    limit: int | None = None,
) -> LogFileContent:
    """
    Parse one log file, newest entry first.

    level must match exactly; search is a case-insensitive substring of the
    message or context; limit keeps the first N entries after filtering.
    """
    if ".." in filename or "/" in filename or "\\" in filename:
        raise BadRequest("Invalid filename.")
    path = Path(log_dir) / filename
    if not path.is_file():
        raise NotFound("Log file not found.")

    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.error("Failed to read log file %s: %s", filename, e)
        raise BadRequest("Failed to read log file.") from e

    lines = [line for line in text.split("\n") if line.strip()]
    entries = [parse_line(line) for line in reversed(lines)]
    if level:
        entries = [e for e in entries if e.level == level]
    if search:
        needle = search.lower()
        entries = [e for e in entries if needle in e.message.lower() or needle in e.context.lower()]
    if limit and limit > 0:
        entries = entries[:limit]

    return LogFileContent(
        filename=filename, size=path.stat().st_size, lines=len(lines), entries=entries
    )
