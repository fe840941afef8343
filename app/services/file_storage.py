"""Local-disk storage for uploaded files and byte-range reads for partial content responses."""

import logging
import re
import uuid
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from app.services.errors import BadRequest, RangeNotSatisfiable

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
_RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


@dataclass(frozen=True)
class StoredFile:
    saved_name: str
    real_path: str
    size: int


class FileStorage:
    """Stores files under root/YYYY/MM/DD/<unique name><original extension>."""

    def __init__(self, root: str | Path, max_bytes: int) -> None:
        self.root = Path(root)
        self.max_bytes = max_bytes

    def _target(self, original_name: str) -> tuple[str, Path]:
        now = datetime.now(UTC)
        directory = self.root / f"{now.year:04d}" / f"{now.month:02d}" / f"{now.day:02d}"
        directory.mkdir(parents=True, exist_ok=True)
        saved_name = f"{uuid.uuid4().hex}{Path(original_name).suffix.lower()}"
        return saved_name, directory / saved_name

    def save(self, source: BinaryIO, original_name: str) -> StoredFile:
        """Copy source to a new unique path. Raises BadRequest above max_bytes."""
        saved_name, path = self._target(original_name)
        size = 0
        try:
            with path.open("wb") as out:
                while chunk := source.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise BadRequest(
                            f"File size must not exceed {self.max_bytes // (1024 * 1024)} MB."
                        )
                    out.write(chunk)
        except BaseException:
            path.unlink(missing_ok=True)
            raise
        logger.info("Stored file: %s (%s bytes)", saved_name, size)
        return StoredFile(saved_name=saved_name, real_path=str(path), size=size)

    def delete(self, real_path: str) -> None:
        Path(real_path).unlink(missing_ok=True)

    def replace(self, old_path: str, source: BinaryIO, original_name: str) -> StoredFile:
        """Store the new file first, then remove the old one."""
        stored = self.save(source, original_name)
        self.delete(old_path)
        return stored

    def write_text(self, real_path: str, content: str) -> None:
        Path(real_path).write_text(content, encoding="utf-8")


def parse_byte_range(header: str | None, size: int) -> tuple[int, int] | None:
    """
    Parse a single-range Range header into inclusive (start, end).

    Returns None when there is no header. Supports "bytes=a-b", "bytes=a-" and
    the suffix form "bytes=-n". Raises RangeNotSatisfiable for anything else.
    """
    if not header:
        return None
    m = _RANGE_RE.match(header.strip())
    if not m or (not m.group(1) and not m.group(2)) or size == 0:
        raise RangeNotSatisfiable()
    first, last = m.group(1), m.group(2)
    if not first:
        suffix = int(last)
        if suffix == 0:
            raise RangeNotSatisfiable()
        return max(size - suffix, 0), size - 1
    start = int(first)
    end = int(last) if last else size - 1
    if start >= size or end < start:
        raise RangeNotSatisfiable()
    return start, min(end, size - 1)


def iter_file(path: str | Path, start: int = 0, end: int | None = None) -> Iterator[bytes]:
    """Yield the bytes of path from start to end inclusive in CHUNK_SIZE pieces."""
    with open(path, "rb") as f:
        f.seek(start)
        remaining = None if end is None else end - start + 1
        while remaining is None or remaining > 0:
            size = CHUNK_SIZE if remaining is None else min(CHUNK_SIZE, remaining)
            chunk = f.read(size)
            if not chunk:
                break
            if remaining is not None:
                remaining -= len(chunk)
            yield chunk
