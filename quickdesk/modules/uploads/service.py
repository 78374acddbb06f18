"""Upload storage: write, serve, inspect, delete and sweep files on disk."""

from __future__ import annotations

import logging
import os
import re
import stat
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, Sequence

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from quickdesk.core.config import Settings, get_settings

from .exceptions import (
    InvalidFilenameError,
    NoFileError,
    StorageError,
    UploadNotFoundError,
    UploadRejectedError,
)
from .models import CleanupResult, FileInfo, StoredFile, UploadStats

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024
PUBLIC_PREFIX = "/uploads"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")
_FORBIDDEN_IN_NAME = ("/", "\\", "\x00")
MAX_NAME_BYTES = 255


def generate_filename(original_name: str) -> str:
    """Build ``<safe-stem>-<utc timestamp>-<random hex><ext>`` for a client name."""
    stem, ext = os.path.splitext(os.path.basename(original_name))
    safe_stem = _UNSAFE_CHARS.sub("_", stem).strip("._-")[:50] or "file"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f")
    return f"{safe_stem}-{timestamp}-{uuid.uuid4().hex[:12]}{ext.lower()}"


def _client_name(upload: UploadFile) -> str:
    # Browsers on Windows may send the full client path.
    raw = (upload.filename or "").replace("\\", "/")
    return os.path.basename(raw).strip() or "file"


class UploadService:
    """Stores uploads as flat files under a single root directory.

    The root is created lazily on the first write; reading operations treat a
    missing root as empty.
    """

    def __init__(
        self,
        uploads_root: Path,
        *,
        max_file_size: int | None = None,
        max_files: int = 10,
        allowed_extensions: Iterable[str] | None = None,
        cleanup_default_days: float = 30,
    ) -> None:
        self._root = Path(uploads_root).resolve()
        self._max_file_size = max_file_size
        self._max_files = max_files
        self._allowed = {ext.lower() for ext in allowed_extensions or ()}
        self._cleanup_default_days = cleanup_default_days

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "UploadService":
        settings = settings or get_settings()
        storage = settings.storage
        return cls(
            settings.uploads_root,
            max_file_size=storage.max_file_size,
            max_files=storage.max_files,
            allowed_extensions=storage.allowed_extensions,
            cleanup_default_days=storage.cleanup_default_days,
        )

    @property
    def root(self) -> Path:
        return self._root

    @staticmethod
    def url_for(filename: str) -> str:
        return f"{PUBLIC_PREFIX}/{filename}"

    def resolve(self, filename: str) -> Path:
        """Map a stored name to its path, refusing anything outside the root."""
        if not filename or filename in {".", ".."}:
            raise InvalidFilenameError(filename)
        if any(token in filename for token in _FORBIDDEN_IN_NAME):
            raise InvalidFilenameError(filename)
        if len(filename.encode("utf-8", "surrogatepass")) > MAX_NAME_BYTES:
            raise InvalidFilenameError(filename)
        try:
            path = (self._root / filename).resolve()
        except (OSError, RuntimeError) as exc:
            raise InvalidFilenameError(filename) from exc
        if path.parent != self._root:
            raise InvalidFilenameError(filename)
        return path

    async def store_single(self, upload: UploadFile | None) -> StoredFile:
        if upload is None:
            raise NoFileError("No file uploaded")
        stored = await self._write(upload)
        logger.info("Stored upload %s (%d bytes)", stored.filename, stored.size)
        return stored

    async def store_multiple(
        self,
        uploads: Sequence[UploadFile] | None,
        *,
        max_files: int | None = None,
    ) -> list[StoredFile]:
        """Store a batch of uploads; a failure removes the files already written."""
        if not uploads:
            raise NoFileError("No files uploaded")
        limit = self._max_files if max_files is None else max_files
        if len(uploads) > limit:
            raise UploadRejectedError(f"Too many files. Maximum is {limit} files")

        stored: list[StoredFile] = []
        try:
            for upload in uploads:
                stored.append(await self._write(upload))
        except Exception:
            for item in stored:
                await self._unlink_quietly(item.path)
            raise
        logger.info("Stored %d uploads (%d bytes)", len(stored), sum(item.size for item in stored))
        return stored

    async def get_file(self, filename: str) -> Path:
        path = self.resolve(filename)
        await self._stat_regular(path, filename)
        return path

    async def get_file_info(self, filename: str) -> FileInfo:
        path = self.resolve(filename)
        st = await self._stat_regular(path, filename)
        created = getattr(st, "st_birthtime", st.st_ctime)
        return FileInfo(
            filename=filename,
            size=st.st_size,
            created_time=datetime.fromtimestamp(created, tz=timezone.utc),
            modified_time=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            url=self.url_for(filename),
        )

    async def delete_file(self, filename: str) -> None:
        path = self.resolve(filename)
        await self._stat_regular(path, filename)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError as exc:
            raise UploadNotFoundError(filename) from exc
        except OSError as exc:
            logger.error("Failed to delete upload %s: %s", filename, exc)
            raise StorageError(f"Error deleting file {filename}") from exc
        logger.info("Deleted upload %s", filename)

    async def discard(self, filename: str) -> bool:
        """Delete a file if possible, logging instead of raising."""
        try:
            await self.delete_file(filename)
        except UploadNotFoundError:
            logger.warning("Upload %s already gone", filename)
            return False
        except StorageError:
            return False
        return True

    async def get_stats(self) -> UploadStats:
        stats = UploadStats()
        for path, st in await self._scan():
            stats.total_files += 1
            stats.total_size += st.st_size
            ext = path.suffix.lower()
            stats.file_types[ext] = stats.file_types.get(ext, 0) + 1
        return stats

    async def cleanup(self, max_age_days: float | None = None) -> CleanupResult:
        """Remove every file last modified strictly before ``now - max_age_days``."""
        days = self._cleanup_default_days if max_age_days is None else max_age_days
        try:
            cutoff = datetime.now(timezone.utc) - timedelta(days=days)
            cutoff_ts = cutoff.timestamp()
        except (OverflowError, ValueError, OSError):
            # Older than anything representable: nothing on disk can match.
            cutoff = datetime.min.replace(tzinfo=timezone.utc)
            cutoff_ts = float("-inf")

        deleted = 0
        for path, st in await self._scan():
            if st.st_mtime >= cutoff_ts:
                continue
            try:
                await aiofiles.os.remove(path)
            except OSError as exc:
                logger.warning("Cleanup could not delete %s: %s", path.name, exc)
                continue
            deleted += 1

        logger.info("Cleanup removed %d files older than %s", deleted, cutoff.isoformat())
        return CleanupResult(deleted_count=deleted, cutoff_date=cutoff)

    async def _write(self, upload: UploadFile) -> StoredFile:
        original_name = _client_name(upload)
        ext = os.path.splitext(original_name)[1].lower()
        if self._allowed and ext not in self._allowed:
            await upload.close()
            raise UploadRejectedError(f"File type {ext or '(none)'} is not allowed")

        try:
            await aiofiles.os.makedirs(self._root, exist_ok=True)
        except OSError as exc:
            await upload.close()
            raise StorageError(f"Uploads directory unavailable: {exc}") from exc

        filename = generate_filename(original_name)
        path = self._root / filename
        size = 0
        try:
            async with aiofiles.open(path, "wb") as buffer:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if self._max_file_size is not None and size > self._max_file_size:
                        raise UploadRejectedError(
                            f"File too large. Maximum size is {self._max_file_size // (1024 * 1024)}MB",
                            too_large=True,
                        )
                    await buffer.write(chunk)
        except UploadRejectedError:
            await self._unlink_quietly(path)
            raise
        except OSError as exc:
            await self._unlink_quietly(path)
            raise StorageError(f"Error storing file {original_name}") from exc
        finally:
            await upload.close()

        return StoredFile(
            filename=filename,
            original_name=original_name,
            size=size,
            mimetype=upload.content_type or "application/octet-stream",
            path=path,
            url=self.url_for(filename),
        )

    async def _stat_regular(self, path: Path, filename: str) -> os.stat_result:
        try:
            st = await aiofiles.os.stat(path)
        except PermissionError as exc:
            raise StorageError(f"Error reading file {filename}") from exc
        except (OSError, ValueError) as exc:
            raise UploadNotFoundError(filename) from exc
        if not stat.S_ISREG(st.st_mode):
            raise UploadNotFoundError(filename)
        return st

    async def _scan(self) -> list[tuple[Path, os.stat_result]]:
        try:
            names = await aiofiles.os.listdir(self._root)
        except FileNotFoundError:
            return []

        entries: list[tuple[Path, os.stat_result]] = []
        for name in sorted(names):
            path = self._root / name
            try:
                st = await aiofiles.os.stat(path)
            except FileNotFoundError:
                continue
            if stat.S_ISREG(st.st_mode):
                entries.append((path, st))
        return entries

    @staticmethod
    async def _unlink_quietly(path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove partial upload %s: %s", path.name, exc)
