"""Value objects returned by the upload service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


@dataclass(slots=True)
class StoredFile:
    filename: str
    original_name: str
    size: int
    mimetype: str
    path: Path
    url: str


@dataclass(slots=True)
class FileInfo:
    filename: str
    size: int
    created_time: datetime
    modified_time: datetime
    url: str


@dataclass(slots=True)
class UploadStats:
    total_files: int = 0
    total_size: int = 0
    file_types: dict[str, int] = field(default_factory=dict)

    @property
    def total_size_mb(self) -> str:
        return f"{self.total_size / (1024 * 1024):.2f}"


@dataclass(slots=True)
class CleanupResult:
    deleted_count: int
    cutoff_date: datetime
