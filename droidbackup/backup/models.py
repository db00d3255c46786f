"""Data models for a sync run and its report."""

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Set, Tuple

from pydantic import BaseModel, Field

from ..util.timeutil import now_local


class RemoteFileEntry(BaseModel):
    """A regular file on the device, as seen by one listing pass."""

    size: int = Field(ge=0, description="File size in bytes")
    modified_time: int = Field(description="Modification time (Unix timestamp)")
    remote_path: str = Field(description="Absolute path on the device")

    class Config:
        """Pydantic configuration."""
        frozen = True


class SyncResult(BaseModel):
    """Outcome of a sync pass, one relative path per processed entry."""

    copied: Tuple[str, ...] = Field(default=(), description="Fetched in this run")
    skipped: Tuple[str, ...] = Field(default=(), description="Already present with matching size")
    failed: Tuple[str, ...] = Field(default=(), description="Fetch or local write failed")

    class Config:
        """Pydantic configuration."""
        frozen = True

    @property
    def total(self) -> int:
        return len(self.copied) + len(self.skipped) + len(self.failed)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)


class SyncResultBuilder:
    """Append-only accumulator for a :class:`SyncResult`.

    A relative path may be classified once; a second classification of
    the same path raises ``ValueError`` so the three lists stay disjoint.
    """

    def __init__(self) -> None:
        self._copied: List[str] = []
        self._skipped: List[str] = []
        self._failed: List[str] = []
        self._seen: Set[str] = set()

    def _add(self, bucket: List[str], relative_path: str) -> None:
        if relative_path in self._seen:
            raise ValueError(f"Path already classified in this run: {relative_path}")
        self._seen.add(relative_path)
        bucket.append(relative_path)

    def add_copied(self, relative_path: str) -> None:
        self._add(self._copied, relative_path)

    def add_skipped(self, relative_path: str) -> None:
        self._add(self._skipped, relative_path)

    def add_failed(self, relative_path: str) -> None:
        self._add(self._failed, relative_path)

    def build(self) -> SyncResult:
        return SyncResult(
            copied=tuple(self._copied),
            skipped=tuple(self._skipped),
            failed=tuple(self._failed),
        )


class BackupReport(BaseModel):
    """Everything known about one finished sync run."""

    device_label: str = Field(description="Human-readable device model")
    destination_root: Path = Field(description="Folder the files were mirrored into")
    result: SyncResult = Field(default_factory=SyncResult)
    contact_record_count: int = Field(default=0, ge=0, description="Records in the canonical contact file")
    contact_file_path: Optional[Path] = Field(default=None, description="Canonical contact file, if any")
    multiple_contact_files: bool = Field(default=False, description="More than one contact file was found")
    cancelled: bool = Field(default=False, description="Run was cancelled before every entry was fetched")
    log_path: Optional[Path] = Field(default=None, description="Where the plain-text log was written")
    created_at: datetime = Field(default_factory=now_local)

    class Config:
        """Pydantic configuration."""
        frozen = True
