"""
Data models for upload tasks, attempts and batch results.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from batch_uploader.models.metadata_record import MetadataRecord


class OutcomeStatus(Enum):
    """Terminal classification of one document upload."""

    SUCCEEDED = "Success"
    FAILED_AFTER_RETRIES = "Fail"


@dataclass(frozen=True)
class UploadTask:
    """One document paired with its metadata record."""

    file_path: Path
    record: MetadataRecord
    batch_folder: Path

    @property
    def batch_name(self) -> str:
        return self.batch_folder.name


@dataclass(frozen=True)
class UploadAttempt:
    """Result of a single call to the repository."""

    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None

    def describe(self) -> str:
        """Diagnostic text for logs."""
        if self.success:
            return f"HTTP {self.status_code}"
        if self.status_code is not None:
            return f"HTTP {self.status_code}: {self.error or 'rejected'}"
        return self.error or "unknown error"


@dataclass(frozen=True)
class UploadOutcome:
    """Terminal outcome of processing one upload task."""

    status: OutcomeStatus
    task: UploadTask
    attempts: int
    last_attempt: Optional[UploadAttempt] = None

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED

    @property
    def record(self) -> MetadataRecord:
        return self.task.record

    @property
    def file_path(self) -> Path:
        return self.task.file_path


@dataclass
class BatchCounters:
    """Per-batch success and failure counts."""

    succeeded: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.succeeded + self.failed


@dataclass
class BatchResult:
    """Result of running one batch folder through the pipeline."""

    batch_name: str
    succeeded: int = 0
    failed: int = 0
    skipped: List[str] = field(default_factory=list)
    metadata_file: Optional[Path] = None
    processed_report: Optional[Path] = None
    failed_report: Optional[Path] = None
    no_op: bool = False
    processing_time: Optional[float] = None

    @property
    def total(self) -> int:
        return self.succeeded + self.failed
