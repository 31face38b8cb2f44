"""
Session Value Objects

Immutable snapshots of upload and retrieval session state. A session
replaces its snapshot on every transition; renderers only ever see whole
snapshots.
"""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from ..errors import ErrorKind, SessionError
from ..transfer.value_objects import CandidateFile, FileMetadata, UploadReceipt


class UploadPhase(Enum):
    """Upload session phase enumeration."""
    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RetrievalPhase(Enum):
    """Retrieval session phase enumeration."""
    IDLE = "idle"
    CODE_ENTERED = "code_entered"
    FETCHING_METADATA = "fetching_metadata"
    METADATA_READY = "metadata_ready"
    DOWNLOADING = "downloading"
    COMPLETED = "completed"
    FAILED = "failed"

    def is_in_flight(self) -> bool:
        """Check if a network operation is pending."""
        return self in (RetrievalPhase.FETCHING_METADATA, RetrievalPhase.DOWNLOADING)


@dataclass(frozen=True)
class UploadState:
    """Snapshot of an upload session."""
    phase: UploadPhase = UploadPhase.IDLE
    candidate: Optional[CandidateFile] = None
    progress: int = 0
    receipt: Optional[UploadReceipt] = None
    error: Optional[SessionError] = None

    def __post_init__(self):
        if not 0 <= self.progress <= 100:
            raise ValueError(f"Progress must be between 0 and 100, got {self.progress}")

    @property
    def code(self) -> Optional[str]:
        return str(self.receipt.code) if self.receipt else None

    def evolve(self, **changes) -> "UploadState":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "candidate": (
                {
                    "name": self.candidate.name,
                    "size": self.candidate.size,
                    "content_type": self.candidate.content_type,
                }
                if self.candidate
                else None
            ),
            "progress": self.progress,
            "code": self.code,
            "filename": self.receipt.filename if self.receipt else None,
            "error": self.error.to_dict() if self.error else None,
        }


@dataclass(frozen=True)
class RetrievalState:
    """Snapshot of a retrieval session."""
    phase: RetrievalPhase = RetrievalPhase.IDLE
    code: str = ""
    metadata: Optional[FileMetadata] = None
    error: Optional[SessionError] = None
    saved_filename: Optional[str] = None
    saved_path: Optional[Path] = None

    def evolve(self, **changes) -> "RetrievalState":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "code": self.code,
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "error": self.error.to_dict() if self.error else None,
            "saved_filename": self.saved_filename,
            "saved_path": str(self.saved_path) if self.saved_path else None,
        }


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a session operation call.

    Attributes:
        success: False when the call was rejected without a transition
            (e.g. INVALID_STATE) or ended in a failure state
        error: The rejection or failure, if any
    """
    success: bool
    error: Optional[SessionError] = None

    @classmethod
    def succeeded(cls) -> "OperationResult":
        return cls(success=True)

    @classmethod
    def rejected(cls, kind: ErrorKind, detail: Optional[str] = None) -> "OperationResult":
        return cls(success=False, error=SessionError(kind=kind, detail=detail))

    @classmethod
    def failed(cls, error: SessionError) -> "OperationResult":
        return cls(success=False, error=error)
