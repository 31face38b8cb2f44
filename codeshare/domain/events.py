"""
Domain Events

Immutable records of significant session transitions.
Events decouple side effects (rendering, logging) from the session state
machines.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the session that generated the event
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class SessionStateChangedEvent(DomainEvent):
    """
    Event emitted whenever a session replaces its state snapshot.

    Renderers subscribe to this event and redraw from ``state``.

    Attributes:
        session_type: "upload" or "retrieval"
        state: The new UploadState or RetrievalState snapshot
    """
    session_type: str
    state: Any

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "session_type": self.session_type,
            "state": self.state.to_dict(),
        })
        return base_dict


@dataclass(frozen=True)
class OperationRejectedEvent(DomainEvent):
    """
    Event emitted when a session operation is refused without a transition.

    Attributes:
        operation: Name of the refused operation
        error_kind: Rejection category (e.g. "invalid_state")
        phase: Session phase at the time of the call
    """
    operation: str
    error_kind: str
    phase: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "operation": self.operation,
            "error_kind": self.error_kind,
            "phase": self.phase,
        })
        return base_dict


@dataclass(frozen=True)
class FileSelectedEvent(DomainEvent):
    """
    Event emitted when a candidate file is accepted for upload.

    Attributes:
        filename: Declared filename
        size: Declared size in bytes
    """
    filename: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "filename": self.filename,
            "size": self.size,
        })
        return base_dict


@dataclass(frozen=True)
class UploadStartedEvent(DomainEvent):
    """
    Event emitted when an upload is submitted.

    Attributes:
        filename: Declared filename
        size: Declared size in bytes
    """
    filename: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "filename": self.filename,
            "size": self.size,
        })
        return base_dict


@dataclass(frozen=True)
class UploadProgressUpdatedEvent(DomainEvent):
    """
    Event emitted when upload progress advances.

    Attributes:
        percentage: Upload percentage (0-100)
    """
    percentage: int

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "percentage": self.percentage,
        })
        return base_dict


@dataclass(frozen=True)
class UploadSucceededEvent(DomainEvent):
    """
    Event emitted when the server issues a share code.

    Attributes:
        code: Issued share code
        filename: Filename stored by the server
    """
    code: str
    filename: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "code": self.code,
            "filename": self.filename,
        })
        return base_dict


@dataclass(frozen=True)
class UploadFailedEvent(DomainEvent):
    """
    Event emitted when an upload fails.

    Attributes:
        error_kind: Error category
        detail: Optional server-provided or technical detail
    """
    error_kind: str
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "error_kind": self.error_kind,
            "detail": self.detail,
        })
        return base_dict


@dataclass(frozen=True)
class MetadataFetchedEvent(DomainEvent):
    """
    Event emitted when metadata for a share code is retrieved.

    Attributes:
        code: Share code looked up
        filename: Reported filename
        size: Reported size in bytes
    """
    code: str
    filename: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "code": self.code,
            "filename": self.filename,
            "size": self.size,
        })
        return base_dict


@dataclass(frozen=True)
class MetadataFetchFailedEvent(DomainEvent):
    """
    Event emitted when a metadata lookup fails.

    Attributes:
        code: Share code looked up
        error_kind: Error category
        detail: Optional technical detail
    """
    code: str
    error_kind: str
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "code": self.code,
            "error_kind": self.error_kind,
            "detail": self.detail,
        })
        return base_dict


@dataclass(frozen=True)
class DownloadStartedEvent(DomainEvent):
    """
    Event emitted when a download is triggered.

    Attributes:
        code: Share code
        filename: Filename reported by metadata
    """
    code: str
    filename: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "code": self.code,
            "filename": self.filename,
        })
        return base_dict


@dataclass(frozen=True)
class DownloadCompletedEvent(DomainEvent):
    """
    Event emitted when a downloaded file has been handed to the file saver.

    Attributes:
        code: Share code
        filename: Resolved filename
        saved_path: Where the file was written
        size: Number of bytes received
    """
    code: str
    filename: str
    saved_path: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "code": self.code,
            "filename": self.filename,
            "saved_path": self.saved_path,
            "size": self.size,
        })
        return base_dict


@dataclass(frozen=True)
class DownloadFailedEvent(DomainEvent):
    """
    Event emitted when a download fails.

    Attributes:
        code: Share code
        error_kind: Error category
        detail: Optional technical detail
    """
    code: str
    error_kind: str
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "code": self.code,
            "error_kind": self.error_kind,
            "detail": self.detail,
        })
        return base_dict
