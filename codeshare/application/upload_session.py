"""
Upload Session

State machine owning one candidate file from selection through share-code
issuance.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional, Union

from codeshare.domain.errors import CANCELLED_DETAIL, ErrorKind, SessionError, TransferFailure
from codeshare.domain.events import (
    FileSelectedEvent,
    OperationRejectedEvent,
    SessionStateChangedEvent,
    UploadFailedEvent,
    UploadProgressUpdatedEvent,
    UploadStartedEvent,
    UploadSucceededEvent,
)
from codeshare.domain.sessions import OperationResult, UploadPhase, UploadState
from codeshare.domain.transfer import (
    MAX_UPLOAD_BYTES,
    CandidateFile,
    ErrorClassifier,
    ITransferGateway,
    TransferOperation,
)
from codeshare.domain.transfer.value_objects import DEFAULT_CONTENT_TYPE

from .event_publisher import EventPublisher

logger = logging.getLogger(__name__)


class UploadSession:
    """
    Upload session state machine.

    Phases: IDLE -> FILE_SELECTED -> UPLOADING -> SUCCEEDED | FAILED.

    Rules:
    - Files larger than the upload limit are refused at selection
    - At most one submit() is in flight; further calls are rejected
    - Success clears the candidate so a stale reference is never resubmitted
    - Failure keeps the candidate so the user can retry without reselecting

    Operations never raise; callers observe ``state`` and the returned
    OperationResult.
    """

    session_type = "upload"

    def __init__(
        self,
        gateway: ITransferGateway,
        event_publisher: Optional[EventPublisher] = None,
        classifier: Optional[ErrorClassifier] = None,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        session_id: Optional[str] = None,
    ):
        """
        Initialize the session.

        Args:
            gateway: Transfer gateway performing the upload
            event_publisher: Receives state-change and lifecycle events
            classifier: Error classifier (a default instance when omitted)
            max_upload_bytes: Largest accepted declared file size
            session_id: Identifier used as the aggregate ID of events
        """
        self.session_id = session_id or str(uuid.uuid4())
        self._gateway = gateway
        self._publisher = event_publisher or EventPublisher()
        self._classifier = classifier or ErrorClassifier()
        self._max_upload_bytes = max_upload_bytes
        self._state = UploadState()
        self._attempt = 0

    @property
    def state(self) -> UploadState:
        return self._state

    def select_file(
        self,
        blob: Union[bytes, BinaryIO, Path],
        declared_name: str,
        declared_size: int,
        declared_type: Optional[str] = None,
    ) -> OperationResult:
        """
        Offer a file for upload.

        Any previous outcome is cleared. An oversized file is refused with
        FILE_TOO_LARGE and the previously held candidate, if any, is kept.
        """
        if self._state.phase is UploadPhase.UPLOADING:
            return self._reject("select_file", ErrorKind.INVALID_STATE)

        candidate = CandidateFile(
            source=blob,
            name=declared_name,
            size=declared_size,
            content_type=declared_type or DEFAULT_CONTENT_TYPE,
        )
        if candidate.exceeds_limit(self._max_upload_bytes):
            logger.info(
                f"Session {self.session_id}: refused {declared_name} "
                f"({declared_size} bytes exceeds {self._max_upload_bytes})"
            )
            return self._refuse_selection(SessionError(kind=ErrorKind.FILE_TOO_LARGE))

        self._transition(UploadState(phase=UploadPhase.FILE_SELECTED, candidate=candidate))
        self._publish(FileSelectedEvent, filename=candidate.name, size=candidate.size)
        return OperationResult.succeeded()

    def select_path(self, path: Union[str, Path]) -> OperationResult:
        """Select a local file by path."""
        try:
            candidate = CandidateFile.from_path(path)
        except OSError as e:
            logger.warning(f"Session {self.session_id}: cannot read {path}: {e}")
            if self._state.phase is UploadPhase.UPLOADING:
                return self._reject("select_path", ErrorKind.INVALID_STATE)
            return self._refuse_selection(SessionError(kind=ErrorKind.UNKNOWN, detail=str(e)))

        return self.select_file(
            candidate.source, candidate.name, candidate.size, candidate.content_type
        )

    def remove_selection(self) -> OperationResult:
        """Drop the selected file; valid only from FILE_SELECTED."""
        if self._state.phase is not UploadPhase.FILE_SELECTED:
            return self._reject("remove_selection", ErrorKind.INVALID_STATE)

        self._transition(UploadState())
        return OperationResult.succeeded()

    async def submit(self) -> OperationResult:
        """
        Upload the held candidate.

        Valid from FILE_SELECTED, or from FAILED while the candidate is still
        held. Rejected with INVALID_STATE otherwise, including while another
        submit is in flight.
        """
        state = self._state
        if state.candidate is None or state.phase not in (
            UploadPhase.FILE_SELECTED,
            UploadPhase.FAILED,
        ):
            return self._reject("submit", ErrorKind.INVALID_STATE)

        candidate = state.candidate
        self._attempt += 1
        attempt = self._attempt

        # Transition before the first await so a concurrent submit sees UPLOADING
        self._transition(
            state.evolve(phase=UploadPhase.UPLOADING, progress=0, error=None, receipt=None)
        )
        self._publish(UploadStartedEvent, filename=candidate.name, size=candidate.size)

        try:
            receipt = await self._gateway.issue_upload(
                candidate, lambda percent: self._on_progress(attempt, percent)
            )
        except asyncio.CancelledError:
            # Leave a retryable state behind; the candidate stays held
            self._fail(SessionError(kind=ErrorKind.UNKNOWN, detail=CANCELLED_DETAIL))
            raise
        except TransferFailure as failure:
            return self._fail(self._classifier.describe(failure, TransferOperation.UPLOAD))
        except Exception as e:
            logger.error(f"Session {self.session_id}: unexpected upload error: {e}", exc_info=True)
            return self._fail(SessionError(kind=ErrorKind.UNKNOWN, detail=str(e) or None))

        self._transition(
            UploadState(phase=UploadPhase.SUCCEEDED, progress=100, receipt=receipt)
        )
        self._publish(UploadSucceededEvent, code=str(receipt.code), filename=receipt.filename)
        return OperationResult.succeeded()

    def _on_progress(self, attempt: int, percent: int) -> None:
        if attempt != self._attempt or self._state.phase is not UploadPhase.UPLOADING:
            return

        # Clamp to 0..100 and never move backwards
        percent = max(self._state.progress, min(100, max(0, int(percent))))
        if percent == self._state.progress:
            return

        self._transition(self._state.evolve(progress=percent))
        self._publish(UploadProgressUpdatedEvent, percentage=percent)

    def _refuse_selection(self, error: SessionError) -> OperationResult:
        # Prior outcome is cleared; a previously selected file stays selected
        held = self._state.candidate
        self._transition(
            UploadState(
                phase=UploadPhase.FILE_SELECTED if held else UploadPhase.IDLE,
                candidate=held,
                error=error,
            )
        )
        return OperationResult.failed(error)

    def _fail(self, error: SessionError) -> OperationResult:
        logger.warning(
            f"Session {self.session_id}: upload failed ({error.kind.value}"
            f"{': ' + error.detail if error.detail else ''})"
        )
        self._transition(
            self._state.evolve(phase=UploadPhase.FAILED, progress=0, error=error)
        )
        self._publish(UploadFailedEvent, error_kind=error.kind.value, detail=error.detail)
        return OperationResult.failed(error)

    def _reject(
        self, operation: str, kind: ErrorKind, detail: Optional[str] = None
    ) -> OperationResult:
        logger.debug(
            f"Session {self.session_id}: {operation} rejected ({kind.value}) "
            f"in phase {self._state.phase.value}"
        )
        self._publish(
            OperationRejectedEvent,
            operation=operation,
            error_kind=kind.value,
            phase=self._state.phase.value,
        )
        return OperationResult.rejected(kind, detail)

    def _transition(self, new_state: UploadState) -> None:
        self._state = new_state
        self._publish(SessionStateChangedEvent, session_type=self.session_type, state=new_state)

    def _publish(self, event_class, **fields) -> None:
        self._publisher.publish(
            event_class(aggregate_id=self.session_id, occurred_at=datetime.utcnow(), **fields)
        )
