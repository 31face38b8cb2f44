"""
Retrieval Session

State machine driving the two-step "inspect then download" protocol for one
share code. A download token is used for at most one download attempt: any
download outcome discards the metadata, so another attempt needs a fresh
lookup.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Optional

from codeshare.domain.errors import CANCELLED_DETAIL, ErrorKind, SessionError, TransferFailure
from codeshare.domain.events import (
    DownloadCompletedEvent,
    DownloadFailedEvent,
    DownloadStartedEvent,
    MetadataFetchedEvent,
    MetadataFetchFailedEvent,
    OperationRejectedEvent,
    SessionStateChangedEvent,
)
from codeshare.domain.sessions import OperationResult, RetrievalPhase, RetrievalState
from codeshare.domain.transfer import (
    ErrorClassifier,
    IFileSaver,
    ITransferGateway,
    ShareCode,
    TransferOperation,
    resolve_download_filename,
)

from .event_publisher import EventPublisher

logger = logging.getLogger(__name__)


class RetrievalSession:
    """
    Retrieval session state machine.

    Phases: IDLE -> CODE_ENTERED -> FETCHING_METADATA -> METADATA_READY
    -> DOWNLOADING -> COMPLETED | FAILED.

    Entering a code from any phase resets the session and makes any pending
    operation stale; a stale operation's outcome never reaches ``state``.
    """

    session_type = "retrieval"

    def __init__(
        self,
        gateway: ITransferGateway,
        file_saver: IFileSaver,
        event_publisher: Optional[EventPublisher] = None,
        classifier: Optional[ErrorClassifier] = None,
        initial_code: str = "",
        session_id: Optional[str] = None,
    ):
        """
        Initialize the session.

        Args:
            gateway: Transfer gateway for metadata and file fetches
            file_saver: Host facility that persists received files
            event_publisher: Receives state-change and lifecycle events
            classifier: Error classifier (a default instance when omitted)
            initial_code: Code to pre-fill, e.g. one just issued by an upload
            session_id: Identifier used as the aggregate ID of events
        """
        self.session_id = session_id or str(uuid.uuid4())
        self._gateway = gateway
        self._file_saver = file_saver
        self._publisher = event_publisher or EventPublisher()
        self._classifier = classifier or ErrorClassifier()
        self._state = RetrievalState()
        self._generation = 0

        if initial_code:
            self.set_code(initial_code)

    @property
    def state(self) -> RetrievalState:
        return self._state

    def set_code(self, raw_input: str) -> OperationResult:
        """
        Store a new candidate code.

        The input is uppercased and otherwise kept as typed. Held metadata,
        errors and the last saved file are discarded. Length is not checked
        here; fetch_metadata() refuses codes that are not 8 characters.
        """
        code = ShareCode.normalize(raw_input)
        self._generation += 1

        self._transition(
            RetrievalState(
                phase=RetrievalPhase.CODE_ENTERED if code else RetrievalPhase.IDLE,
                code=code,
            )
        )
        return OperationResult.succeeded()

    async def fetch_metadata(self) -> OperationResult:
        """
        Look up metadata for the current code.

        404 -> NOT_FOUND, 410 -> EXPIRED, anything else -> UNKNOWN.
        """
        state = self._state
        if state.phase.is_in_flight():
            return self._reject("fetch_metadata", ErrorKind.INVALID_STATE)

        if not ShareCode.is_valid(state.code):
            error = SessionError(kind=ErrorKind.INVALID_CODE)
            self._transition(
                state.evolve(
                    phase=RetrievalPhase.FAILED,
                    metadata=None,
                    error=error,
                    saved_filename=None,
                    saved_path=None,
                )
            )
            return OperationResult.failed(error)

        code = ShareCode(state.code)
        generation = self._generation
        self._transition(
            state.evolve(
                phase=RetrievalPhase.FETCHING_METADATA,
                metadata=None,
                error=None,
                saved_filename=None,
                saved_path=None,
            )
        )

        try:
            metadata = await self._gateway.fetch_metadata(code)
        except asyncio.CancelledError:
            if not self._is_stale(generation, "fetch_metadata"):
                self._transition(
                    self._state.evolve(
                        phase=RetrievalPhase.FAILED,
                        metadata=None,
                        error=SessionError(kind=ErrorKind.UNKNOWN, detail=CANCELLED_DETAIL),
                    )
                )
            raise
        except TransferFailure as failure:
            error = self._classifier.describe(failure, TransferOperation.METADATA)
        except Exception as e:
            logger.error(
                f"Session {self.session_id}: unexpected metadata error: {e}", exc_info=True
            )
            error = SessionError(kind=ErrorKind.UNKNOWN, detail=str(e) or None)
        else:
            if self._is_stale(generation, "fetch_metadata"):
                return OperationResult.rejected(
                    ErrorKind.INVALID_STATE, detail="superseded by a new code"
                )
            self._transition(
                self._state.evolve(phase=RetrievalPhase.METADATA_READY, metadata=metadata)
            )
            self._publish(
                MetadataFetchedEvent,
                code=str(code),
                filename=metadata.filename,
                size=metadata.size,
            )
            return OperationResult.succeeded()

        if self._is_stale(generation, "fetch_metadata"):
            return OperationResult.failed(error)

        logger.warning(
            f"Session {self.session_id}: metadata lookup for {code} failed ({error.kind.value})"
        )
        self._transition(
            self._state.evolve(phase=RetrievalPhase.FAILED, metadata=None, error=error)
        )
        self._publish(
            MetadataFetchFailedEvent,
            code=str(code),
            error_kind=error.kind.value,
            detail=error.detail,
        )
        return OperationResult.failed(error)

    async def download(self) -> OperationResult:
        """
        Download the file described by the held metadata.

        Valid only from METADATA_READY. On success the payload is handed to
        the file saver and both code and metadata are cleared. On any
        failure the metadata is cleared and the code kept, so a new lookup
        is needed before retrying.
        """
        state = self._state
        if state.phase is not RetrievalPhase.METADATA_READY or state.metadata is None:
            return self._reject("download", ErrorKind.INVALID_STATE)

        code = ShareCode(state.code)
        metadata = state.metadata
        generation = self._generation
        self._transition(state.evolve(phase=RetrievalPhase.DOWNLOADING, error=None))
        self._publish(DownloadStartedEvent, code=str(code), filename=metadata.filename)

        try:
            payload = await self._gateway.fetch_file(code, metadata.download_token)
        except asyncio.CancelledError:
            # The token may already be spent, so a new lookup is required
            self._fail_download(
                generation, code, SessionError(kind=ErrorKind.UNKNOWN, detail=CANCELLED_DETAIL)
            )
            raise
        except TransferFailure as failure:
            return self._fail_download(
                generation, code, self._classifier.describe(failure, TransferOperation.DOWNLOAD)
            )
        except Exception as e:
            logger.error(
                f"Session {self.session_id}: unexpected download error: {e}", exc_info=True
            )
            return self._fail_download(
                generation, code, SessionError(kind=ErrorKind.UNKNOWN, detail=str(e) or None)
            )

        if payload.size == 0:
            return self._fail_download(
                generation, code, SessionError(kind=ErrorKind.EMPTY_PAYLOAD)
            )

        filename = resolve_download_filename(
            payload.header("content-disposition"), metadata.filename
        )

        # The staged handle is released when the context exits, on every path
        try:
            with self._file_saver.stage(payload.content) as staged:
                saved_path = self._file_saver.save(staged, filename)
        except Exception as e:
            logger.error(
                f"Session {self.session_id}: saving {filename} failed: {e}", exc_info=True
            )
            return self._fail_download(
                generation, code, SessionError(kind=ErrorKind.UNKNOWN, detail=str(e) or None)
            )

        if not self._is_stale(generation, "download"):
            self._transition(
                RetrievalState(
                    phase=RetrievalPhase.COMPLETED,
                    saved_filename=filename,
                    saved_path=saved_path,
                )
            )
        self._publish(
            DownloadCompletedEvent,
            code=str(code),
            filename=filename,
            saved_path=str(saved_path),
            size=payload.size,
        )
        return OperationResult.succeeded()

    def _fail_download(
        self, generation: int, code: ShareCode, error: SessionError
    ) -> OperationResult:
        logger.warning(
            f"Session {self.session_id}: download for {code} failed ({error.kind.value})"
        )
        if not self._is_stale(generation, "download"):
            self._transition(
                self._state.evolve(phase=RetrievalPhase.FAILED, metadata=None, error=error)
            )
        self._publish(
            DownloadFailedEvent,
            code=str(code),
            error_kind=error.kind.value,
            detail=error.detail,
        )
        return OperationResult.failed(error)

    def _is_stale(self, generation: int, operation: str) -> bool:
        if generation == self._generation:
            return False
        logger.info(
            f"Session {self.session_id}: discarding {operation} result for a replaced code"
        )
        return True

    def _reject(self, operation: str, kind: ErrorKind) -> OperationResult:
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
        return OperationResult.rejected(kind)

    def _transition(self, new_state: RetrievalState) -> None:
        self._state = new_state
        self._publish(SessionStateChangedEvent, session_type=self.session_type, state=new_state)

    def _publish(self, event_class, **fields) -> None:
        self._publisher.publish(
            event_class(aggregate_id=self.session_id, occurred_at=datetime.utcnow(), **fields)
        )
