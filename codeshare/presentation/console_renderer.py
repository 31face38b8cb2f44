"""
Console Renderer

Passive text renderer for terminal use. It subscribes to
SessionStateChangedEvent and redraws from the snapshot; it never calls back
into a session.
"""

import sys
from typing import Dict, Optional, TextIO

from codeshare.application.event_publisher import EventPublisher
from codeshare.domain.errors import SessionError
from codeshare.domain.events import SessionStateChangedEvent
from codeshare.domain.sessions import RetrievalPhase, RetrievalState, UploadPhase, UploadState

from .formatting import file_icon, format_file_size, format_timestamp

PROGRESS_STEP = 10


class ConsoleRenderer:
    """Writes session state changes to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self._last_progress: Dict[str, int] = {}

    def attach(self, publisher: EventPublisher) -> None:
        publisher.subscribe(SessionStateChangedEvent, self.render)

    def detach(self, publisher: EventPublisher) -> None:
        publisher.unsubscribe(SessionStateChangedEvent, self.render)

    def render(self, event: SessionStateChangedEvent) -> None:
        state = event.state
        if isinstance(state, UploadState):
            self._render_upload(event.aggregate_id, state)
        elif isinstance(state, RetrievalState):
            self._render_retrieval(state)

    def _render_upload(self, session_id: str, state: UploadState) -> None:
        phase = state.phase

        if phase is UploadPhase.UPLOADING:
            # Only print every PROGRESS_STEP percent
            step = state.progress - state.progress % PROGRESS_STEP
            if state.progress == 0 or step != self._last_progress.get(session_id):
                self._last_progress[session_id] = step
                self._write(f"Uploading... {state.progress}%")
            return

        self._last_progress.pop(session_id, None)

        if phase is UploadPhase.FILE_SELECTED and state.candidate and not state.error:
            candidate = state.candidate
            self._write(
                f"{file_icon(candidate.name)} {candidate.name} "
                f"({format_file_size(candidate.size)})"
            )
        elif phase is UploadPhase.SUCCEEDED and state.receipt:
            self._write("File uploaded successfully!")
            self._write(f"Share code: {state.receipt.code}")
            self._write("Share this code with the recipient. It works for a single download.")

        if state.error:
            self._write_error(state.error)

    def _render_retrieval(self, state: RetrievalState) -> None:
        phase = state.phase

        if phase is RetrievalPhase.FETCHING_METADATA:
            self._write(f"Looking up {state.code}...")
        elif phase is RetrievalPhase.METADATA_READY and state.metadata:
            metadata = state.metadata
            self._write(f"{file_icon(metadata.filename)} {metadata.filename}")
            self._write(f"  Size: {format_file_size(metadata.size)}")
            self._write(f"  Type: {metadata.content_type}")
            self._write(f"  Uploaded: {format_timestamp(metadata.created_at)}")
        elif phase is RetrievalPhase.DOWNLOADING:
            self._write("Downloading...")
        elif phase is RetrievalPhase.COMPLETED:
            self._write(f"File downloaded successfully! Saved to {state.saved_path}")
            self._write("The share code expires 2 minutes after download.")
        elif phase is RetrievalPhase.FAILED and state.error:
            self._write_error(state.error)

    def _write_error(self, error: SessionError) -> None:
        line = f"Error - {error.title}: {error.message}"
        if error.detail:
            line += f" ({error.detail})"
        self._write(line)
        self._write(f"  {error.action}")

    def _write(self, text: str) -> None:
        self.stream.write(text + "\n")
        self.stream.flush()
