"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Sessions remain unaware of logging configuration; they only publish events.
"""

import logging

from codeshare.domain.events import (
    DomainEvent,
    DownloadCompletedEvent,
    DownloadFailedEvent,
    DownloadStartedEvent,
    FileSelectedEvent,
    MetadataFetchedEvent,
    MetadataFetchFailedEvent,
    OperationRejectedEvent,
    SessionStateChangedEvent,
    UploadFailedEvent,
    UploadProgressUpdatedEvent,
    UploadStartedEvent,
    UploadSucceededEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    Subscribe ``handle`` to DomainEvent to log every session transition.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, SessionStateChangedEvent):
                self._handle_state_changed(event)
            elif isinstance(event, FileSelectedEvent):
                self._handle_file_selected(event)
            elif isinstance(event, UploadStartedEvent):
                self._handle_upload_started(event)
            elif isinstance(event, UploadProgressUpdatedEvent):
                self._handle_upload_progress(event)
            elif isinstance(event, UploadSucceededEvent):
                self._handle_upload_succeeded(event)
            elif isinstance(event, UploadFailedEvent):
                self._handle_upload_failed(event)
            elif isinstance(event, MetadataFetchedEvent):
                self._handle_metadata_fetched(event)
            elif isinstance(event, MetadataFetchFailedEvent):
                self._handle_metadata_failed(event)
            elif isinstance(event, DownloadStartedEvent):
                self._handle_download_started(event)
            elif isinstance(event, DownloadCompletedEvent):
                self._handle_download_completed(event)
            elif isinstance(event, DownloadFailedEvent):
                self._handle_download_failed(event)
            elif isinstance(event, OperationRejectedEvent):
                self._handle_operation_rejected(event)
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id})"
                )
        except Exception as e:
            # Log handler errors but don't fail the operation
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_state_changed(self, event: SessionStateChangedEvent) -> None:
        self.logger.debug(
            f"{event.session_type.capitalize()} session {event.aggregate_id} "
            f"-> {event.state.phase.value}"
        )

    def _handle_file_selected(self, event: FileSelectedEvent) -> None:
        self.logger.info(
            f"File selected: session={event.aggregate_id}, "
            f"filename={event.filename}, size={event.size} bytes"
        )

    def _handle_upload_started(self, event: UploadStartedEvent) -> None:
        self.logger.info(
            f"Upload started: session={event.aggregate_id}, "
            f"filename={event.filename}, size={event.size} bytes"
        )

    def _handle_upload_progress(self, event: UploadProgressUpdatedEvent) -> None:
        self.logger.debug(
            f"Upload progress: session={event.aggregate_id}, percent={event.percentage}%"
        )

    def _handle_upload_succeeded(self, event: UploadSucceededEvent) -> None:
        self.logger.info(
            f"Upload succeeded: session={event.aggregate_id}, "
            f"code={event.code}, filename={event.filename}"
        )

    def _handle_upload_failed(self, event: UploadFailedEvent) -> None:
        self.logger.warning(
            f"Upload failed: session={event.aggregate_id}, "
            f"category={event.error_kind}, detail={event.detail}"
        )

    def _handle_metadata_fetched(self, event: MetadataFetchedEvent) -> None:
        self.logger.info(
            f"Metadata fetched: session={event.aggregate_id}, code={event.code}, "
            f"filename={event.filename}, size={event.size} bytes"
        )

    def _handle_metadata_failed(self, event: MetadataFetchFailedEvent) -> None:
        self.logger.warning(
            f"Metadata lookup failed: session={event.aggregate_id}, code={event.code}, "
            f"category={event.error_kind}, detail={event.detail}"
        )

    def _handle_download_started(self, event: DownloadStartedEvent) -> None:
        self.logger.info(
            f"Download started: session={event.aggregate_id}, "
            f"code={event.code}, filename={event.filename}"
        )

    def _handle_download_completed(self, event: DownloadCompletedEvent) -> None:
        self.logger.info(
            f"Download completed: session={event.aggregate_id}, code={event.code}, "
            f"saved_path={event.saved_path}, size={event.size} bytes"
        )

    def _handle_download_failed(self, event: DownloadFailedEvent) -> None:
        self.logger.warning(
            f"Download failed: session={event.aggregate_id}, code={event.code}, "
            f"category={event.error_kind}, detail={event.detail}"
        )

    def _handle_operation_rejected(self, event: OperationRejectedEvent) -> None:
        self.logger.debug(
            f"Operation rejected: session={event.aggregate_id}, "
            f"operation={event.operation}, category={event.error_kind}, phase={event.phase}"
        )
