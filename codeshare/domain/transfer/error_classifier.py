"""
Error Classifier

Maps raw transfer outcomes to the closed ErrorKind taxonomy. Both sessions
go through this module so a status code means the same thing everywhere:
410 is always an expiry, 404 is always a missing file or an invalid link.
"""

from typing import Any, Optional

from ..errors import (
    ErrorKind,
    HttpStatusFailure,
    SessionError,
    TransferFailure,
)
from .value_objects import TransferOperation

_STATUS_KINDS = {
    TransferOperation.UPLOAD: {
        413: ErrorKind.FILE_TOO_LARGE,
    },
    TransferOperation.METADATA: {
        404: ErrorKind.NOT_FOUND,
        410: ErrorKind.EXPIRED,
    },
    TransferOperation.DOWNLOAD: {
        404: ErrorKind.LINK_INVALID,
        410: ErrorKind.ALREADY_EXPIRED,
    },
}

# Operations for which any 5xx status is reported as a server error.
_SERVER_ERROR_OPERATIONS = (TransferOperation.UPLOAD, TransferOperation.DOWNLOAD)


class ErrorClassifier:
    """
    Stateless mapping from transfer failures to error categories.

    Anything not explicitly enumerated (unexpected statuses, transport
    problems, malformed bodies) is classified as UNKNOWN.
    """

    def classify_status(self, status_code: int, operation: TransferOperation) -> ErrorKind:
        kind = _STATUS_KINDS[operation].get(status_code)
        if kind is not None:
            return kind
        if 500 <= status_code <= 599 and operation in _SERVER_ERROR_OPERATIONS:
            return ErrorKind.SERVER_ERROR
        return ErrorKind.UNKNOWN

    def classify(self, failure: TransferFailure, operation: TransferOperation) -> ErrorKind:
        if isinstance(failure, HttpStatusFailure):
            return self.classify_status(failure.status_code, operation)
        return ErrorKind.UNKNOWN

    def describe(self, failure: TransferFailure, operation: TransferOperation) -> SessionError:
        """
        Classify a failure and attach displayable detail.

        Detail is the server's ``error`` message when the body carries one,
        ``HTTP <status>`` for statuses outside the taxonomy, or the
        transport error text.
        """
        kind = self.classify(failure, operation)

        if isinstance(failure, HttpStatusFailure):
            detail = _server_message(failure.body)
            if detail is None and kind is ErrorKind.UNKNOWN:
                detail = f"HTTP {failure.status_code}"
            return SessionError(kind=kind, detail=detail, status_code=failure.status_code)

        # Transport and parse failures carry their own message
        return SessionError(kind=kind, detail=str(failure) or None)


def _server_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        message = body.get("error")
        if isinstance(message, str) and message:
            return message
    return None
