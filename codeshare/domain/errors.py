"""
Error Handling Module

Defines the closed error taxonomy surfaced to the UI layer, the user-facing
messages for each category, and the domain exceptions raised at the
transfer boundary.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Closed set of user-facing failure categories."""

    FILE_TOO_LARGE = "file_too_large"
    INVALID_STATE = "invalid_state"
    INVALID_CODE = "invalid_code"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    LINK_INVALID = "link_invalid"
    ALREADY_EXPIRED = "already_expired"
    SERVER_ERROR = "server_error"
    EMPTY_PAYLOAD = "empty_payload"
    UNKNOWN = "unknown"

# Detail recorded when an in-flight transfer is cancelled by its caller
CANCELLED_DETAIL = "Transfer cancelled"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorKind, Dict[str, str]] = {
    ErrorKind.FILE_TOO_LARGE: {
        "title": "File Too Large",
        "message": "File size must be less than 50MB.",
        "action": "Choose a smaller file or compress it before sharing.",
    },
    ErrorKind.INVALID_STATE: {
        "title": "Action Not Available",
        "message": "This action is not available right now.",
        "action": "Wait for the current operation to finish and try again.",
    },
    ErrorKind.INVALID_CODE: {
        "title": "Invalid Code",
        "message": "Please enter a valid 8-character code.",
        "action": "Check the code you were given and type it again.",
    },
    ErrorKind.NOT_FOUND: {
        "title": "File Not Found",
        "message": "File not found. Please check your 8-character code and try again.",
        "action": "Make sure the code was typed correctly.",
    },
    ErrorKind.EXPIRED: {
        "title": "File Expired",
        "message": "File has expired and is no longer available. Files auto-delete 2 minutes after download.",
        "action": "Ask the sender to upload the file again.",
    },
    ErrorKind.LINK_INVALID: {
        "title": "Download Link Invalid",
        "message": "Download link is invalid or expired.",
        "action": "Please request a new sharing code.",
    },
    ErrorKind.ALREADY_EXPIRED: {
        "title": "Already Downloaded",
        "message": "This file has already been downloaded and expired (files auto-delete 2 minutes after download).",
        "action": "Please request a new upload if you need the file again.",
    },
    ErrorKind.SERVER_ERROR: {
        "title": "Server Error",
        "message": "Server error. The file may have been moved or deleted.",
        "action": "Please try again later.",
    },
    ErrorKind.EMPTY_PAYLOAD: {
        "title": "Empty File Received",
        "message": "Received empty file.",
        "action": "Please look up the code again and retry the download.",
    },
    ErrorKind.UNKNOWN: {
        "title": "Something Went Wrong",
        "message": "The request could not be completed.",
        "action": "Please try again. If the problem persists, contact support.",
    },
}


@dataclass(frozen=True)
class SessionError:
    """
    Classified failure stored in session state.

    Attributes:
        kind: Error category
        detail: Optional server-provided or technical detail
        status_code: HTTP status code when the failure came from a response
    """

    kind: ErrorKind
    detail: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def title(self) -> str:
        return ERROR_MESSAGES[self.kind]["title"]

    @property
    def message(self) -> str:
        return ERROR_MESSAGES[self.kind]["message"]

    @property
    def action(self) -> str:
        return ERROR_MESSAGES[self.kind]["action"]

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for rendering."""
        return {
            "error": self.kind.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
            "detail": self.detail,
            "status_code": self.status_code,
        }


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Can optionally wrap the original error for context.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error


class TransferFailure(DomainError):
    """
    Raised by a transfer gateway when a network operation does not succeed.

    Gateways report raw outcomes only; interpretation belongs to the
    ErrorClassifier.
    """
    pass


class HttpStatusFailure(TransferFailure):
    """Raised when the server answered with a non-success status code."""

    def __init__(
        self,
        status_code: int,
        body: Any = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(f"HTTP {status_code}", original_error)
        self.status_code = status_code
        self.body = body


class TransportFailure(TransferFailure):
    """Raised when no response reached the client."""
    pass


class MalformedResponseError(TransferFailure):
    """Raised when a success response cannot be parsed into domain values."""
    pass


class InvalidShareCodeError(ValueError):
    """Raised when a share code is not exactly 8 characters."""
    pass


class InvalidDownloadTokenError(ValueError):
    """Raised when a download token is invalid."""
    pass
