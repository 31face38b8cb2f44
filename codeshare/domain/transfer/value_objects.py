"""
Transfer Value Objects

Immutable value objects exchanged between the sessions and the transfer
gateway.
"""

import mimetypes
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Mapping, Union

from ..errors import (
    InvalidDownloadTokenError,
    InvalidShareCodeError,
    MalformedResponseError,
)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
SHARE_CODE_LENGTH = 8
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class TransferOperation(Enum):
    """The three network operations performed against the share server."""
    UPLOAD = "upload"
    METADATA = "metadata"
    DOWNLOAD = "download"


@dataclass(frozen=True)
class ShareCode:
    """
    Value object representing an issued share code.

    Codes are 8 characters, uppercase. Input is normalized by uppercasing
    only; nothing is stripped.
    """
    value: str

    def __post_init__(self):
        normalized = self.normalize(self.value)
        if len(normalized) != SHARE_CODE_LENGTH:
            raise InvalidShareCodeError(
                f"Share code must be {SHARE_CODE_LENGTH} characters, got {len(normalized)}"
            )
        object.__setattr__(self, "value", normalized)

    @staticmethod
    def normalize(raw: str) -> str:
        return (raw or "").upper()

    @classmethod
    def is_valid(cls, raw: str) -> bool:
        return len(cls.normalize(raw)) == SHARE_CODE_LENGTH

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DownloadToken:
    """
    Value object representing a single-use download token.

    The token is embedded in the download URL path, so it must be non-empty
    and free of slashes and whitespace.
    """
    value: str

    def __post_init__(self):
        if not self._is_valid():
            raise InvalidDownloadTokenError(f"Invalid download token: {self.value!r}")

    def _is_valid(self) -> bool:
        if not self.value or not isinstance(self.value, str):
            return False
        return not any(c == "/" or c.isspace() for c in self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CandidateFile:
    """
    A user-selected file waiting to be uploaded.

    ``source`` is the raw bytes, an open binary file object, or a local
    path. Size and content type are the values declared at selection time.
    """
    source: Union[bytes, BinaryIO, Path] = field(repr=False)
    name: str
    size: int
    content_type: str = DEFAULT_CONTENT_TYPE

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "CandidateFile":
        """
        Build a candidate from a local file.

        The file is opened lazily by the gateway; only its path is held here.
        """
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            source=path,
            name=path.name,
            size=path.stat().st_size,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
        )

    def exceeds_limit(self, limit: int = MAX_UPLOAD_BYTES) -> bool:
        return self.size > limit


@dataclass(frozen=True)
class UploadReceipt:
    """Server acknowledgement of a successful upload."""
    code: ShareCode
    filename: str

    @classmethod
    def from_dict(cls, data: Any) -> "UploadReceipt":
        try:
            return cls(code=ShareCode(data["code"]), filename=str(data.get("filename") or ""))
        except (KeyError, TypeError, AttributeError, InvalidShareCodeError) as e:
            raise MalformedResponseError(f"Invalid upload response: {e}", e)


def _parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class FileMetadata:
    """
    Server-reported snapshot of the file behind a share code.

    Replaced wholesale on every lookup; never patched.
    """
    filename: str
    size: int
    content_type: str
    created_at: datetime
    download_token: DownloadToken

    @classmethod
    def from_dict(cls, data: Any) -> "FileMetadata":
        """
        Create FileMetadata from a decoded JSON response.

        Raises:
            MalformedResponseError: If a field is missing or invalid
        """
        try:
            return cls(
                filename=str(data["filename"]),
                size=int(data["size"]),
                content_type=str(data.get("content_type") or DEFAULT_CONTENT_TYPE),
                created_at=_parse_timestamp(str(data["created_at"])),
                download_token=DownloadToken(data["download_token"]),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedResponseError(f"Invalid file metadata: {e}", e)

    def to_dict(self) -> dict:
        return {
            "filename": self.filename,
            "size": self.size,
            "content_type": self.content_type,
            "created_at": self.created_at.isoformat(),
            "download_token": str(self.download_token),
        }


class _CaseInsensitiveHeaders(dict):
    def get(self, key, default=None):
        return super().get(key.lower(), default)

    def __getitem__(self, key):
        return super().__getitem__(key.lower())

    def __contains__(self, key):
        return super().__contains__(key.lower())


@dataclass(frozen=True)
class FilePayload:
    """Raw bytes of a downloaded file plus the response headers."""
    content: bytes = field(repr=False)
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(
            self,
            "headers",
            _CaseInsensitiveHeaders((k.lower(), v) for k, v in dict(self.headers).items()),
        )

    @property
    def size(self) -> int:
        return len(self.content)

    def header(self, name: str) -> Any:
        return self.headers.get(name)
