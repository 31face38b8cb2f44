"""
Transfer Boundary Interfaces

Abstract contracts for the two collaborators the sessions talk to: the
network gateway that performs the three share-server operations, and the
host facility that persists a received file.

Keeping these as interfaces lets the sessions stay independent of the HTTP
client and of the filesystem, and lets tests substitute in-memory fakes.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, ContextManager

from .value_objects import (
    CandidateFile,
    DownloadToken,
    FileMetadata,
    FilePayload,
    ShareCode,
    UploadReceipt,
)

ProgressCallback = Callable[[int], None]


class ITransferGateway(ABC):
    """
    Network boundary for the share server.

    Contract Guarantees:
    - Methods return parsed success values only for 2xx responses
    - Non-2xx responses raise HttpStatusFailure carrying the status code and
      decoded body; no interpretation of the status is performed here
    - Connection problems raise TransportFailure
    - A 2xx response whose body cannot be parsed raises MalformedResponseError
    """

    @abstractmethod
    async def issue_upload(
        self, candidate: CandidateFile, on_progress: ProgressCallback
    ) -> UploadReceipt:
        """
        Submit a file and obtain a share code.

        Args:
            candidate: File to upload
            on_progress: Invoked zero or more times with a percentage (0-100)
                before the call resolves

        Returns:
            UploadReceipt with the issued code and stored filename
        """

    @abstractmethod
    async def fetch_metadata(self, code: ShareCode) -> FileMetadata:
        """
        Look up the file behind a share code.

        Returns:
            FileMetadata including a fresh single-use download token
        """

    @abstractmethod
    async def fetch_file(self, code: ShareCode, token: DownloadToken) -> FilePayload:
        """
        Fetch file bytes using a download token.

        Returns:
            FilePayload with content and response headers
        """


class StagedFile(ABC):
    """Transient handle holding received bytes until they are saved."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Number of staged bytes."""

    @property
    @abstractmethod
    def released(self) -> bool:
        """True once the handle has been released."""


class IFileSaver(ABC):
    """
    Host facility that persists a received file.

    Implementation Requirements:
    - stage(): Must release the handle when the context exits, on every path
    - save(): Must reduce the suggested filename to a safe basename and must
      not overwrite an existing file
    """

    @abstractmethod
    def stage(self, content: bytes) -> ContextManager[StagedFile]:
        """Stage content in a transient handle for the duration of the context."""

    @abstractmethod
    def save(self, staged: StagedFile, suggested_filename: str) -> Path:
        """
        Persist staged content.

        Returns:
            Path the file was written to
        """
