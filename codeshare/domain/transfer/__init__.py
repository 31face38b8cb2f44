"""
Transfer Domain

Value objects, boundary interfaces and error classification for the three
share-server operations: issue upload, fetch metadata, fetch file.
"""

from .content_disposition import (
    DEFAULT_DOWNLOAD_FILENAME,
    filename_from_content_disposition,
    resolve_download_filename,
)
from .error_classifier import ErrorClassifier
from .gateway import IFileSaver, ITransferGateway, ProgressCallback, StagedFile
from .value_objects import (
    MAX_UPLOAD_BYTES,
    SHARE_CODE_LENGTH,
    CandidateFile,
    DownloadToken,
    FileMetadata,
    FilePayload,
    ShareCode,
    TransferOperation,
    UploadReceipt,
)

__all__ = [
    "MAX_UPLOAD_BYTES",
    "SHARE_CODE_LENGTH",
    "DEFAULT_DOWNLOAD_FILENAME",
    "CandidateFile",
    "DownloadToken",
    "FileMetadata",
    "FilePayload",
    "ShareCode",
    "TransferOperation",
    "UploadReceipt",
    "ErrorClassifier",
    "IFileSaver",
    "ITransferGateway",
    "ProgressCallback",
    "StagedFile",
    "filename_from_content_disposition",
    "resolve_download_filename",
]
