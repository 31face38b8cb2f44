"""
Client Configuration

Reads share-server connection settings and local paths from the
environment.
"""

import os
from pathlib import Path

from codeshare.domain.transfer import MAX_UPLOAD_BYTES


class ClientConfig:
    """Client configuration settings."""

    def __init__(self):
        self.api_base_url = os.getenv("CODESHARE_API_BASE_URL", "http://localhost:8000/api").rstrip("/")
        self.http_timeout = float(os.getenv("CODESHARE_HTTP_TIMEOUT", 30))
        self.upload_timeout = float(os.getenv("CODESHARE_UPLOAD_TIMEOUT", 300))
        self.max_upload_bytes = int(os.getenv("CODESHARE_MAX_UPLOAD_BYTES", MAX_UPLOAD_BYTES))
        self.download_dir = Path(os.getenv("CODESHARE_DOWNLOAD_DIR", ".")).expanduser()
        self.log_level = os.getenv("CODESHARE_LOG_LEVEL", "WARNING").upper()

    def to_dict(self) -> dict:
        return {
            "api_base_url": self.api_base_url,
            "http_timeout": self.http_timeout,
            "upload_timeout": self.upload_timeout,
            "max_upload_bytes": self.max_upload_bytes,
            "download_dir": str(self.download_dir),
            "log_level": self.log_level,
        }
