"""
HTTP Transfer Gateway

httpx implementation of ITransferGateway against the share server's REST
endpoints:

    POST {base}/upload/                     multipart, field "file"
    GET  {base}/file/{code}/                metadata lookup
    GET  {base}/download/{code}/{token}/    file bytes, sent without cookies

Outcomes are reported raw: non-2xx responses raise HttpStatusFailure,
connection problems raise TransportFailure. Status codes are not
interpreted here.
"""

import io
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, BinaryIO, Iterator, Optional
from urllib.parse import quote

import httpx

from codeshare.config.client_config import ClientConfig
from codeshare.domain.errors import (
    HttpStatusFailure,
    MalformedResponseError,
    TransportFailure,
)
from codeshare.domain.transfer import (
    CandidateFile,
    DownloadToken,
    FileMetadata,
    FilePayload,
    ITransferGateway,
    ProgressCallback,
    ShareCode,
    UploadReceipt,
)

logger = logging.getLogger(__name__)


class ProgressReader:
    """
    Binary file wrapper that reports read progress as a percentage.

    httpx pulls multipart file fields through read(); each chunk advances
    the count. End of file always reports 100.
    """

    def __init__(self, fileobj: BinaryIO, total: int, on_progress: ProgressCallback):
        self._file = fileobj
        self._total = total
        self._on_progress = on_progress
        self._sent = 0
        self._last_percent = -1

    def read(self, size: int = -1) -> bytes:
        chunk = self._file.read(size)
        if chunk:
            self._sent += len(chunk)
            if self._total > 0:
                self._report(min(100, self._sent * 100 // self._total))
        else:
            self._report(100)
        return chunk

    def tell(self) -> int:
        return self._file.tell()

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        position = self._file.seek(offset, whence)
        if whence == os.SEEK_SET:
            self._sent = offset
        return position

    def _report(self, percent: int) -> None:
        if percent == self._last_percent:
            return
        self._last_percent = percent
        self._on_progress(percent)


@contextmanager
def _open_source(source: Any) -> Iterator[BinaryIO]:
    if isinstance(source, (bytes, bytearray)):
        yield io.BytesIO(source)
    elif isinstance(source, (str, Path)):
        with open(source, "rb") as fileobj:
            yield fileobj
    else:
        # Caller-owned file object; left open
        yield source


class HttpTransferGateway(ITransferGateway):
    """ITransferGateway implementation using an httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        upload_timeout: float = 300.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the gateway.

        Args:
            base_url: API root, e.g. http://localhost:8000/api
            timeout: Timeout in seconds for metadata and download requests
            upload_timeout: Timeout in seconds for upload requests
            client: Pre-built client (tests pass one with a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.upload_timeout = httpx.Timeout(upload_timeout)
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @classmethod
    def from_config(cls, config: ClientConfig) -> "HttpTransferGateway":
        return cls(
            base_url=config.api_base_url,
            timeout=config.http_timeout,
            upload_timeout=config.upload_timeout,
        )

    async def issue_upload(
        self, candidate: CandidateFile, on_progress: ProgressCallback
    ) -> UploadReceipt:
        url = f"{self.base_url}/upload/"
        logger.info(f"Uploading {candidate.name} ({candidate.size} bytes)")

        with _open_source(candidate.source) as fileobj:
            reader = ProgressReader(fileobj, candidate.size, on_progress)
            files = {"file": (candidate.name, reader, candidate.content_type)}
            request = self._client.build_request(
                "POST", url, files=files, timeout=self.upload_timeout
            )
            response = await self._send(request)

        return UploadReceipt.from_dict(self._json(response))

    async def fetch_metadata(self, code: ShareCode) -> FileMetadata:
        url = f"{self.base_url}/file/{quote(str(code), safe='')}/"
        response = await self._send(self._client.build_request("GET", url))
        return FileMetadata.from_dict(self._json(response))

    async def fetch_file(self, code: ShareCode, token: DownloadToken) -> FilePayload:
        url = (
            f"{self.base_url}/download/"
            f"{quote(str(code), safe='')}/{quote(str(token), safe='')}/"
        )
        request = self._client.build_request("GET", url)
        # Downloads are sent without credentials
        request.headers.pop("Cookie", None)

        response = await self._send(request)
        return FilePayload(content=response.content, headers=dict(response.headers))

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpTransferGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            response = await self._client.send(request)
        except httpx.HTTPError as e:
            logger.warning(f"{request.method} {request.url} failed: {e}")
            raise TransportFailure(f"{type(e).__name__}: {e}", e)

        logger.debug(f"{request.method} {request.url} -> {response.status_code}")

        if not response.is_success:
            raise HttpStatusFailure(response.status_code, _decode_body(response))

        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Response is not JSON: {e}", e)


def _decode_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None
