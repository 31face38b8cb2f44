"""
Unit tests for HttpTransferGateway.

Requests are served by httpx.MockTransport, so no network is involved.
"""

import io

import httpx
import pytest

from codeshare.config.client_config import ClientConfig
from codeshare.domain.errors import (
    HttpStatusFailure,
    MalformedResponseError,
    TransportFailure,
)
from codeshare.domain.transfer import CandidateFile, DownloadToken, ShareCode
from codeshare.infrastructure.http_transfer_gateway import HttpTransferGateway, ProgressReader

from tests.fixtures import DEFAULT_TOKEN, create_candidate, create_metadata_dict

BASE_URL = "http://share.test/api"


def make_gateway(handler, **client_kwargs) -> HttpTransferGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), **client_kwargs)
    return HttpTransferGateway(BASE_URL, client=client)


class TestIssueUpload:

    @pytest.mark.asyncio
    async def test_upload_posts_multipart_file(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["content_type"] = request.headers["content-type"]
            seen["body"] = request.content
            return httpx.Response(201, json={"code": "ab12cd34", "filename": "notes.txt"})

        gateway = make_gateway(handler)
        progress = []

        receipt = await gateway.issue_upload(create_candidate(b"hello world"), progress.append)

        assert str(receipt.code) == "AB12CD34"
        assert receipt.filename == "notes.txt"
        assert seen["method"] == "POST"
        assert seen["path"] == "/api/upload/"
        assert seen["content_type"].startswith("multipart/form-data")
        assert b'name="file"' in seen["body"]
        assert b'filename="notes.txt"' in seen["body"]
        assert b"hello world" in seen["body"]
        assert progress[-1] == 100
        assert progress == sorted(progress)
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_upload_from_path(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_bytes(b"a,b\n1,2\n")
        seen = {}

        def handler(request):
            seen["body"] = request.content
            return httpx.Response(200, json={"code": "ZZ99YY88", "filename": "data.csv"})

        gateway = make_gateway(handler)
        candidate = CandidateFile(source=path, name="data.csv", size=8, content_type="text/csv")

        receipt = await gateway.issue_upload(candidate, lambda percent: None)

        assert str(receipt.code) == "ZZ99YY88"
        assert b"a,b\n1,2\n" in seen["body"]
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_upload_uses_upload_timeout(self):
        seen = {}

        def handler(request):
            seen["timeout"] = request.extensions.get("timeout")
            return httpx.Response(201, json={"code": "AB12CD34", "filename": "notes.txt"})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        gateway = HttpTransferGateway(BASE_URL, timeout=5.0, upload_timeout=120.0, client=client)

        await gateway.issue_upload(create_candidate(), lambda percent: None)

        assert seen["timeout"]["read"] == 120.0
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_413_raises_status_failure(self):
        gateway = make_gateway(lambda request: httpx.Response(413, json={"error": "File too large"}))

        with pytest.raises(HttpStatusFailure) as exc_info:
            await gateway.issue_upload(create_candidate(), lambda percent: None)

        assert exc_info.value.status_code == 413
        assert exc_info.value.body == {"error": "File too large"}
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_success_without_code_is_malformed(self):
        gateway = make_gateway(lambda request: httpx.Response(201, json={"filename": "x"}))

        with pytest.raises(MalformedResponseError):
            await gateway.issue_upload(create_candidate(), lambda percent: None)
        await gateway.aclose()


class TestFetchMetadata:

    @pytest.mark.asyncio
    async def test_fetch_metadata(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(200, json=create_metadata_dict())

        gateway = make_gateway(handler)

        metadata = await gateway.fetch_metadata(ShareCode("AB12CD34"))

        assert seen["path"] == "/api/file/AB12CD34/"
        assert metadata.filename == "report.pdf"
        assert str(metadata.download_token) == DEFAULT_TOKEN
        await gateway.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 410, 500])
    async def test_error_status_is_reported_raw(self, status):
        gateway = make_gateway(lambda request: httpx.Response(status, json={"error": "nope"}))

        with pytest.raises(HttpStatusFailure) as exc_info:
            await gateway.fetch_metadata(ShareCode("AB12CD34"))

        assert exc_info.value.status_code == status
        assert exc_info.value.body == {"error": "nope"}
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_non_json_error_body_is_kept_as_text(self):
        gateway = make_gateway(lambda request: httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(HttpStatusFailure) as exc_info:
            await gateway.fetch_metadata(ShareCode("AB12CD34"))

        assert exc_info.value.body == "Bad Gateway"
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_non_json_success_is_malformed(self):
        gateway = make_gateway(lambda request: httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(MalformedResponseError):
            await gateway.fetch_metadata(ShareCode("AB12CD34"))
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        gateway = make_gateway(handler)

        with pytest.raises(TransportFailure) as exc_info:
            await gateway.fetch_metadata(ShareCode("AB12CD34"))

        assert "connection refused" in str(exc_info.value)
        assert isinstance(exc_info.value.original_error, httpx.ConnectError)
        await gateway.aclose()


class TestFetchFile:

    @pytest.mark.asyncio
    async def test_fetch_file_returns_bytes_and_headers(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            return httpx.Response(
                200,
                content=b"%PDF-1.4",
                headers={"Content-Disposition": 'attachment; filename="report.pdf"'},
            )

        gateway = make_gateway(handler)

        payload = await gateway.fetch_file(ShareCode("AB12CD34"), DownloadToken("tok-123"))

        assert seen["path"] == "/api/download/AB12CD34/tok-123/"
        assert payload.content == b"%PDF-1.4"
        assert payload.header("content-disposition") == 'attachment; filename="report.pdf"'
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_download_is_sent_without_cookies(self):
        cookies = {}

        def handler(request):
            cookies[request.url.path] = request.headers.get("cookie")
            if request.url.path.startswith("/api/file/"):
                return httpx.Response(200, json=create_metadata_dict())
            return httpx.Response(200, content=b"data")

        gateway = make_gateway(handler, cookies={"sessionid": "abc"})

        await gateway.fetch_metadata(ShareCode("AB12CD34"))
        await gateway.fetch_file(ShareCode("AB12CD34"), DownloadToken("tok-123"))

        assert cookies["/api/file/AB12CD34/"] == "sessionid=abc"
        assert cookies["/api/download/AB12CD34/tok-123/"] is None
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_empty_body_is_returned_as_is(self):
        gateway = make_gateway(lambda request: httpx.Response(200, content=b""))

        payload = await gateway.fetch_file(ShareCode("AB12CD34"), DownloadToken("tok-123"))

        assert payload.size == 0
        await gateway.aclose()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 410])
    async def test_error_status(self, status):
        gateway = make_gateway(lambda request: httpx.Response(status, content=b""))

        with pytest.raises(HttpStatusFailure) as exc_info:
            await gateway.fetch_file(ShareCode("AB12CD34"), DownloadToken("tok-123"))

        assert exc_info.value.status_code == status
        assert exc_info.value.body is None
        await gateway.aclose()


class TestProgressReader:

    def test_reports_percentages_and_completion(self):
        progress = []
        reader = ProgressReader(io.BytesIO(b"x" * 100), 100, progress.append)

        assert reader.read(25) == b"x" * 25
        assert reader.read(50) == b"x" * 50
        reader.read()
        reader.read()

        assert progress == [25, 75, 100]

    def test_seek_to_start_resets_count(self):
        progress = []
        reader = ProgressReader(io.BytesIO(b"x" * 10), 10, progress.append)

        reader.read(5)
        reader.seek(0)
        reader.read(2)

        assert progress == [50, 20]

    def test_length_can_be_measured_with_seek(self):
        reader = ProgressReader(io.BytesIO(b"x" * 42), 42, lambda percent: None)

        assert reader.seek(0, io.SEEK_END) == 42
        reader.seek(0)
        assert reader.tell() == 0

    def test_empty_file_reports_completion(self):
        progress = []
        reader = ProgressReader(io.BytesIO(b""), 0, progress.append)

        reader.read()

        assert progress == [100]


@pytest.mark.asyncio
async def test_from_config(monkeypatch):
    monkeypatch.setenv("CODESHARE_API_BASE_URL", "https://files.example.com/api/")
    monkeypatch.setenv("CODESHARE_UPLOAD_TIMEOUT", "60")

    gateway = HttpTransferGateway.from_config(ClientConfig())

    assert gateway.base_url == "https://files.example.com/api"
    assert gateway.upload_timeout.read == 60.0
    await gateway.aclose()
