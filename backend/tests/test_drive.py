"""
Tests for the Google Drive fetch adapter.

Drive is simulated with httpx.MockTransport; Gemini with the shared mock.
"""

from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from conftest import make_remote_file
from studybuddy.errors import DriveAccessError, InvalidDriveFileId, PayloadTooLarge, ProcessingFailed
from studybuddy.models.attachment import FileState
from studybuddy.services.drive import (
    MAX_DRIVE_FILE_BYTES,
    fetch_drive_document,
    stage_drive_file,
)

MIB = 1024 * 1024


def _drive_client(metadata: dict, content: bytes = b"", metadata_status: int = 200, content_status: int = 200):
    """Build an AsyncClient whose transport fakes the Drive v3 files endpoint."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.params.get("alt") == "media":
            return httpx.Response(content_status, content=content)
        return httpx.Response(metadata_status, json=metadata)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return client, requests


class TestFetchDriveDocument:

    @pytest.mark.asyncio
    async def test_fetches_metadata_then_content(self):
        http, requests = _drive_client(
            {"name": "Lab report.pdf", "mimeType": "application/pdf", "size": "14"},
            content=b"%PDF-1.4 drive",
        )

        async with http:
            metadata, content = await fetch_drive_document("drive123", "ya29.token", http=http)

        assert metadata.name == "Lab report.pdf"
        assert metadata.mime_type == "application/pdf"
        assert metadata.size == 14
        assert content == b"%PDF-1.4 drive"

        assert len(requests) == 2
        assert requests[0].url.path == "/drive/v3/files/drive123"
        assert requests[0].url.params["fields"] == "name,mimeType,size"
        assert requests[1].url.params["alt"] == "media"
        assert all(r.headers["Authorization"] == "Bearer ya29.token" for r in requests)

    @pytest.mark.asyncio
    async def test_oversized_file_rejected_before_content_request(self):
        http, requests = _drive_client({"name": "huge.mp4", "mimeType": "video/mp4", "size": str(25 * MIB)})

        async with http:
            with pytest.raises(PayloadTooLarge) as exc_info:
                await fetch_drive_document("big1", "token", http=http)

        assert len(requests) == 1
        assert "alt" not in requests[0].url.params
        assert exc_info.value.size == 25 * MIB
        assert exc_info.value.limit == MAX_DRIVE_FILE_BYTES
        assert "25.00MB" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_exactly_at_limit_is_allowed(self):
        http, _ = _drive_client({"name": "edge.bin", "size": str(MAX_DRIVE_FILE_BYTES)}, content=b"x")

        async with http:
            metadata, _ = await fetch_drive_document("edge", "token", http=http)

        assert metadata.size == MAX_DRIVE_FILE_BYTES

    @pytest.mark.asyncio
    async def test_stream_exceeding_limit_without_size_metadata(self):
        http, _ = _drive_client({"name": "doc"}, content=b"x" * 64)

        async with http:
            with pytest.raises(PayloadTooLarge):
                await fetch_drive_document("nosize", "token", http=http, limit=32)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403, 404])
    async def test_provider_errors_raise_drive_access_error(self, status):
        http, requests = _drive_client({"error": "nope"}, metadata_status=status)

        async with http:
            with pytest.raises(DriveAccessError) as exc_info:
                await fetch_drive_document("locked", "token", http=http)

        assert exc_info.value.status_code == status
        assert len(requests) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("file_id", ["../about", "abc/permissions", "abc?alt=media", "abc%2F", ""])
    async def test_path_altering_ids_rejected_without_request(self, file_id):
        http, requests = _drive_client({"name": "x", "size": "1"}, content=b"x")

        async with http:
            with pytest.raises(InvalidDriveFileId):
                await fetch_drive_document(file_id, "token", http=http)

        assert requests == []

    @pytest.mark.asyncio
    async def test_missing_name_falls_back_to_id(self):
        http, _ = _drive_client({"mimeType": "text/plain"}, content=b"hi")

        async with http:
            metadata, _ = await fetch_drive_document("anon", "token", http=http)

        assert metadata.name == "anon"
        assert metadata.size is None


class TestStageDriveFile:

    @pytest.mark.asyncio
    async def test_stages_and_returns_active_reference(self, mock_gemini, artifact_dir):
        mock_gemini.aio.files.upload.return_value = make_remote_file(
            name="files/drive1", display_name="Lab report.pdf", state="PROCESSING"
        )
        mock_gemini.aio.files.get.side_effect = [Mock(state="PROCESSING"), Mock(state="ACTIVE")]
        http, _ = _drive_client(
            {"name": "Lab report.pdf", "mimeType": "application/pdf", "size": "5"}, content=b"%PDF-"
        )
        sleep = AsyncMock()

        async with http:
            reference = await stage_drive_file("drive1", "token", http=http, sleep=sleep)

        assert reference.state == FileState.ACTIVE
        assert reference.name == "files/drive1"
        assert mock_gemini.aio.files.get.await_count == 2

        upload_kwargs = mock_gemini.aio.files.upload.call_args.kwargs
        assert upload_kwargs["config"].mime_type == "application/pdf"
        assert upload_kwargs["config"].display_name == "Lab report.pdf"
        assert upload_kwargs["file"].split("/")[-1].startswith("gemini_")
        assert upload_kwargs["file"].endswith("_drive1")
        assert list(artifact_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_caller_overrides_name_and_type(self, mock_gemini, artifact_dir):
        http, _ = _drive_client({"name": "raw", "mimeType": "application/octet-stream", "size": "2"}, content=b"hi")

        async with http:
            await stage_drive_file("d2", "token", file_name="Essay.txt", mime_type="text/plain", http=http)

        config = mock_gemini.aio.files.upload.call_args.kwargs["config"]
        assert config.display_name == "Essay.txt"
        assert config.mime_type == "text/plain"

    @pytest.mark.asyncio
    async def test_artifact_removed_when_processing_fails(self, mock_gemini, artifact_dir):
        mock_gemini.aio.files.upload.return_value = make_remote_file(state="PROCESSING")
        mock_gemini.aio.files.get.return_value = Mock(state="FAILED")
        http, _ = _drive_client({"name": "bad.pdf", "size": "3"}, content=b"abc")

        async with http:
            with pytest.raises(ProcessingFailed):
                await stage_drive_file("d3", "token", http=http, sleep=AsyncMock())

        assert list(artifact_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_oversized_file_never_touches_gemini(self, mock_gemini, artifact_dir):
        http, _ = _drive_client({"name": "huge", "size": str(25 * MIB)})

        async with http:
            with pytest.raises(PayloadTooLarge):
                await stage_drive_file("big", "token", http=http)

        mock_gemini.aio.files.upload.assert_not_awaited()
        assert list(artifact_dir.iterdir()) == []
