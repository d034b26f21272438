"""
Google Drive fetch adapter (POST /api/gemini/upload-file).

Fetches a Drive document on the caller's behalf using their OAuth access
token, stages it with Gemini and waits until it is ACTIVE. The resulting
reference is returned so the frontend can reuse it in later assist calls
(as a ``fileUris`` entry) without re-uploading.

Drive v3 endpoints used:
  GET /drive/v3/files/{id}?fields=name,mimeType,size   metadata
  GET /drive/v3/files/{id}?alt=media                   content (streamed)

The 20MB ceiling is checked against the metadata before the content stream
is opened, and again while streaming because ``size`` is absent for some
file kinds.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Optional

import httpx

from studybuddy.errors import DriveAccessError, InvalidDriveFileId, PayloadTooLarge
from studybuddy.models.attachment import FileReference
from studybuddy.services.artifacts import ArtifactScope
from studybuddy.services.poller import Sleep, await_ready
from studybuddy.services.staging import stage_bytes

logger = logging.getLogger(__name__)

DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
MAX_DRIVE_FILE_BYTES = 20 * 1024 * 1024  # Gemini inline file limit
DRIVE_TIMEOUT_SECONDS = 60.0

# Drive ids are URL-safe tokens; they are interpolated into the request path
DRIVE_FILE_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


@dataclass
class DriveMetadata:
    name: str
    mime_type: Optional[str]
    size: Optional[int]


def check_file_id(file_id: str) -> None:
    if not DRIVE_FILE_ID_PATTERN.fullmatch(file_id or ""):
        raise InvalidDriveFileId(file_id)


def _auth_headers(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}


def _check_response(response: httpx.Response, file_id: str) -> None:
    if response.status_code >= 400:
        logger.warning(f"Drive returned HTTP {response.status_code} for file {file_id}")
        raise DriveAccessError(response.status_code, file_id)


async def get_metadata(
    http: httpx.AsyncClient, file_id: str, access_token: str
) -> DriveMetadata:
    response = await http.get(
        f"{DRIVE_FILES_URL}/{file_id}",
        params={"fields": "name,mimeType,size"},
        headers=_auth_headers(access_token),
    )
    _check_response(response, file_id)

    body = response.json()
    # Drive reports size as a decimal string
    raw_size = body.get("size")
    return DriveMetadata(
        name=body.get("name") or file_id,
        mime_type=body.get("mimeType"),
        size=int(raw_size) if raw_size not in (None, "") else None,
    )


async def download_content(
    http: httpx.AsyncClient,
    file_id: str,
    access_token: str,
    limit: int = MAX_DRIVE_FILE_BYTES,
) -> bytes:
    """Stream the document body into memory, aborting past ``limit`` bytes."""
    chunks = []
    received = 0

    async with http.stream(
        "GET",
        f"{DRIVE_FILES_URL}/{file_id}",
        params={"alt": "media"},
        headers=_auth_headers(access_token),
    ) as response:
        _check_response(response, file_id)
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > limit:
                raise PayloadTooLarge(received, limit)
            chunks.append(chunk)

    return b"".join(chunks)


async def fetch_drive_document(
    file_id: str,
    access_token: str,
    http: Optional[httpx.AsyncClient] = None,
    limit: int = MAX_DRIVE_FILE_BYTES,
) -> tuple[DriveMetadata, bytes]:
    """
    Fetch metadata then content for a Drive document.

    Raises:
        PayloadTooLarge: reported or streamed size exceeds ``limit``.
        InvalidDriveFileId: ``file_id`` is not a Drive id.
        DriveAccessError: Drive answered with an HTTP error.
    """
    check_file_id(file_id)

    owns_client = http is None
    if owns_client:
        http = httpx.AsyncClient(timeout=httpx.Timeout(DRIVE_TIMEOUT_SECONDS))

    try:
        metadata = await get_metadata(http, file_id, access_token)
        if metadata.size is not None and metadata.size > limit:
            raise PayloadTooLarge(metadata.size, limit)

        content = await download_content(http, file_id, access_token, limit=limit)
        logger.info(f"Fetched Drive file {file_id}: {metadata.name} ({len(content)} bytes)")
        return metadata, content
    finally:
        if owns_client:
            await http.aclose()


async def stage_drive_file(
    file_id: str,
    access_token: str,
    file_name: Optional[str] = None,
    mime_type: Optional[str] = None,
    http: Optional[httpx.AsyncClient] = None,
    sleep: Sleep = asyncio.sleep,
) -> FileReference:
    """
    Fetch a Drive document, stage it with Gemini and wait until it is ACTIVE.

    ``file_name`` / ``mime_type`` from the caller override Drive's metadata.
    """
    metadata, content = await fetch_drive_document(file_id, access_token, http=http)

    display_name = file_name or metadata.name
    effective_mime_type = mime_type or metadata.mime_type or "application/octet-stream"

    with ArtifactScope() as scope:
        reference, _ = await stage_bytes(
            content,
            effective_mime_type,
            display_name,
            scope,
            tag=file_id,
            prefix="gemini",
        )
        logger.info(f"Uploaded {display_name} to Gemini: {reference.uri}")
        return await await_ready(reference, sleep=sleep)
