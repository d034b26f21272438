"""
Domain exceptions for attachment ingestion and the mapping from any
ingestion / inference failure to a caller-facing HTTP error.

Routers never let raw provider messages reach the client: everything goes
through ``classify_service_error`` which picks a status code and a safe
message.
"""

import logging
from typing import Optional

from fastapi import HTTPException
from google.genai import errors as genai_errors

logger = logging.getLogger(__name__)


class IngestionError(Exception):
    """Base class for failures raised by the ingestion pipeline."""


class MissingPrompt(IngestionError):
    def __init__(self) -> None:
        super().__init__("Prompt is required")


class UnsupportedEncoding(IngestionError):
    """The attachment byte payload is in a shape we cannot decode."""

    def __init__(self, shape: str, reason: Optional[str] = None) -> None:
        self.shape = shape
        message = f"Unsupported data format: {shape}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class EmptyPayload(IngestionError):
    def __init__(self) -> None:
        super().__init__("Buffer is empty - file data was not properly transmitted")


class PayloadTooLarge(IngestionError):
    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(
            f"File is too large ({size / 1024 / 1024:.2f}MB). "
            f"Maximum size is {limit // (1024 * 1024)}MB."
        )


class ProcessingFailed(IngestionError):
    """The remote file never reached ACTIVE."""

    def __init__(self, state: str, attempts: int = 0) -> None:
        self.state = state
        self.attempts = attempts
        super().__init__(f"File processing failed or timed out. Status: {state}")


class ProcessingTimeout(ProcessingFailed):
    """The remote file was still PROCESSING when the attempt budget ran out."""


class DriveAccessError(IngestionError):
    """The storage provider refused or could not find the document."""

    def __init__(self, status_code: int, file_id: str) -> None:
        self.status_code = status_code
        self.file_id = file_id
        super().__init__(f"Drive request for {file_id} failed with HTTP {status_code}")


class InvalidDriveFileId(IngestionError):
    """The Drive file id contains characters Drive never issues."""

    def __init__(self, file_id: str) -> None:
        self.file_id = file_id
        super().__init__("Invalid Drive file ID")


# ---------------------------------------------------------------------------
# Caller-facing messages
# ---------------------------------------------------------------------------

CONFIGURATION_ERROR = "AI service configuration error. Please try again later."
PAYLOAD_TOO_LARGE = (
    "The uploaded files are too large. Please deselect some attachments and try again."
)
SERVICE_BUSY = "AI service is temporarily busy. Please try again in a few minutes."
PROCESSING_ERROR = "File processing failed or timed out. Please try again."
ATTACHMENT_ERROR = "Error processing file attachments. Please try again."
GENERIC_ERROR = "Failed to get AI assistance. Please try again."


def classify_service_error(exc: Exception) -> HTTPException:
    """
    Map a failure from staging, polling, Drive or inference onto an HTTP error.

    Order of inspection:
      1. Our own domain exceptions.
      2. ``google.genai`` API errors by HTTP code.
      3. Substrings of the error message (the SDK does not type every case).
    """
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, (MissingPrompt, InvalidDriveFileId)):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, PayloadTooLarge):
        return HTTPException(status_code=413, detail=str(exc))
    if isinstance(exc, ProcessingFailed):
        return HTTPException(status_code=500, detail=PROCESSING_ERROR)
    if isinstance(exc, DriveAccessError):
        if exc.status_code in (401, 403):
            return HTTPException(
                status_code=403,
                detail="Drive access required. Please re-authorize Google Drive and try again.",
            )
        if exc.status_code == 404:
            return HTTPException(status_code=404, detail="Drive file not found.")
        return HTTPException(status_code=500, detail=GENERIC_ERROR)

    if isinstance(exc, genai_errors.APIError):
        if exc.code in (401, 403):
            return HTTPException(status_code=500, detail=CONFIGURATION_ERROR)
        if exc.code == 413:
            return HTTPException(status_code=413, detail=PAYLOAD_TOO_LARGE)
        if exc.code == 429:
            return HTTPException(status_code=429, detail=SERVICE_BUSY)

    message = str(exc).lower()

    if "api key" in message or "api_key" in message:
        return HTTPException(status_code=500, detail=CONFIGURATION_ERROR)
    if "413" in message or "too large" in message or "payload" in message:
        return HTTPException(status_code=413, detail=PAYLOAD_TOO_LARGE)
    if "quota" in message or "limit" in message:
        return HTTPException(status_code=429, detail=SERVICE_BUSY)
    if "file" in message or "upload" in message:
        return HTTPException(status_code=500, detail=ATTACHMENT_ERROR)

    return HTTPException(status_code=500, detail=GENERIC_ERROR)
