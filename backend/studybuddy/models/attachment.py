"""
Pydantic models for attachments and remote file references.

Wire names are camelCase (the frontend posts them as-is); Python attributes
are snake_case.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FileState(str, Enum):
    """Processing state of a file staged with the remote AI service."""
    STATE_UNSPECIFIED = "STATE_UNSPECIFIED"
    PROCESSING = "PROCESSING"
    ACTIVE = "ACTIVE"
    FAILED = "FAILED"


class FileData(BaseModel):
    """
    Structured byte payload of a legacy attachment.

    ``data`` is deliberately untyped: browsers and older clients send it as a
    base64 string, a plain string, a serialized Buffer, a list of byte values
    or an object keyed by byte index. See ``services.payload_normalizer``.
    """
    model_config = ConfigDict(populate_by_name=True)

    data: Any = None
    encoding: Optional[str] = None
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    file_extension: Optional[str] = Field(default=None, alias="fileExtension")


class AttachmentDescriptor(BaseModel):
    """One legacy attachment as submitted in the request body."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = "attachment"
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    content: Optional[str] = None
    file_data: Optional[FileData] = Field(default=None, alias="fileData")

    def has_payload(self) -> bool:
        """True when the attachment carries byte data rather than plain content."""
        return self.file_data is not None and self.file_data.data is not None

    def effective_mime_type(self) -> str:
        if self.file_data and self.file_data.mime_type:
            return self.file_data.mime_type
        return self.mime_type or "application/octet-stream"


class StagedFileInput(BaseModel):
    """A file the caller already staged (``fileUris`` entry)."""
    model_config = ConfigDict(populate_by_name=True)

    uri: str
    mime_type: str = Field(alias="mimeType")
    display_name: str = Field(default="", alias="displayName")


class FileReference(BaseModel):
    """Pointer to bytes held by the remote AI service."""
    uri: str
    name: str
    mime_type: str
    display_name: str
    state: FileState = FileState.STATE_UNSPECIFIED


class ContentPart(BaseModel):
    """
    One unit of the inference request: either a remote file or inline text.

    Exactly one of ``file_uri`` / ``text`` is set.
    """
    file_uri: Optional[str] = None
    mime_type: Optional[str] = None
    text: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.file_uri is not None
