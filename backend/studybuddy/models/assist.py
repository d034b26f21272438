"""
Pydantic request/response bodies for the AI endpoints.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from studybuddy.models.attachment import AttachmentDescriptor, StagedFileInput


class StudyAssistRequest(BaseModel):
    """Body of POST /api/gemini/assist."""
    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = None
    assignment: Any = None
    # Explicit null is accepted for both lists (older clients send it)
    attachments: Optional[List[AttachmentDescriptor]] = None
    file_uris: Optional[List[StagedFileInput]] = Field(default=None, alias="fileUris")


class StudyAssistResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: str
    assignment: Any = None
    attachments_processed: int = Field(alias="attachmentsProcessed")
    files_attached: int = Field(alias="filesAttached")


class DriveUploadRequest(BaseModel):
    """Body of POST /api/gemini/upload-file."""
    model_config = ConfigDict(populate_by_name=True)

    drive_file_id: Optional[str] = Field(default=None, alias="driveFileId")
    access_token: Optional[str] = Field(default=None, alias="accessToken")
    file_name: Optional[str] = Field(default=None, alias="fileName")
    mime_type: Optional[str] = Field(default=None, alias="mimeType")


class DriveUploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_uri: str = Field(alias="fileUri")
    mime_type: str = Field(alias="mimeType")
    display_name: str = Field(alias="displayName")
    name: str


class StudyHelpRequest(BaseModel):
    """Body of POST /api/ai-study-help."""
    prompt: Optional[str] = None
    context: Optional[str] = None


class StudyHelpResponse(BaseModel):
    success: bool = True
    response: str
    timestamp: str
