"""
Gemini attachment endpoints.

  POST /assist        answer a prompt with pre-staged files or legacy
                      inline attachments
  POST /upload-file   stage a Google Drive document with Gemini and
                      return its reusable file reference
"""

import logging

from fastapi import APIRouter, HTTPException

from studybuddy.errors import MissingPrompt, classify_service_error
from studybuddy.models.assist import (
    DriveUploadRequest,
    DriveUploadResponse,
    StudyAssistRequest,
    StudyAssistResponse,
)
from studybuddy.services.drive import stage_drive_file
from studybuddy.services.study_assist import run_study_assist

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/assist", response_model=StudyAssistResponse)
async def study_assist(body: StudyAssistRequest):
    """
    Ask Gemini about an assignment, optionally with files.

    ``fileUris`` (already staged, e.g. via /upload-file) take precedence;
    ``attachments`` are only processed when no ``fileUris`` were sent.
    A bad attachment is reported to the model as a text note rather than
    failing the request.
    """
    try:
        result = await run_study_assist(body)
    except MissingPrompt as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Study assist failed: {str(e)}", exc_info=True)
        raise classify_service_error(e)

    return StudyAssistResponse(
        response=result.response,
        assignment=body.assignment,
        attachments_processed=result.attachments_processed,
        files_attached=result.files_attached,
    )


@router.post("/upload-file", response_model=DriveUploadResponse)
async def upload_drive_file(body: DriveUploadRequest):
    """
    Fetch a Drive document with the caller's access token and stage it.

    Returns 413 without downloading if Drive reports more than 20MB.
    """
    if not body.drive_file_id or not body.access_token:
        raise HTTPException(
            status_code=400,
            detail="Drive file ID and access token are required",
        )

    logger.info(f"Drive upload request for file {body.drive_file_id}")

    try:
        reference = await stage_drive_file(
            body.drive_file_id,
            body.access_token,
            file_name=body.file_name,
            mime_type=body.mime_type,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Drive upload failed for {body.drive_file_id}: {str(e)}", exc_info=True)
        raise classify_service_error(e)

    return DriveUploadResponse(
        file_uri=reference.uri,
        mime_type=reference.mime_type,
        display_name=reference.display_name,
        name=reference.name,
    )
