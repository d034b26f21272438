"""
Ingestion orchestrator for POST /api/gemini/assist.

Pipeline per request:

  Received -> Normalizing (per legacy attachment) -> Assembling
           -> Inferring -> Responding

Pre-staged ``fileUris`` skip straight to assembly. Legacy attachments are
only processed when no pre-staged files were sent, one at a time and in
input order: decode -> write artifact -> upload -> release artifact ->
poll until ACTIVE. A failing attachment becomes an inline text note instead
of failing the request.

Every artifact is created inside one ``ArtifactScope``, so nothing written
for this request survives it, whichever step raised.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List

from studybuddy.errors import MissingPrompt
from studybuddy.models.assist import StudyAssistRequest
from studybuddy.models.attachment import AttachmentDescriptor, ContentPart
from studybuddy.services.artifacts import ArtifactScope
from studybuddy.services.assembler import (
    assemble_parts,
    attachment_parts,
    failure_note,
    inline_content_part,
    to_gemini_parts,
)
from studybuddy.services.inference import generate_text
from studybuddy.services.payload_normalizer import decode_payload
from studybuddy.services.poller import Sleep, await_ready
from studybuddy.services.staging import stage_bytes

logger = logging.getLogger(__name__)


@dataclass
class StudyAssistResult:
    response: str
    attachments_processed: int
    files_attached: int
    parts: List[ContentPart] = field(default_factory=list)


async def process_attachment(
    attachment: AttachmentDescriptor,
    index: int,
    scope: ArtifactScope,
    sleep: Sleep = asyncio.sleep,
) -> List[ContentPart]:
    """
    Turn one legacy attachment into its content parts.

    Never raises for a bad attachment: decode, upload and readiness failures
    come back as a single text note.
    """
    if not attachment.has_payload():
        logger.info(f"Attachment {attachment.name} has no file data, adding as text")
        return [inline_content_part(attachment.name, attachment.content)]

    file_data = attachment.file_data
    try:
        data = decode_payload(file_data)
        reference, artifact = await stage_bytes(
            data,
            attachment.effective_mime_type(),
            attachment.name,
            scope,
            tag=str(index),
            extension=file_data.file_extension,
        )
        # The remote copy is authoritative from here on
        artifact.release()

        reference = await await_ready(reference, sleep=sleep)
        return attachment_parts(reference, attachment.name)
    except Exception as attachment_err:
        logger.error(f"Error processing attachment {attachment.name}: {attachment_err}")
        return [failure_note(attachment.name, attachment_err)]


async def run_study_assist(
    request: StudyAssistRequest,
    sleep: Sleep = asyncio.sleep,
) -> StudyAssistResult:
    """
    Assemble the prompt with its attachments and ask Gemini.

    Raises:
        MissingPrompt: before any processing if the prompt is empty.
        Exception: whatever inference raised; the router classifies it.
    """
    if not request.prompt:
        raise MissingPrompt()
    prompt = request.prompt

    staged = request.file_uris or []
    attachments = request.attachments or []
    use_legacy = bool(attachments) and not staged

    logger.info(
        f"Study assist request: {len(staged)} staged files, "
        f"{len(attachments)} legacy attachments"
    )

    with ArtifactScope() as scope:
        legacy_groups: List[List[ContentPart]] = []
        if use_legacy:
            for index, attachment in enumerate(attachments):
                logger.info(f"Processing attachment {index + 1}: {attachment.name}")
                legacy_groups.append(
                    await process_attachment(attachment, index, scope, sleep=sleep)
                )

        parts = assemble_parts(prompt, staged, legacy_groups)
        logger.info(f"Sending {len(parts)} parts to Gemini")

        response_text = await generate_text(to_gemini_parts(parts))

    return StudyAssistResult(
        response=response_text,
        attachments_processed=len(staged) + len(attachments),
        files_attached=len(staged),
        parts=parts,
    )
