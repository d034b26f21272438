"""
Remote staging client: uploads local artifacts to the Gemini file store.

The artifact is written through the caller's ``ArtifactScope`` so the caller
owns cleanup; this module never deletes anything.
"""

import asyncio
import logging
from typing import Any, Optional

from google.genai import types

from studybuddy.gemini import gemini_client, require_client
from studybuddy.models.attachment import FileReference, FileState
from studybuddy.services.artifacts import ArtifactScope, TemporaryArtifact

logger = logging.getLogger(__name__)


def coerce_state(raw: Any) -> FileState:
    """Convert the SDK's file state (enum, string or None) into FileState."""
    if raw is None:
        return FileState.STATE_UNSPECIFIED
    value = getattr(raw, "value", None) or getattr(raw, "name", None) or str(raw)
    try:
        return FileState(str(value).upper())
    except ValueError:
        logger.warning(f"Unknown remote file state {value!r}")
        return FileState.STATE_UNSPECIFIED


def to_file_reference(remote_file: Any, fallback_mime_type: str, fallback_name: str) -> FileReference:
    return FileReference(
        uri=remote_file.uri,
        name=remote_file.name,
        mime_type=remote_file.mime_type or fallback_mime_type,
        display_name=remote_file.display_name or fallback_name,
        state=coerce_state(remote_file.state),
    )


async def upload_artifact(
    artifact: TemporaryArtifact,
    mime_type: str,
    display_name: str,
) -> FileReference:
    """
    Upload an existing local artifact and return the service's reference,
    including its initial processing state.
    """
    client = require_client(gemini_client)

    remote_file = await client.aio.files.upload(
        file=artifact.path,
        config=types.UploadFileConfig(mime_type=mime_type, display_name=display_name),
    )
    reference = to_file_reference(remote_file, mime_type, display_name)

    logger.info(
        f"Uploaded file to Gemini: {reference.display_name} "
        f"({reference.name}, state={reference.state.value})"
    )
    return reference


async def stage_bytes(
    data: bytes,
    mime_type: str,
    display_name: str,
    scope: ArtifactScope,
    tag: str,
    extension: Optional[str] = None,
    prefix: str = "gemini_temp",
) -> tuple[FileReference, TemporaryArtifact]:
    """
    Write ``data`` to a new artifact registered with ``scope`` and upload it.

    Returns:
        (FileReference, TemporaryArtifact): the artifact is still on disk;
        the caller releases it (or lets the scope do it).
    """
    # Off the event loop: payloads run up to 20MB
    artifact = await asyncio.to_thread(
        scope.create, data, tag, extension=extension, prefix=prefix
    )
    reference = await upload_artifact(artifact, mime_type, display_name)
    return reference, artifact
