"""
Request assembler: builds the ordered content parts for one inference call.

Order:
  1. one file part per pre-staged reference
  2. one text part naming them (only if there were any)
  3. the parts for each legacy attachment, in input order
  4. the prompt, always last
"""

from typing import Iterable, List

from google.genai import types

from studybuddy.models.attachment import ContentPart, FileReference, StagedFileInput


def file_part(uri: str, mime_type: str) -> ContentPart:
    return ContentPart(file_uri=uri, mime_type=mime_type)


def text_part(text: str) -> ContentPart:
    return ContentPart(text=text)


def staged_files_note(staged: List[StagedFileInput]) -> ContentPart:
    names = ", ".join(f.display_name for f in staged)
    return text_part(f"\n\nAttached files for analysis: {names}\n\n")


def attachment_parts(reference: FileReference, attachment_name: str) -> List[ContentPart]:
    """File part for a freshly staged attachment, followed by its marker."""
    return [
        file_part(reference.uri, reference.mime_type),
        text_part(f"\n\n[Attached File: {attachment_name}]\n"),
    ]


def inline_content_part(attachment_name: str, content: str | None) -> ContentPart:
    return text_part(f"\n\n[File Content: {attachment_name}]\n{content or ''}\n")


def failure_note(attachment_name: str, error: Exception) -> ContentPart:
    return text_part(f"\n\n[Error processing file: {attachment_name} - {error}]\n")


def assemble_parts(
    prompt: str,
    staged: List[StagedFileInput],
    legacy_parts: Iterable[List[ContentPart]] = (),
) -> List[ContentPart]:
    """
    Combine pre-staged references, per-attachment parts and the prompt.

    ``legacy_parts`` holds one list per legacy attachment, already built in
    input order by the orchestrator.
    """
    parts: List[ContentPart] = [file_part(f.uri, f.mime_type) for f in staged]
    if staged:
        parts.append(staged_files_note(staged))

    for group in legacy_parts:
        parts.extend(group)

    parts.append(text_part(prompt))
    return parts


def to_gemini_parts(parts: List[ContentPart]) -> List[types.Part]:
    """Convert ContentParts into google-genai Part objects."""
    converted: List[types.Part] = []
    for part in parts:
        if part.is_file:
            converted.append(types.Part.from_uri(file_uri=part.file_uri, mime_type=part.mime_type))
        else:
            converted.append(types.Part.from_text(text=part.text or ""))
    return converted
