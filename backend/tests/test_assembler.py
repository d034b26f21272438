"""
Unit tests for content part assembly.
"""

from studybuddy.models.attachment import FileReference, FileState, StagedFileInput
from studybuddy.services.assembler import (
    assemble_parts,
    attachment_parts,
    failure_note,
    inline_content_part,
    to_gemini_parts,
)


def _staged(n: int):
    return [
        StagedFileInput(uri=f"https://files/{i}", mime_type="application/pdf", display_name=f"doc{i}.pdf")
        for i in range(n)
    ]


class TestAssembleParts:

    def test_prompt_only(self):
        parts = assemble_parts("Explain osmosis", [])
        assert len(parts) == 1
        assert parts[0].text == "Explain osmosis"

    def test_staged_files_then_single_note_then_prompt(self):
        parts = assemble_parts("Summarize", _staged(3))

        assert [p.is_file for p in parts] == [True, True, True, False, False]
        assert [p.file_uri for p in parts[:3]] == ["https://files/0", "https://files/1", "https://files/2"]
        assert parts[3].text == "\n\nAttached files for analysis: doc0.pdf, doc1.pdf, doc2.pdf\n\n"
        assert parts[-1].text == "Summarize"

    def test_legacy_groups_keep_input_order_and_prompt_is_last(self):
        reference = FileReference(
            uri="https://files/x", name="files/x", mime_type="image/png",
            display_name="a.png", state=FileState.ACTIVE,
        )
        groups = [
            attachment_parts(reference, "a.png"),
            [inline_content_part("notes", "some text")],
            [failure_note("broken.bin", ValueError("bad data"))],
        ]

        parts = assemble_parts("Help me", [], groups)

        assert len(parts) == 2 + 1 + 1 + 1
        assert parts[0].file_uri == "https://files/x"
        assert parts[1].text == "\n\n[Attached File: a.png]\n"
        assert parts[2].text == "\n\n[File Content: notes]\nsome text\n"
        assert parts[3].text == "\n\n[Error processing file: broken.bin - bad data]\n"
        assert parts[4].text == "Help me"

    def test_inline_content_with_missing_content(self):
        assert inline_content_part("empty", None).text == "\n\n[File Content: empty]\n\n"


class TestToGeminiParts:

    def test_converts_files_and_text(self):
        parts = assemble_parts("Question", _staged(1))

        converted = to_gemini_parts(parts)

        assert converted[0].file_data.file_uri == "https://files/0"
        assert converted[0].file_data.mime_type == "application/pdf"
        assert converted[1].text.startswith("\n\nAttached files")
        assert converted[2].text == "Question"
