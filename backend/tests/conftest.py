"""
Shared fixtures: a mocked Gemini client patched into every module that
talks to the service, and a private temp directory for artifacts.
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock, Mock, patch

import pytest

# Mock environment variables before importing app modules
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")

_CLIENT_MODULES = (
    "studybuddy.services.staging",
    "studybuddy.services.poller",
    "studybuddy.services.inference",
)


def make_remote_file(
    name="files/abc123",
    uri="https://generativelanguage.googleapis.com/v1beta/files/abc123",
    mime_type="application/pdf",
    display_name="notes.pdf",
    state="ACTIVE",
):
    """Mimic the google-genai ``File`` object returned by upload/get."""
    remote_file = Mock(uri=uri, mime_type=mime_type, display_name=display_name, state=state)
    # Mock(name=...) would name the mock itself
    remote_file.name = name
    return remote_file


@pytest.fixture
def mock_gemini():
    """
    Gemini client mock: upload returns an ACTIVE file, get returns ACTIVE,
    generate_content returns "AI answer". Tests override as needed.
    """
    client = MagicMock()
    client.aio.files.upload = AsyncMock(return_value=make_remote_file())
    client.aio.files.get = AsyncMock(return_value=Mock(state="ACTIVE"))
    client.aio.models.generate_content = AsyncMock(return_value=Mock(text="AI answer"))

    patchers = [patch(f"{module}.gemini_client", client) for module in _CLIENT_MODULES]
    for p in patchers:
        p.start()
    yield client
    for p in patchers:
        p.stop()


@pytest.fixture
def artifact_dir(tmp_path, monkeypatch):
    """Redirect tempfile.gettempdir() so tests can inspect leftover artifacts."""
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    return tmp_path
