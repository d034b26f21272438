"""
Local temporary files written before a remote upload.

Every artifact belongs to exactly one request. ``ArtifactScope`` is the
request-level guard: each artifact it creates is released when the scope
exits, whichever step failed. Releasing is idempotent so callers can also
release an artifact early, right after staging.
"""

import logging
import os
import re
import tempfile
import time
from typing import List, Optional

logger = logging.getLogger(__name__)


def _sanitize_component(value: str) -> str:
    return re.sub(r'[^\w\-.]', '_', value)


class TemporaryArtifact:
    """A byte sequence written to a uniquely named file in the temp dir."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.released = False

    @classmethod
    def write(
        cls,
        data: bytes,
        tag: str,
        extension: Optional[str] = None,
        prefix: str = "gemini_temp",
        directory: Optional[str] = None,
    ) -> "TemporaryArtifact":
        """
        Write ``data`` to ``<prefix>_<ns timestamp>_<tag><extension>``.

        The nanosecond timestamp plus a per-request tag (attachment index or
        source document id) keeps names unique across concurrent requests.
        """
        directory = directory or tempfile.gettempdir()
        extension = extension or ""
        if extension and not extension.startswith("."):
            extension = f".{extension}"
        filename = (
            f"{prefix}_{time.time_ns()}_{_sanitize_component(tag)}"
            f"{_sanitize_component(extension)}"
        )
        path = os.path.join(directory, filename)

        # "xb": never clobber another request's artifact
        with open(path, "xb") as fh:
            fh.write(data)

        logger.info(f"Created temp file: {path} ({len(data)} bytes)")
        return cls(path)

    def release(self) -> None:
        """Delete the file. Failures are logged, never raised."""
        if self.released:
            return
        self.released = True
        try:
            if os.path.exists(self.path):
                os.unlink(self.path)
                logger.info(f"Cleaned up temp file: {self.path}")
        except OSError as cleanup_err:
            logger.warning(f"Failed to clean up temp file {self.path}: {cleanup_err}")

    def __enter__(self) -> "TemporaryArtifact":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


class ArtifactScope:
    """
    Tracks the artifacts created while handling one request.

    Usage::

        with ArtifactScope() as scope:
            artifact = scope.create(data, tag="0", extension=".pdf")
            ...
        # every artifact is gone here, even if the body raised
    """

    def __init__(self, directory: Optional[str] = None) -> None:
        self.directory = directory
        self.artifacts: List[TemporaryArtifact] = []

    def create(
        self,
        data: bytes,
        tag: str,
        extension: Optional[str] = None,
        prefix: str = "gemini_temp",
    ) -> TemporaryArtifact:
        artifact = TemporaryArtifact.write(
            data, tag, extension=extension, prefix=prefix, directory=self.directory
        )
        self.artifacts.append(artifact)
        return artifact

    def release_all(self) -> None:
        # Each artifact is released independently so one failure does not
        # leave the rest behind
        for artifact in self.artifacts:
            artifact.release()

    def __enter__(self) -> "ArtifactScope":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release_all()
