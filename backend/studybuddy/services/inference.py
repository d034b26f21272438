"""
Thin wrapper around Gemini content generation.
"""

import logging
from typing import Any

from studybuddy.gemini import GEMINI_MODEL, gemini_client, require_client

logger = logging.getLogger(__name__)


async def generate_text(contents: Any) -> str:
    """
    Send ``contents`` (a prompt string or a list of google-genai Parts) to the
    configured model and return the response text.
    """
    client = require_client(gemini_client)

    response = await client.aio.models.generate_content(
        model=GEMINI_MODEL,
        contents=contents,
    )
    text = response.text or ""

    logger.info(f"Gemini response received: {len(text)} characters")
    return text
