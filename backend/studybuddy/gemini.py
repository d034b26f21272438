"""
Gemini client configuration.
Uses the google-genai SDK for file staging and content generation.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from google import genai

load_dotenv()

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-lite")

# None when no key is configured; callers report a configuration error
gemini_client: Optional[genai.Client] = genai.Client(api_key=GEMINI_API_KEY) if GEMINI_API_KEY else None


def require_client(client: Optional[genai.Client]) -> genai.Client:
    """Return the client or fail with a message the error classifier maps to 500."""
    if client is None:
        raise RuntimeError("GEMINI_API_KEY is not configured")
    return client
