"""
Text-only study question answering (POST /api/ai-study-help).
"""

from typing import Optional

from studybuddy.errors import MissingPrompt
from studybuddy.services.inference import generate_text

CONTEXT_INSTRUCTION = (
    "Please provide a helpful study-related response. Answer the question in a "
    "way that suits the student's learning needs. Do not drag out the response, "
    "keep it concise."
)

STANDALONE_INSTRUCTION = (
    "Please provide a helpful educational response, include key concepts to "
    "understand, and resources that might help. Also, condense the response."
)


def build_study_prompt(prompt: str, context: Optional[str] = None) -> str:
    if context:
        return f"Context: {context}\n\nQuestion: {prompt}\n\n{CONTEXT_INSTRUCTION}"
    return f"Study Question: {prompt}\n\n{STANDALONE_INSTRUCTION}"


async def answer_study_question(prompt: Optional[str], context: Optional[str] = None) -> str:
    if not prompt:
        raise MissingPrompt()
    return await generate_text(build_study_prompt(prompt, context))
