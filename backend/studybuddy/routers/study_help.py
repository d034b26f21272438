"""
Study help endpoint: answers a free-form study question without attachments.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException

from studybuddy.errors import MissingPrompt, classify_service_error
from studybuddy.models.assist import StudyHelpRequest, StudyHelpResponse
from studybuddy.services.study_help import answer_study_question

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("", response_model=StudyHelpResponse)
async def ai_study_help(body: StudyHelpRequest):
    """
    Answer a study question, framed by optional course context.

    Returns 400 when the prompt is missing or empty.
    """
    try:
        text = await answer_study_question(body.prompt, body.context)
    except MissingPrompt as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Study help failed: {str(e)}", exc_info=True)
        raise classify_service_error(e)

    return StudyHelpResponse(
        success=True,
        response=text,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
