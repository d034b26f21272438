"""
Readiness poller for staged Gemini files.

Bounded retry: while the file is PROCESSING, sleep a fixed interval and ask
the service again, at most ``max_attempts`` times. No backoff; the bound
caps handler latency (about ten seconds with the defaults).
"""

import asyncio
import logging
from typing import Awaitable, Callable

from studybuddy.errors import ProcessingFailed, ProcessingTimeout
from studybuddy.gemini import gemini_client, require_client
from studybuddy.models.attachment import FileReference, FileState
from studybuddy.services.staging import coerce_state

logger = logging.getLogger(__name__)

MAX_POLL_ATTEMPTS = 10
POLL_INTERVAL_SECONDS = 1.0

Sleep = Callable[[float], Awaitable[None]]


async def fetch_state(name: str) -> FileState:
    client = require_client(gemini_client)
    remote_file = await client.aio.files.get(name=name)
    return coerce_state(remote_file.state)


async def await_ready(
    reference: FileReference,
    max_attempts: int = MAX_POLL_ATTEMPTS,
    interval: float = POLL_INTERVAL_SECONDS,
    sleep: Sleep = asyncio.sleep,
) -> FileReference:
    """
    Wait until ``reference`` is ACTIVE.

    ``sleep`` is injectable so tests can run the loop without waiting.

    Returns:
        A copy of ``reference`` carrying the final (ACTIVE) state.

    Raises:
        ProcessingTimeout: still PROCESSING after ``max_attempts`` queries.
        ProcessingFailed: the file reached any other non-ACTIVE state.
    """
    state = reference.state
    attempts = 0

    while state == FileState.PROCESSING and attempts < max_attempts:
        await sleep(interval)
        state = await fetch_state(reference.name)
        attempts += 1
        logger.info(
            f"File {reference.display_name} status: {state.value} (attempt {attempts})"
        )

    if state != FileState.ACTIVE:
        logger.error(
            f"File {reference.display_name} not ready after {attempts} attempts. "
            f"Status: {state.value}"
        )
        if state == FileState.PROCESSING:
            raise ProcessingTimeout(state.value, attempts)
        raise ProcessingFailed(state.value, attempts)

    logger.info(f"File {reference.display_name} is ready to use")
    return reference.model_copy(update={"state": state})
