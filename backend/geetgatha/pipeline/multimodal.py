"""Multimodal pre-processing stage ("Drishti & Shruti").

Turns an attached image or audio clip into text context for the later
stages. Text-only requests pass through without a model call.
"""

import logging
from typing import Optional

from geetgatha.pipeline.base import fails_open
from geetgatha.services.llm import LLMAdapter, MediaPart

logger = logging.getLogger(__name__)

MULTIMODAL_SYSTEM_PROMPT = """You are the "Drishti & Shruti" (Sight & Sound) Agent.
Your task is to analyze Images or Audio descriptions provided by the user.
1. If Image: Describe the scene, lighting, colors, and mood. Suggest a song situation that fits this visual.
2. If Audio (Humming/Description): Describe the rhythm, tempo, and emotional vibe.
Convert these sensory inputs into a text prompt for the Lyricist.
"""


def _echo_request(adapter, request_text: str, image=None, audio=None) -> str:
    return request_text


@fails_open(_echo_request)
async def run_multimodal_stage(
    adapter: LLMAdapter,
    request_text: str,
    image: Optional[MediaPart] = None,
    audio: Optional[MediaPart] = None,
) -> str:
    """Return the request enriched with a description of any attached media."""
    media = [part for part in (image, audio) if part is not None]
    if not media:
        return request_text

    analysis = await adapter.analyze_media(
        f"User Text Context: {request_text}",
        media,
        system_prompt=MULTIMODAL_SYSTEM_PROMPT,
    )
    logger.info("Multimodal analysis produced %d chars from %d media part(s)", len(analysis), len(media))
    return f"[Visual/Audio Context: {analysis}] \n\n User Request: {request_text}"
