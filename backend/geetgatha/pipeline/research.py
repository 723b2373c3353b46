"""Research stage: cultural context, raagams and keywords for the song.

Two tiers: a search-grounded call first, and if that capability fails, a
plain call with the same base prompt. Only a failure of the plain call
stops the run.
"""

import logging

from geetgatha.pipeline.base import fails_closed
from geetgatha.services.llm import GroundedText, LLMAdapter

logger = logging.getLogger(__name__)

SEARCH_INSTRUCTION = """
CRITICAL INSTRUCTION:
Use Google Search to find:
1. Recent lyrical trends or slang relevant to this topic.
2. If the user references a specific movie or song style, find its details (Composer, Raagam, Vibe).
3. Cultural metaphors associated with this specific mood.
"""


def research_prompt(topic: str, mood: str) -> str:
    return f"""You are the RESEARCH AGENT.
Analyze the following song request: "{topic}".
Context Mood: {mood or 'Not specified'}.
1. Identify key emotional themes and tropes used in Indian Cinema.
2. Suggest 2-3 suitable Raagams (musical scales).
3. List 5-10 impactful keywords in the target language.
Output your findings in a structured, concise format.
"""


def append_sources(grounded: GroundedText) -> str:
    """Append a [RESEARCH SOURCES] block when the grounded call cited any."""
    if not grounded.sources:
        return grounded.text
    listing = "\n".join(f"- {source.title} ({source.uri})" for source in grounded.sources)
    return f"{grounded.text}\n\n[RESEARCH SOURCES]:\n{listing}"


@fails_closed
async def run_research_stage(adapter: LLMAdapter, context: str, mood_theme: str) -> str:
    """Return research notes for the request.

    Args:
        adapter: Model adapter for this run.
        context: Enriched request text from the multimodal stage.
        mood_theme: "{mood} - {theme}" from the resolved settings.
    """
    base_prompt = research_prompt(context, mood_theme)
    try:
        grounded = await adapter.generate_grounded(f"{base_prompt}\n{SEARCH_INSTRUCTION}", temperature=0.7)
        return append_sources(grounded)
    except Exception as e:
        logger.warning(f"Research search failed, falling back to basic knowledge: {type(e).__name__}: {e}")

    return await adapter.generate_plain(base_prompt)
