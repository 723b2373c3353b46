"""Review stage ("Sahitya Vimarsak"): polishes the draft.

Repairs script, tag syntax, structure and rhyme. When the review call
fails, the draft is passed on unchanged.
"""

import logging

from geetgatha.pipeline.base import fails_open
from geetgatha.schemas.generation import GenerationConfiguration, LanguageProfile
from geetgatha.schemas.lyrics import GeneratedLyrics
from geetgatha.services.llm import LLMAdapter
from geetgatha.services.lyrics_format import format_lyrics_for_display

logger = logging.getLogger(__name__)

REVIEW_SYSTEM_PROMPT = """You are the "Sahitya Vimarsak" (Literary Critic).
Perform a rigorous QUALITY CONTROL pass on draft lyrics:
1. LANGUAGE INTEGRITY: lyric lines in the requested NATIVE SCRIPT. Convert transliteration, rewrite translations.
2. TAG SYNTAX: all section tags in ENGLISH inside [Square Brackets]. [Pallavi] becomes [Chorus], [Charanam] becomes [Verse].
3. STRUCTURE: [Intro], three [Verse] sections, a [Chorus] repeated 2-3 times, a [Bridge] and an [Outro]. Generate anything missing.
4. RHYME: lines in verses and choruses must follow the requested end-rhyme scheme. Rewrite lines that break it.
Return the FINAL POLISHED LYRICS in the requested JSON schema.
"""

REVIEW_RHYME_DESCRIPTIONS = {
    "AABB": "Line 1 rhymes with 2. Line 3 rhymes with 4.",
    "ABAB": "Line 1 rhymes with 3. Line 2 rhymes with 4.",
    "ABCB": "Line 2 rhymes with 4. Lines 1 and 3 can be free.",
    "AAAA": "All 4 lines must end with the same sound.",
    "AABCCB": "Line 1 rhymes with 2. Line 4 rhymes with 5. Line 3 rhymes with 6.",
}


def _keep_draft(adapter, draft: str, *args, **kwargs) -> str:
    return draft


@fails_open(_keep_draft)
async def run_review_stage(
    adapter: LLMAdapter,
    draft: str,
    context: str,
    language: LanguageProfile,
    settings: GenerationConfiguration,
) -> str:
    """Return the polished lyrics, or the draft if the reply is empty."""
    rhyme_scheme = settings.effective("rhyme_scheme")
    rhyme_description = REVIEW_RHYME_DESCRIPTIONS.get(
        rhyme_scheme, "Consistent end rhymes (Anthya Prasa) for all couplets."
    )

    prompt = f"""INPUT LYRICS (DRAFT):
{draft}

ORIGINAL CONTEXT:
{context}

TARGET LANGUAGE: {language.primary}
REQUESTED COMPLEXITY: {settings.complexity}
REQUESTED RHYME SCHEME: {rhyme_scheme} ({rhyme_description})

Audit and repair the draft for language integrity, complexity, rhyme, structure and tag syntax.
Return the COMPLETE, CORRECTED version in JSON.
"""
    polished = await adapter.generate_text(
        prompt,
        GeneratedLyrics,
        temperature=0.4,
        system_prompt=REVIEW_SYSTEM_PROMPT,
    )
    if not polished.sections:
        logger.warning("Review returned no sections, keeping the draft")
        return draft
    return format_lyrics_for_display(polished)
