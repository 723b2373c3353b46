"""Formatter stage: converts polished lyrics to strict Suno.com format.

Falls back to echoing the input with an empty style prompt.
"""

from geetgatha.pipeline.base import fails_open
from geetgatha.schemas.lyrics import FormattedLyrics
from geetgatha.services.llm import LLMAdapter

FORMATTER_SYSTEM_PROMPT = """You are the "Suno Prompt Architect".
Your ONLY Goal: Convert the provided lyrics into a strict, raw format optimized for Suno.com.
1. ENGLISH TAGS ONLY: [Chorus], [Verse], [Intro], [Outro], [Bridge], [Pre-Chorus], [Hook].
2. PRESERVE STRUCTURE: do not summarize; keep every [Chorus] repetition, keep [Intro] and [Outro].
3. VOICE TAGS: [Male Vocals], [Female Vocals], [Big Chorus], [Child Vocals].
4. NO MARKDOWN.
5. STRIP METADATA: remove Title, Language, Raagam, Taalam, Structure lines.
Also write a short comma-separated style prompt (genre, instruments, vocal type, tempo).
"""


def _echo_lyrics(adapter, lyrics: str) -> FormattedLyrics:
    return FormattedLyrics(style_prompt="", formatted_lyrics=lyrics)


@fails_open(_echo_lyrics)
async def run_formatter_stage(adapter: LLMAdapter, lyrics: str) -> FormattedLyrics:
    prompt = f"""INPUT LYRICS:
{lyrics}

TASK:
Convert the above lyrics into strict Suno.com format.
Remove all lines starting with "Title:", "Language:", "Raagam:", "Taalam:", "Structure:", "Context:".
Remove any "Editor's Report" or "Analysis" sections.
Output the tag-based lyrics in formatted_lyrics and the style tags in style_prompt.
"""
    formatted = await adapter.generate_text(
        prompt,
        FormattedLyrics,
        temperature=0.1,
        system_prompt=FORMATTER_SYSTEM_PROMPT,
    )
    if not formatted.formatted_lyrics.strip():
        return FormattedLyrics(style_prompt=formatted.style_prompt, formatted_lyrics=lyrics)
    return formatted
