"""Lyricist stage ("Mahakavi"): composes the draft song.

The only stage without a safe default: there is no placeholder for lyrics
that preserves the user's intent, so any failure is raised as a classified
PipelineError and ends the run.
"""

import logging
from typing import Optional

from geetgatha.knowledge.scenarios import (
    SCENARIO_KNOWLEDGE_BASE,
    ScenarioCategory,
    find_scenario,
)
from geetgatha.pipeline.base import fails_closed
from geetgatha.schemas.analysis import EmotionAnalysis
from geetgatha.schemas.generation import NO_CEREMONY, GenerationConfiguration, LanguageProfile
from geetgatha.schemas.lyrics import GeneratedLyrics
from geetgatha.services.llm import LLMAdapter
from geetgatha.services.lyrics_format import format_lyrics_for_display

logger = logging.getLogger(__name__)

LYRICIST_SYSTEM_PROMPT = """You are the "Mahakavi" (Great Poet) & "Rachayita" (Writer), an expert Lyricist for Indian Cinema and Folk traditions.
Compose complete songs with this exact section order:
[Intro] (humming or vocalizations), [Verse 1], [Chorus], [Verse 2], [Chorus], [Bridge], [Verse 3], [Chorus], [Outro].

LANGUAGE & SCRIPT RULES:
- Lyric lines MUST be in the NATIVE SCRIPT of the requested language. No transliteration, no English translation.
- Section tags and performance instructions MUST be English inside [Square Brackets], e.g. [Verse 1], [Chorus], [Male Vocals].

POETIC RULES:
- Maintain ANTHYA PRASA (end rhyme) inside each stanza according to the requested scheme.
- Keep syllable counts consistent per line for singability.
"""

RHYME_DESCRIPTIONS = {
    "AABB": "Couplets. Line 1 MUST rhyme with Line 2. Line 3 MUST rhyme with Line 4.",
    "ABAB": "Alternate rhyme. Line 1 MUST rhyme with Line 3. Line 2 MUST rhyme with Line 4.",
    "ABCB": "Ballad style. Line 2 MUST rhyme with Line 4. Lines 1 and 3 do not need to rhyme.",
    "AAAA": "Monorhyme. All lines MUST end with the same phonetic sound.",
    "AABCCB": "Line 1 rhymes with 2. Line 4 rhymes with 5. Line 3 rhymes with 6.",
    "Free Verse": "No strict rhyme required, but focus on rhythm and flow.",
}
DEFAULT_RHYME_DESCRIPTION = "Ensure consistent end rhymes (Anthya Prasa) where appropriate."

COMPLEXITY_INSTRUCTIONS = {
    "Simple": "STRICTLY use colloquial, everyday conversational language. Avoid Sanskritized words. "
              "Keep it catchy and simple to sing.",
    "Poetic": "Use standard literary style with beautiful metaphors and flow.",
    "Complex": "Use high classical vocabulary, complex metaphors, and deep concepts.",
}


def language_instruction(language: LanguageProfile) -> str:
    """Describe the required script and whether to code-mix."""
    text = (
        f'PRIMARY LANGUAGE: "{language.primary}".\n'
        f"Write the lyric lines STRICTLY in {language.primary} NATIVE SCRIPT. "
        "DO NOT USE ROMAN/LATIN CHARACTERS FOR LYRICS. DO NOT TRANSLITERATE."
    )
    if language.is_mixed:
        text += (
            f'\nSECONDARY LANGUAGES: "{language.secondary}" and "{language.tertiary}". '
            f"Mix naturally, but keep the primary script as {language.primary}."
        )
    else:
        text += f"\nDO NOT mix other languages. Pure {language.primary}."
    return text


def scenario_instruction(
    settings: GenerationConfiguration,
    scenarios: list[ScenarioCategory],
) -> str:
    if not settings.ceremony or settings.ceremony == NO_CEREMONY:
        return ""
    scenario = find_scenario(scenarios, settings.ceremony)
    if scenario is None:
        logger.warning("Unknown ceremony %r, composing without scenario context", settings.ceremony)
        return ""
    theme = settings.effective("theme")
    return (
        "*** SCENARIO / CONTEXT INSTRUCTION (CRITICAL) ***\n"
        f"SCENARIO: {scenario.label}\n"
        f"{scenario.prompt_context}\n"
        "The song MUST explicitly reference the emotions, metaphors, and cultural tropes above. "
        f"Do not write a generic {theme} song. Write a specific song for {scenario.label}."
    )


def build_lyricist_prompt(
    research: str,
    context: str,
    language: LanguageProfile,
    emotion: Optional[EmotionAnalysis],
    settings: GenerationConfiguration,
    scenarios: list[ScenarioCategory],
) -> str:
    theme = settings.effective("theme")
    mood = settings.effective("mood")
    style = settings.effective("style")
    rhyme_scheme = settings.effective("rhyme_scheme")
    complexity = settings.complexity
    rhyme_description = RHYME_DESCRIPTIONS.get(rhyme_scheme, DEFAULT_RHYME_DESCRIPTION)
    complexity_text = COMPLEXITY_INSTRUCTIONS.get(complexity, COMPLEXITY_INSTRUCTIONS["Poetic"])

    navarasa = emotion.navarasa if emotion else "N/A"
    intensity = emotion.intensity if emotion else 5

    return f"""USER REQUEST: "{context}"

*** LANGUAGE INSTRUCTION (CRITICAL) ***
{language_instruction(language)}

STRICT CONFIGURATION:
- Theme: {theme}
- Mood: {mood}
- Musical Style: {style}
- Lyrical Complexity Level: {complexity}
- SINGER CONFIGURATION: {settings.singer_config}
- RHYME SCHEME: {rhyme_scheme}

{scenario_instruction(settings, scenarios)}

*** COMPLEXITY INSTRUCTION ({complexity}) ***
{complexity_text}

*** RHYME & PRASA INSTRUCTION (CRITICAL) ***
- SELECTED SCHEME: {rhyme_scheme}
- PATTERN DEFINITION: {rhyme_description}
- Every stanza must satisfy the {rhyme_scheme} structure.

EMOTIONAL ANALYSIS:
- Navarasa: {navarasa}
- Intensity: {intensity}/10

RESEARCH CONTEXT:
{research}

TASK:
Compose a high-fidelity Indian Cinema song following the mandatory structure.
Output strictly in JSON format matching the schema.
"""


@fails_closed
async def run_lyricist_stage(
    adapter: LLMAdapter,
    research: str,
    context: str,
    language: LanguageProfile,
    emotion: Optional[EmotionAnalysis],
    settings: GenerationConfiguration,
    *,
    scenarios: Optional[list[ScenarioCategory]] = None,
) -> str:
    """Compose the draft lyrics and render them for display.

    Args:
        adapter: Model adapter for this run.
        research: Output of the research stage.
        context: Enriched request text.
        language: Target language profile.
        emotion: Emotion analysis for this run.
        settings: Fully resolved generation settings.
        scenarios: Scenario lookup table; defaults to the built-in table.

    Returns:
        Draft lyrics as display text.

    Raises:
        PipelineError: On any model, parsing or validation failure.
    """
    prompt = build_lyricist_prompt(
        research,
        context,
        language,
        emotion,
        settings,
        scenarios if scenarios is not None else SCENARIO_KNOWLEDGE_BASE,
    )
    lyrics = await adapter.generate_text(
        prompt,
        GeneratedLyrics,
        temperature=0.85,
        system_prompt=LYRICIST_SYSTEM_PROMPT,
        thinking_budget=4096,
    )
    logger.info("Lyricist produced %d section(s) titled %r", len(lyrics.sections), lyrics.title)
    return format_lyrics_for_display(lyrics)
