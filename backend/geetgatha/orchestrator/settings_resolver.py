"""Resolve AUTO generation settings from the emotion analysis.

Pure and deterministic: the same (configuration, emotion) pair always
resolves to the same configuration. Every rule ends in an unconditional
fallback, so unexpected navarasa or sentiment values still resolve.
"""

from geetgatha.schemas.analysis import NEUTRAL_EMOTION, EmotionAnalysis
from geetgatha.schemas.generation import AUTO, GenerationConfiguration

HIGH_ENERGY_RASAS = frozenset({"Raudra", "Veera", "Hasya"})
TENDER_RASAS = frozenset({"Shringara", "Karuna", "Shanta"})

HIGH_INTENSITY_STYLE_THRESHOLD = 8
SIMPLE_COMPLEXITY_ABOVE = 7
DEFAULT_RHYME_SCHEME = "AABB"


def resolve_style(emotion: EmotionAnalysis) -> str:
    if emotion.intensity >= HIGH_INTENSITY_STYLE_THRESHOLD or emotion.navarasa in HIGH_ENERGY_RASAS:
        return "Fast Beat/Mass"
    if emotion.navarasa in TENDER_RASAS:
        return "Melody"
    return "Folk"


def resolve_singer_config(emotion: EmotionAnalysis) -> str:
    if "Shringara" in emotion.navarasa:
        return "Duet (Male + Female)"
    if "Hasya" in emotion.navarasa:
        return "Group Chorus"
    return "Male Solo"


def resolve_complexity(emotion: EmotionAnalysis) -> str:
    return "Simple" if emotion.intensity > SIMPLE_COMPLEXITY_ABOVE else "Poetic"


def resolve_theme(emotion: EmotionAnalysis) -> str:
    if emotion.vibe_description == AUTO:
        return NEUTRAL_EMOTION.vibe_description
    return emotion.vibe_description


def resolve_auto_settings(
    config: GenerationConfiguration,
    emotion: EmotionAnalysis,
) -> GenerationConfiguration:
    """Return a copy of ``config`` with every AUTO field replaced.

    Fields that are not AUTO pass through unchanged, including "Custom"
    selections; those are expanded later via GenerationConfiguration.effective.

    Args:
        config: User configuration, possibly containing AUTO sentinels.
        emotion: Output of the emotion stage for this run.

    Returns:
        A new GenerationConfiguration with no AUTO values.
    """
    rules = {
        "mood": lambda: f"{emotion.navarasa} ({emotion.sentiment})",
        "theme": lambda: resolve_theme(emotion),
        "style": lambda: resolve_style(emotion),
        "singer_config": lambda: resolve_singer_config(emotion),
        "complexity": lambda: resolve_complexity(emotion),
        "rhyme_scheme": lambda: DEFAULT_RHYME_SCHEME,
    }

    updates = {
        field: rule()
        for field, rule in rules.items()
        if getattr(config, field) == AUTO
    }
    return config.model_copy(update=updates)
