"""Emotion analysis stage ("Bhava Vignani").

Maps the request onto a navarasa with sentiment and intensity. On failure
the run continues with a neutral Shanta reading.
"""

from geetgatha.pipeline.base import fails_open
from geetgatha.schemas.analysis import NEUTRAL_EMOTION, EmotionAnalysis
from geetgatha.services.llm import LLMAdapter

EMOTION_SYSTEM_PROMPT = """You are the "Bhava Vignani" (Emotion Scientist).
Your task is to analyze user input (text/audio description) to extract the deep emotional core.
1. **Navarasa Analysis:** Map the emotion to Indian Aesthetics (Shringara, Karuna, Veera, Raudra, Hasya, Bhayanaka, Bibhatsa, Adbhuta, Shanta).
2. **Intensity:** Gauge the emotional weight (1-10).
3. **Context:** Identify if this is a Hero Intro, Love Duet, Heartbreak, Devotional, Kids Song, or Item Song.
Output structured JSON data.
"""


def _neutral_emotion(adapter, context: str) -> EmotionAnalysis:
    return NEUTRAL_EMOTION


@fails_open(_neutral_emotion)
async def run_emotion_stage(adapter: LLMAdapter, context: str) -> EmotionAnalysis:
    return await adapter.generate_text(
        context,
        EmotionAnalysis,
        temperature=0.6,
        system_prompt=EMOTION_SYSTEM_PROMPT,
    )
