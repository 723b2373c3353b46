"""Shared fixtures: an isolated database, a scripted adapter and recording stages.

Environment overrides must be in place before geetgatha.config is imported,
because the settings singleton and the database engine are built at import.
"""

import os
import tempfile
from pathlib import Path

_TEST_DIR = Path(tempfile.mkdtemp(prefix="geetgatha-tests-"))
os.environ["GEETGATHA_STORAGE__DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR / 'test.db'}"
os.environ["GEETGATHA_PIPELINE__RESET_GRACE_SECONDS"] = "0"
os.environ["GEETGATHA_GEMINI__API_KEY"] = ""

from typing import Any, Optional, Type

import pytest

from geetgatha.config import PipelineConfig, Settings
from geetgatha.orchestrator.state import ProgressTracker
from geetgatha.pipeline.base import StageSet
from geetgatha.schemas.analysis import ComplianceReport, EmotionAnalysis
from geetgatha.schemas.lyrics import FormattedLyrics
from geetgatha.services.llm import GroundedText, LLMAdapter, MediaPart


# ---------------------------------------------------------------------------
# Scripted adapter
# ---------------------------------------------------------------------------

class FakeAdapter(LLMAdapter):
    """Adapter returning canned replies and recording every call.

    ``structured`` maps schema class name to the reply (or an exception to
    raise). ``plain``, ``grounded`` and ``media`` work the same way for the
    other methods.
    """

    def __init__(
        self,
        structured: Optional[dict[str, Any]] = None,
        plain: Any = "plain research notes",
        grounded: Any = None,
        media: Any = "a sunset over paddy fields",
    ) -> None:
        self.structured = structured or {}
        self.plain = plain
        self.grounded = grounded if grounded is not None else GroundedText(text="grounded research notes")
        self.media = media
        self.calls: list[tuple[str, str]] = []
        self.prompts: list[str] = []

    @staticmethod
    def _reply(value):
        if isinstance(value, BaseException):
            raise value
        return value

    async def generate_text(self, prompt, schema: Type, *, temperature=0.7, system_prompt=None,
                            thinking_budget=None, max_retries=3):
        self.calls.append(("generate_text", schema.__name__))
        self.prompts.append(prompt)
        if schema.__name__ not in self.structured:
            raise ValueError(f"No scripted reply for {schema.__name__}")
        return self._reply(self.structured[schema.__name__])

    async def generate_plain(self, prompt, *, temperature=0.7, top_p=None, system_prompt=None, max_retries=3):
        self.calls.append(("generate_plain", ""))
        self.prompts.append(prompt)
        return self._reply(self.plain)

    async def generate_grounded(self, prompt, *, temperature=0.7, max_retries=3):
        self.calls.append(("generate_grounded", ""))
        self.prompts.append(prompt)
        return self._reply(self.grounded)

    async def analyze_media(self, prompt, media: list[MediaPart], *, system_prompt=None,
                            temperature=0.4, max_retries=3):
        self.calls.append(("analyze_media", str(len(media))))
        self.prompts.append(prompt)
        return self._reply(self.media)


# ---------------------------------------------------------------------------
# Recording stages
# ---------------------------------------------------------------------------

ROMANTIC_EMOTION = EmotionAnalysis(
    sentiment="Positive",
    navarasa="Shringara",
    intensity=6,
    vibe_description="Romantic monsoon evening",
    suggested_keywords=["rain", "love"],
)

DRAFT_LYRICS = "Title: Vaana\nLanguage: Telugu\n\n[Chorus]\nvaana vaana\n\n"
POLISHED_LYRICS = "Title: Vaana\nLanguage: Telugu\n\n[Chorus]\nvaana vaana velluva\n\n"
SUNO_LYRICS = "[Chorus]\nvaana vaana velluva"


class RecordingStages:
    """Builds a StageSet of async fakes that log their invocation order.

    ``build(**overrides)`` takes, per stage name, either a replacement
    callable or a canned result; an exception instance is raised when the
    stage is invoked.
    """

    def __init__(self, originality_score: int = 92, emotion: EmotionAnalysis = ROMANTIC_EMOTION) -> None:
        self.calls: list[str] = []
        self.args: dict[str, tuple] = {}
        self.originality_score = originality_score
        self.emotion = emotion

    def build(self, **overrides) -> StageSet:
        def record(name, result):
            async def stage(*args):
                self.calls.append(name)
                self.args[name] = args
                if isinstance(result, BaseException):
                    raise result
                return result
            return stage

        stages = {
            "multimodal": record("multimodal", "enriched context"),
            "emotion": record("emotion", self.emotion),
            "research": record("research", "research notes"),
            "lyricist": record("lyricist", DRAFT_LYRICS),
            "compliance": record(
                "compliance",
                ComplianceReport(originality_score=self.originality_score, verdict="Safe"),
            ),
            "review": record("review", POLISHED_LYRICS),
            "formatter": record(
                "formatter",
                FormattedLyrics(style_prompt="Telugu melody, flute", formatted_lyrics=SUNO_LYRICS),
            ),
        }
        for name, override in overrides.items():
            stages[name] = override if callable(override) else record(name, override)
        return StageSet(**stages)


@pytest.fixture
def recording_stages() -> RecordingStages:
    return RecordingStages()


@pytest.fixture
def tracker() -> ProgressTracker:
    return ProgressTracker()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with an immediate tracker reset and no default credential."""
    return Settings(pipeline=PipelineConfig(reset_grace_seconds=0), gemini={"api_key": None})
