"""Stage failure contracts and the stage bundle used by the orchestrator.

Every stage is an async function tagged with how it fails:

- ``@fails_open(fallback)``: internal failures are logged and replaced by
  ``fallback(*args, **kwargs)``, a safe default of the right type.
- ``@fails_closed``: internal failures are logged and re-raised as a
  classified PipelineError.

The tag is exposed as ``func.failure_mode`` (and a fails-open stage's
fallback as ``func.fallback``) so callers and tests can inspect a stage's
contract without invoking it.
"""

import enum
import functools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from geetgatha.errors import classify_error
from geetgatha.schemas.analysis import ComplianceReport, EmotionAnalysis
from geetgatha.schemas.generation import GenerationConfiguration, LanguageProfile
from geetgatha.schemas.lyrics import FormattedLyrics
from geetgatha.services.llm.base import MediaPart

logger = logging.getLogger(__name__)


class FailureMode(str, enum.Enum):
    FAILS_OPEN = "fails_open"
    FAILS_CLOSED = "fails_closed"


def fails_open(fallback: Callable[..., Any]):
    """Tag a stage as fails-open, substituting ``fallback`` on any failure."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.error(f"{func.__name__} failed, using safe default: {type(e).__name__}: {e}")
                return fallback(*args, **kwargs)

        wrapper.failure_mode = FailureMode.FAILS_OPEN
        wrapper.fallback = fallback
        return wrapper

    return decorator


def fails_closed(func):
    """Tag a stage as fails-closed, raising a classified PipelineError on failure."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__name__} failed: {type(e).__name__}: {e}")
            raise classify_error(e) from e

    wrapper.failure_mode = FailureMode.FAILS_CLOSED
    return wrapper


def failure_mode_of(stage: Callable) -> Optional[FailureMode]:
    """Return the failure tag of a stage, unwrapping functools.partial."""
    target = stage.func if isinstance(stage, functools.partial) else stage
    return getattr(target, "failure_mode", None)


MultimodalStage = Callable[[str, Optional[MediaPart], Optional[MediaPart]], Awaitable[str]]
EmotionStage = Callable[[str], Awaitable[EmotionAnalysis]]
ResearchStage = Callable[[str, str], Awaitable[str]]
LyricistStage = Callable[
    [str, str, LanguageProfile, EmotionAnalysis, GenerationConfiguration], Awaitable[str]
]
ComplianceStage = Callable[[str], Awaitable[ComplianceReport]]
ReviewStage = Callable[[str, str, LanguageProfile, GenerationConfiguration], Awaitable[str]]
FormatterStage = Callable[[str], Awaitable[FormattedLyrics]]


@dataclass
class StageSet:
    """The seven stage callables for one run, with their adapter bound."""

    multimodal: MultimodalStage
    emotion: EmotionStage
    research: ResearchStage
    lyricist: LyricistStage
    compliance: ComplianceStage
    review: ReviewStage
    formatter: FormatterStage
