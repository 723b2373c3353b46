"""Main pipeline orchestrator for song generation.

Coordinates one request end-to-end with:
- Strictly sequential stage execution (no two stages run concurrently)
- Progress tracking through the ProgressTracker state machine
- AUTO settings resolution between the emotion and research stages
- Per-step timing and logging
- A single error boundary that turns failures into one chat message

Only credential failures escape to the caller; they need the user to fix
their settings before any retry can succeed.
"""

import inspect
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from geetgatha.config import Settings
from geetgatha.errors import ErrorKind, MissingCredentialError, PipelineError
from geetgatha.orchestrator.settings_resolver import resolve_auto_settings
from geetgatha.orchestrator.state import ProgressTracker, build_steps
from geetgatha.pipeline.base import StageSet
from geetgatha.schemas.analysis import ComplianceReport
from geetgatha.schemas.generation import GenerationConfiguration, LanguageProfile
from geetgatha.schemas.messages import ChatMessage, ResultMessage, SystemMessage
from geetgatha.services.llm import MediaPart

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "I encountered a musical block. Please try again."

ResultSink = Callable[[ChatMessage], Any]


@dataclass
class RunLog:
    """Timing and outcome of one pipeline run."""

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    total_duration_seconds: Optional[float] = None
    steps: Dict[str, float] = field(default_factory=dict)
    outcome: str = "running"
    error_kind: Optional[ErrorKind] = None
    resolved_settings: Optional[Dict[str, Any]] = None


def low_originality_warning(report: ComplianceReport) -> str:
    return (
        f"\n\n[⚠️ COMPLIANCE ALERT: Originality Score {report.originality_score}%. "
        "Some phrases may resemble existing songs.]"
    )


def failure_message(error: Exception) -> SystemMessage:
    """Build the single user-facing message for a failed run."""
    if isinstance(error, PipelineError):
        return SystemMessage(content=f"⚠️ {error.message}", error_kind=error.kind)
    return SystemMessage(content=GENERIC_FAILURE_MESSAGE, error_kind=ErrorKind.UNKNOWN)


async def _emit(sink: ResultSink, message: ChatMessage) -> None:
    outcome = sink(message)
    if inspect.isawaitable(outcome):
        await outcome


def _resolve_credential(credential: Optional[str], app_settings: Settings) -> str:
    resolved = credential or app_settings.gemini.api_key
    if not resolved or not resolved.strip():
        raise MissingCredentialError()
    return resolved


async def _execute(
    request_text: str,
    language: LanguageProfile,
    generation: GenerationConfiguration,
    stages: StageSet,
    tracker: ProgressTracker,
    run_log: RunLog,
    originality_threshold: int,
    image: Optional[MediaPart],
    audio: Optional[MediaPart],
) -> ResultMessage:
    """Run every stage in order and compose the result message."""

    async def step(step_id: str, message: str, call):
        tracker.mark_active(step_id, message)
        step_start = time.monotonic()
        logger.info(f"Starting {step_id} step")
        result = await call()
        duration = time.monotonic() - step_start
        run_log.steps[step_id] = duration
        tracker.mark_completed(step_id)
        logger.info(f"{step_id} step completed in {duration:.2f}s")
        return result

    # Step 1: Multimodal pre-processing
    context = await step(
        "multimodal",
        "Processing inputs...",
        lambda: stages.multimodal(request_text, image, audio),
    )

    # Step 2: Emotion analysis
    emotion = await step("emotion", "Feeling the vibe...", lambda: stages.emotion(context))

    # Step 3: Resolve AUTO settings (no tracked step)
    resolved = resolve_auto_settings(generation, emotion)
    run_log.resolved_settings = resolved.model_dump()
    logger.info(
        f"Resolved settings: mood={resolved.mood!r} style={resolved.style!r} "
        f"complexity={resolved.complexity!r} singer={resolved.singer_config!r}"
    )

    # Step 4: Research
    research = await step(
        "research",
        f"Analyzing context ({resolved.mood})...",
        lambda: stages.research(context, f"{resolved.effective('mood')} - {resolved.effective('theme')}"),
    )

    # Step 5: Lyricist (fails closed)
    draft = await step(
        "lyricist",
        f"Composing ({resolved.style})...",
        lambda: stages.lyricist(research, context, language, emotion, resolved),
    )

    # Step 6: Compliance
    report = await step("compliance", "Checking safety...", lambda: stages.compliance(draft))

    # Step 7: Review
    polished = await step(
        "review",
        "Polishing...",
        lambda: stages.review(draft, context, language, resolved),
    )

    # Step 8: Formatter
    formatted = await step(
        "formatter",
        "Formatting for Suno.com...",
        lambda: stages.formatter(polished),
    )

    # Step 9: Finalize
    tracker.mark_active("final", "Done!")
    content = polished
    if report.originality_score < originality_threshold:
        logger.info(f"Low originality score {report.originality_score}, annotating output")
        content += low_originality_warning(report)
    tracker.mark_completed("final")

    return ResultMessage(
        content=content,
        alternate_format=formatted.formatted_lyrics,
        style_prompt=formatted.style_prompt,
        compliance_report=report,
    )


async def run_pipeline(
    request_text: str,
    language: LanguageProfile,
    generation: GenerationConfiguration,
    result_sink: ResultSink,
    credential: Optional[str] = None,
    *,
    tracker: Optional[ProgressTracker] = None,
    stages: Optional[StageSet] = None,
    image: Optional[MediaPart] = None,
    audio: Optional[MediaPart] = None,
    app_settings: Optional[Settings] = None,
    run_log: Optional[RunLog] = None,
) -> RunLog:
    """Execute the full song generation pipeline for one request.

    Args:
        request_text: Raw user request.
        language: Target language profile.
        generation: Generation settings, possibly containing AUTO values.
        result_sink: Called (or awaited) exactly once with the result or
            failure message.
        credential: Model credential; falls back to gemini.api_key.
        tracker: Progress tracker to drive; a private one is used if omitted.
        stages: Stage callables; built from the configured model if omitted.
        image: Optional image attached to the request.
        audio: Optional audio clip attached to the request.
        app_settings: Settings override; defaults to the module singleton.
        run_log: Pre-created log, for callers that need the run id up front.

    Returns:
        RunLog with per-step durations and the outcome.

    Raises:
        PipelineError: With kind AUTH when the credential is missing (before
            any stage runs) or rejected by the provider. No message is sent
            to the sink in that case.
    """
    if app_settings is None:
        from geetgatha.config import settings as app_settings

    api_key = _resolve_credential(credential, app_settings)
    tracker = tracker if tracker is not None else ProgressTracker()

    if stages is None:
        from geetgatha.pipeline.stages import build_stages
        from geetgatha.services.llm import get_adapter

        stages = build_stages(get_adapter(app_settings.models.text_model, api_key, app_settings))

    run_log = run_log if run_log is not None else RunLog()
    pipeline_start = time.monotonic()
    tracker.initialize(build_steps(language.label), "Processing inputs...")
    logger.info(f"Starting pipeline run {run_log.run_id} ({language.label})")

    message: ChatMessage
    try:
        message = await _execute(
            request_text,
            language,
            generation,
            stages,
            tracker,
            run_log,
            app_settings.pipeline.originality_threshold,
            image,
            audio,
        )
        run_log.outcome = "completed"
    except Exception as e:
        run_log.outcome = "failed"
        logger.error(f"Pipeline run {run_log.run_id} failed: {type(e).__name__}: {e}")
        if isinstance(e, PipelineError) and e.kind is ErrorKind.AUTH:
            run_log.error_kind = e.kind
            raise
        message = failure_message(e)
        run_log.error_kind = message.error_kind
    finally:
        run_log.completed_at = datetime.now(timezone.utc)
        run_log.total_duration_seconds = time.monotonic() - pipeline_start
        tracker.schedule_reset(app_settings.pipeline.reset_grace_seconds)

    await _emit(result_sink, message)
    logger.info(f"Pipeline run {run_log.run_id} {run_log.outcome} in {run_log.total_duration_seconds:.2f}s")
    return run_log
