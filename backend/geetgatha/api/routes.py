"""API route handlers and Pydantic response schemas."""

import base64
import binascii
import logging
from typing import Callable, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel

from geetgatha import __version__
from geetgatha.config import settings
from geetgatha.errors import MissingCredentialError, PipelineError
from geetgatha.orchestrator.pipeline import RunLog, failure_message, run_pipeline
from geetgatha.orchestrator.state import ProgressSnapshot, ProgressTracker, build_steps
from geetgatha.pipeline.base import StageSet
from geetgatha.schemas.analysis import ComplianceReport
from geetgatha.schemas.generation import (
    GenerationConfiguration,
    GenerationRequest,
    LanguageProfile,
)
from geetgatha.schemas.messages import ChatMessage
from geetgatha.services import history
from geetgatha.services.llm import MediaPart

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

# Shared by every request; one run at a time.
tracker = ProgressTracker()

StageFactory = Callable[[str], StageSet]

PENDING_MESSAGE = "Queued..."


# ============================================================================
# Request/Response Schemas
# ============================================================================

class GenerateRequest(GenerationRequest):
    """Request schema for POST /api/generate."""
    api_key: Optional[str] = None
    image_base64: Optional[str] = None
    image_mime_type: str = "image/jpeg"
    audio_base64: Optional[str] = None
    audio_mime_type: str = "audio/webm"


class GenerateResponse(BaseModel):
    """Response schema for POST /api/generate."""
    message_id: str
    status: str
    status_url: str


class MessageResponse(BaseModel):
    """One stored chat message."""
    id: str
    run_id: Optional[str] = None
    role: str
    sender_agent: str
    content: str
    alternate_format: Optional[str] = None
    style_prompt: Optional[str] = None
    compliance_report: Optional[ComplianceReport] = None
    error_kind: Optional[str] = None
    timestamp: str


class RunResponse(BaseModel):
    """One stored pipeline run."""
    run_id: str
    request_text: str
    language_label: str
    outcome: str
    error_kind: Optional[str] = None
    resolved_settings: Optional[dict] = None
    step_durations: Optional[dict] = None
    total_duration_seconds: Optional[float] = None
    started_at: str
    completed_at: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    text_model: str
    busy: bool


# ============================================================================
# Dependencies
# ============================================================================

def default_stage_factory(credential: str) -> StageSet:
    """Build stages for the configured text model."""
    from geetgatha.pipeline.stages import build_stages
    from geetgatha.services.llm import get_adapter

    return build_stages(get_adapter(settings.models.text_model, credential))


def get_stage_factory() -> StageFactory:
    return default_stage_factory


def get_tracker() -> ProgressTracker:
    return tracker


def _decode_media(payload: Optional[str], mime_type: str, field: str) -> Optional[MediaPart]:
    if not payload:
        return None
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=422, detail=f"{field} is not valid base64")
    return MediaPart(data=data, mime_type=mime_type)


# ============================================================================
# Background Task Wrapper
# ============================================================================

async def run_pipeline_background(
    request_text: str,
    language: LanguageProfile,
    generation: GenerationConfiguration,
    credential: str,
    stages: StageSet,
    run_tracker: ProgressTracker,
    image: Optional[MediaPart] = None,
    audio: Optional[MediaPart] = None,
):
    """Run the pipeline and persist its terminal message and run log.

    Credential failures escape run_pipeline without a message; here they
    are stored as a system message so the chat still shows why nothing
    came back.
    """
    run_log = RunLog()

    async def sink(message: ChatMessage) -> None:
        await history.save_message(message, run_id=run_log.run_id)

    try:
        await run_pipeline(
            request_text,
            language,
            generation,
            sink,
            credential,
            tracker=run_tracker,
            stages=stages,
            image=image,
            audio=audio,
            run_log=run_log,
        )
    except PipelineError as e:
        logger.error(f"Background pipeline failed: {e.kind.value}: {e.message}")
        run_log.outcome = "failed"
        run_log.error_kind = e.kind
        if isinstance(e, MissingCredentialError):
            # Raised before the run took over the claimed tracker
            run_tracker.reset()
        await history.save_message(failure_message(e), run_id=run_log.run_id)

    await history.save_run(run_log, request_text, language.label)


# ============================================================================
# Endpoint Handlers
# ============================================================================

@router.post("/generate", status_code=202, response_model=GenerateResponse)
async def generate_song(
    request: GenerateRequest,
    background_tasks: BackgroundTasks,
    stage_factory: StageFactory = Depends(get_stage_factory),
    run_tracker: ProgressTracker = Depends(get_tracker),
):
    """Start song generation in the background.

    Stores the user's message, then schedules the pipeline. Returns 202
    with the message id; progress is polled from /api/status.

    The tracker is claimed before the first await, so a second request
    arriving while this one stores its message already sees it busy.
    """
    credential = request.api_key or settings.gemini.api_key
    if not credential or not credential.strip():
        raise HTTPException(status_code=401, detail="API key is missing. Please add one in settings.")

    image = _decode_media(request.image_base64, request.image_mime_type, "image_base64")
    audio = _decode_media(request.audio_base64, request.audio_mime_type, "audio_base64")

    if run_tracker.active:
        raise HTTPException(status_code=409, detail="A song is already being composed")

    stages = stage_factory(credential)
    run_tracker.initialize(build_steps(request.language.label), PENDING_MESSAGE)

    user_message = ChatMessage(role="user", content=request.request_text, sender_agent="USER")
    try:
        await history.save_message(user_message)
    except Exception:
        run_tracker.reset()
        raise
    logger.info(f"Accepted request {user_message.id}: {request.request_text[:50]}...")

    background_tasks.add_task(
        run_pipeline_background,
        request.request_text,
        request.language,
        request.generation,
        credential,
        stages,
        run_tracker,
        image,
        audio,
    )

    return GenerateResponse(
        message_id=user_message.id,
        status="accepted",
        status_url="/api/status",
    )


@router.get("/status", response_model=ProgressSnapshot)
async def get_status(run_tracker: ProgressTracker = Depends(get_tracker)):
    """Current progress snapshot for polling."""
    return run_tracker.snapshot()


@router.get("/messages", response_model=list[MessageResponse])
async def get_messages(limit: int = 50):
    """Chat history, oldest first."""
    if limit < 1 or limit > 500:
        raise HTTPException(status_code=422, detail="limit must be 1-500")
    records = await history.list_messages(limit)
    return [
        MessageResponse(
            id=r.id,
            run_id=r.run_id,
            role=r.role,
            sender_agent=r.sender_agent,
            content=r.content,
            alternate_format=r.alternate_format,
            style_prompt=r.style_prompt,
            compliance_report=r.compliance_report,
            error_kind=r.error_kind,
            timestamp=r.timestamp.isoformat(),
        )
        for r in records
    ]


@router.get("/runs", response_model=list[RunResponse])
async def get_runs(limit: int = 20):
    """Recent pipeline runs with per-step durations, newest first."""
    if limit < 1 or limit > 200:
        raise HTTPException(status_code=422, detail="limit must be 1-200")
    records = await history.list_runs(limit)
    return [
        RunResponse(
            run_id=r.id,
            request_text=r.request_text,
            language_label=r.language_label,
            outcome=r.outcome,
            error_kind=r.error_kind,
            resolved_settings=r.resolved_settings,
            step_durations=r.step_durations,
            total_duration_seconds=r.total_duration_seconds,
            started_at=r.started_at.isoformat(),
            completed_at=r.completed_at.isoformat() if r.completed_at else None,
        )
        for r in records
    ]


@router.get("/health", response_model=HealthResponse)
async def health(run_tracker: ProgressTracker = Depends(get_tracker)):
    return HealthResponse(
        status="ok",
        version=__version__,
        text_model=settings.models.text_model,
        busy=run_tracker.active,
    )
