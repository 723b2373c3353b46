"""Step definitions and the progress state machine for the lyric pipeline.

Each run walks a fixed ordered list of steps. A step is created pending,
goes active right before its stage is invoked and completed right after the
stage returns. Nothing moves backwards inside a run; on failure the
remaining steps simply stay pending until the tracker is reset.

The tracker is single-writer: only the orchestrator mutates it, observers
(API, CLI) read snapshots or subscribe to them.
"""

import asyncio
import enum
import logging
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

IDLE_STAGE_ID = "chat"
IDLE_MESSAGE = "Ready"


class StepStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


# Pipeline steps in execution order (id, label). The lyricist label is
# filled with the language label at run time.
STEP_DEFINITIONS = (
    ("multimodal", "Multimodal: Processing Input"),
    ("emotion", "Emotion: Analyzing Vibe"),
    ("research", "Research: Context & Culture"),
    ("lyricist", "Lyricist: Composing in {language}"),
    ("compliance", "Compliance: Plagiarism Check"),
    ("review", "Review: Polishing"),
    ("formatter", "Formatter: Suno Style"),
    ("final", "Orchestrator: Finalizing"),
)

STEP_ORDER = tuple(step_id for step_id, _ in STEP_DEFINITIONS)

# Rotating "what I'm doing" lines shown while a step is active
STAGE_SUBTASKS = {
    "multimodal": [
        "Listening to audio...",
        "Scanning visual cues...",
        "Extracting sensory data...",
        "Converting to text context...",
    ],
    "emotion": [
        "Detecting Navarasa...",
        "Analyzing sentiment intensity...",
        "Mapping cultural tone...",
        "Calibrating emotional vibe...",
    ],
    "research": [
        "Scanning cinematic corpus...",
        "Identifying cultural metaphors...",
        "Selecting Raaga & Taalam...",
        "Analyzing regional dialect...",
    ],
    "lyricist": [
        "Drafting [Intro] with humming...",
        "Constructing [Verse 1] (Checking Prasa)...",
        "Building [Chorus] (Checking Prasa)...",
        "Developing [Verse 2] & [Bridge]...",
        "Ensuring Native Script...",
    ],
    "compliance": [
        "Scanning copyright database...",
        "Checking phrase similarity...",
        "Verifying originality...",
        "Generating safety report...",
    ],
    "review": [
        "Verifying Native Script...",
        "Auditing Anthya Prasa (End Rhymes)...",
        "Enforcing [English] tags...",
        "Polishing poetic meter...",
    ],
    "formatter": [
        "Stripping metadata...",
        "Converting to Suno format...",
        "Ensuring [English] tags...",
        "Optimizing for music generation...",
    ],
}


class PipelineStep(BaseModel):
    """One row of the progress display."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    status: StepStatus = StepStatus.PENDING


class ProgressSnapshot(BaseModel):
    """Read-only view of the tracker handed to observers."""

    model_config = ConfigDict(frozen=True)

    active: bool
    current_stage_id: str
    message: str
    steps: tuple[PipelineStep, ...] = ()
    subtasks: tuple[str, ...] = ()


def build_steps(language_label: str) -> list[tuple[str, str]]:
    """Return the (id, label) list for one run."""
    return [
        (step_id, label.format(language=language_label))
        for step_id, label in STEP_DEFINITIONS
    ]


class ProgressTracker:
    """In-memory state machine of pipeline steps.

    Mutations notify subscribers with a fresh snapshot. Transitions are
    also appended to ``history`` so a run's order can be inspected after
    the fact.
    """

    def __init__(self) -> None:
        self._steps: list[PipelineStep] = []
        self._active = False
        self._current_stage_id = IDLE_STAGE_ID
        self._message = IDLE_MESSAGE
        self._run_token = 0
        self._pending_reset: Optional[asyncio.TimerHandle] = None
        self._subscribers: list[Callable[[ProgressSnapshot], None]] = []
        self.history: list[tuple[str, StepStatus]] = []

    @property
    def active(self) -> bool:
        return self._active

    def subscribe(self, callback: Callable[[ProgressSnapshot], None]) -> Callable[[], None]:
        """Register an observer; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            active=self._active,
            current_stage_id=self._current_stage_id,
            message=self._message,
            steps=tuple(self._steps),
            subtasks=tuple(STAGE_SUBTASKS.get(self._current_stage_id, ())),
        )

    def initialize(self, steps: list[tuple[str, str]], message: str) -> None:
        """Start a run: all given steps pending, tracker active."""
        self._cancel_pending_reset()
        self._run_token += 1
        self._steps = [PipelineStep(id=step_id, label=label) for step_id, label in steps]
        self._active = True
        self._current_stage_id = self._steps[0].id if self._steps else IDLE_STAGE_ID
        self._message = message
        self.history = []
        self._notify()

    def mark_active(self, step_id: str, message: Optional[str] = None) -> None:
        """Move a pending step to active.

        Unknown ids are ignored; step ids are fixed in STEP_DEFINITIONS.
        A step that already left pending is not moved back.
        """
        index = self._index_of(step_id)
        if index is None:
            logger.debug("mark_active ignored for unknown step %s", step_id)
            return
        step = self._steps[index]
        if step.status is not StepStatus.PENDING:
            logger.warning("Step %s is %s, not pending; leaving it", step_id, step.status.value)
            return

        self._steps[index] = step.model_copy(update={"status": StepStatus.ACTIVE})
        self._current_stage_id = step_id
        if message is not None:
            self._message = message
        self.history.append((step_id, StepStatus.ACTIVE))
        self._notify()

    def mark_completed(self, step_id: str) -> None:
        """Move a step from any non-terminal state to completed."""
        index = self._index_of(step_id)
        if index is None:
            logger.debug("mark_completed ignored for unknown step %s", step_id)
            return
        step = self._steps[index]
        if step.status is StepStatus.COMPLETED:
            return

        self._steps[index] = step.model_copy(update={"status": StepStatus.COMPLETED})
        self.history.append((step_id, StepStatus.COMPLETED))
        self._notify()

    def set_message(self, message: str) -> None:
        self._message = message
        self._notify()

    def reset(self) -> None:
        """Clear all steps and return to the idle state."""
        self._cancel_pending_reset()
        self._steps = []
        self._active = False
        self._current_stage_id = IDLE_STAGE_ID
        self._message = IDLE_MESSAGE
        self._notify()

    def schedule_reset(self, grace_seconds: float) -> None:
        """Reset after a display grace period so the UI can show the last frame.

        A run started before the timer fires keeps its state: the timer only
        resets the run it was scheduled for.
        """
        if grace_seconds <= 0:
            self.reset()
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.reset()
            return

        token = self._run_token
        self._cancel_pending_reset()

        def _reset_if_current() -> None:
            self._pending_reset = None
            if self._run_token == token:
                self.reset()

        self._pending_reset = loop.call_later(grace_seconds, _reset_if_current)

    def completed_order(self) -> list[str]:
        """Step ids in the order they were completed during the current run."""
        return [step_id for step_id, status in self.history if status is StepStatus.COMPLETED]

    def _index_of(self, step_id: str) -> Optional[int]:
        for index, step in enumerate(self._steps):
            if step.id == step_id:
                return index
        return None

    def _cancel_pending_reset(self) -> None:
        if self._pending_reset is not None:
            self._pending_reset.cancel()
            self._pending_reset = None

    def _notify(self) -> None:
        if not self._subscribers:
            return
        snap = self.snapshot()
        for callback in list(self._subscribers):
            try:
                callback(snap)
            except Exception as e:
                logger.warning(f"Progress subscriber failed: {type(e).__name__}: {e}")
