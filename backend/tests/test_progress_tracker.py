"""ProgressTracker state machine tests."""

import asyncio

import pytest

from geetgatha.orchestrator.state import (
    IDLE_MESSAGE,
    IDLE_STAGE_ID,
    STAGE_SUBTASKS,
    STEP_ORDER,
    ProgressTracker,
    StepStatus,
    build_steps,
)


def _statuses(tracker: ProgressTracker) -> dict[str, StepStatus]:
    return {step.id: step.status for step in tracker.snapshot().steps}


def test_01_build_steps_fills_language_label():
    steps = build_steps("Telugu Mix")

    assert [step_id for step_id, _ in steps] == list(STEP_ORDER)
    assert dict(steps)["lyricist"] == "Lyricist: Composing in Telugu Mix"
    assert dict(steps)["final"] == "Orchestrator: Finalizing"


def test_02_initialize_sets_all_pending():
    tracker = ProgressTracker()
    tracker.initialize(build_steps("Telugu"), "Processing inputs...")

    snap = tracker.snapshot()
    assert snap.active is True
    assert snap.current_stage_id == "multimodal"
    assert snap.message == "Processing inputs..."
    assert all(status is StepStatus.PENDING for status in _statuses(tracker).values())


def test_03_transitions_and_snapshot():
    tracker = ProgressTracker()
    tracker.initialize(build_steps("Telugu"), "start")

    tracker.mark_active("emotion", "Feeling the vibe...")
    snap = tracker.snapshot()
    assert snap.current_stage_id == "emotion"
    assert snap.message == "Feeling the vibe..."
    assert snap.subtasks == tuple(STAGE_SUBTASKS["emotion"])
    assert _statuses(tracker)["emotion"] is StepStatus.ACTIVE

    tracker.mark_completed("emotion")
    assert _statuses(tracker)["emotion"] is StepStatus.COMPLETED
    assert tracker.completed_order() == ["emotion"]


def test_04_completed_step_never_moves_back():
    tracker = ProgressTracker()
    tracker.initialize(build_steps("Telugu"), "start")
    tracker.mark_active("research")
    tracker.mark_completed("research")

    tracker.mark_active("research", "again")

    assert _statuses(tracker)["research"] is StepStatus.COMPLETED
    assert tracker.snapshot().message == "start"
    assert tracker.history == [("research", StepStatus.ACTIVE), ("research", StepStatus.COMPLETED)]


def test_05_unknown_step_is_ignored():
    tracker = ProgressTracker()
    tracker.initialize(build_steps("Telugu"), "start")
    before = tracker.snapshot()

    tracker.mark_active("mixing")
    tracker.mark_completed("mastering")

    assert tracker.snapshot() == before


def test_06_reset_returns_to_idle():
    tracker = ProgressTracker()
    tracker.initialize(build_steps("Telugu"), "start")
    tracker.mark_active("multimodal")

    tracker.reset()

    snap = tracker.snapshot()
    assert snap.active is False
    assert snap.steps == ()
    assert snap.current_stage_id == IDLE_STAGE_ID
    assert snap.message == IDLE_MESSAGE


def test_07_subscribers_receive_snapshots():
    tracker = ProgressTracker()
    seen = []
    unsubscribe = tracker.subscribe(seen.append)

    tracker.initialize(build_steps("Telugu"), "start")
    tracker.set_message("halfway")
    unsubscribe()
    tracker.reset()

    assert [snap.message for snap in seen] == ["start", "halfway"]


def test_08_failing_subscriber_does_not_break_tracker():
    tracker = ProgressTracker()

    def broken(snapshot):
        raise RuntimeError("display gone")

    tracker.subscribe(broken)
    tracker.initialize(build_steps("Telugu"), "start")
    tracker.mark_active("multimodal")

    assert _statuses(tracker)["multimodal"] is StepStatus.ACTIVE


def test_09_schedule_reset_without_loop_is_immediate():
    tracker = ProgressTracker()
    tracker.initialize(build_steps("Telugu"), "start")

    tracker.schedule_reset(2.0)

    assert tracker.active is False


@pytest.mark.asyncio
async def test_10_schedule_reset_after_grace():
    tracker = ProgressTracker()
    tracker.initialize(build_steps("Telugu"), "start")

    tracker.schedule_reset(0.05)
    assert tracker.active is True

    await asyncio.sleep(0.1)
    assert tracker.active is False


@pytest.mark.asyncio
async def test_11_stale_reset_spares_new_run():
    """A reset scheduled for one run must not clear the next run."""
    tracker = ProgressTracker()
    tracker.initialize(build_steps("Telugu"), "first run")
    tracker.schedule_reset(0.05)

    tracker.initialize(build_steps("Hindi"), "second run")
    await asyncio.sleep(0.1)

    assert tracker.active is True
    assert tracker.snapshot().message == "second run"
