"""HTTP API tests with in-process stages and the test database."""

import asyncio
import base64

import pytest
from fastapi import BackgroundTasks, HTTPException
from fastapi.testclient import TestClient

from conftest import POLISHED_LYRICS, SUNO_LYRICS, RecordingStages
from geetgatha.api.app import app
from geetgatha.api.routes import GenerateRequest, generate_song, get_stage_factory, get_tracker
from geetgatha.db import init_database, shutdown
from geetgatha.errors import ErrorKind, PipelineError
from geetgatha.orchestrator.state import ProgressTracker, build_steps


@pytest.fixture
def api_tracker():
    return ProgressTracker()


@pytest.fixture
def client(api_tracker):
    stages = RecordingStages()
    app.dependency_overrides[get_stage_factory] = lambda: (lambda credential: stages.build())
    app.dependency_overrides[get_tracker] = lambda: api_tracker
    with TestClient(app) as test_client:
        test_client.stages = stages
        yield test_client
    app.dependency_overrides.clear()


def _generate(client, **body):
    payload = {"request_text": "A song about the first monsoon rain", "api_key": "test-key"}
    payload.update(body)
    return client.post("/api/generate", json=payload)


# ---------------------------------------------------------------------------
# POST /api/generate
# ---------------------------------------------------------------------------

def test_01_generate_runs_pipeline_and_stores_history(client):
    response = _generate(client)

    assert response.status_code == 202
    body = response.json()
    assert body["status"] == "accepted"
    assert body["status_url"] == "/api/status"

    # TestClient runs background tasks before returning
    assert client.stages.calls[0] == "multimodal"
    assert client.stages.calls[-1] == "formatter"

    messages = client.get("/api/messages", params={"limit": 2}).json()
    user, result = messages
    assert user["id"] == body["message_id"]
    assert user["role"] == "user"
    assert user["sender_agent"] == "USER"
    assert result["role"] == "model"
    assert result["content"] == POLISHED_LYRICS
    assert result["alternate_format"] == SUNO_LYRICS
    assert result["compliance_report"]["originality_score"] == 92
    assert result["run_id"]

    runs = client.get("/api/runs", params={"limit": 1}).json()
    assert runs[0]["run_id"] == result["run_id"]
    assert runs[0]["outcome"] == "completed"
    assert runs[0]["language_label"] == "Telugu"
    assert set(runs[0]["step_durations"]) == {
        "multimodal", "emotion", "research", "lyricist", "compliance", "review", "formatter"
    }
    assert runs[0]["resolved_settings"]["style"] == "Melody"


def test_02_missing_api_key_is_rejected(client):
    response = _generate(client, api_key=None)

    assert response.status_code == 401
    assert client.stages.calls == []


def test_03_busy_tracker_returns_conflict(client, api_tracker):
    api_tracker.initialize(build_steps("Telugu"), "Processing inputs...")

    response = _generate(client)

    assert response.status_code == 409
    assert client.stages.calls == []


def test_04_bad_media_payload_is_rejected(client):
    response = _generate(client, image_base64="not base64!!")

    assert response.status_code == 422


def test_05_media_is_decoded_for_multimodal(client):
    response = _generate(client, audio_base64=base64.b64encode(b"webm-bytes").decode())

    assert response.status_code == 202
    _, image, audio = client.stages.args["multimodal"]
    assert image is None
    assert audio.data == b"webm-bytes"
    assert audio.mime_type == "audio/webm"


def test_06_auth_failure_is_stored_as_system_message(api_tracker):
    stages = RecordingStages()
    failing = stages.build(lyricist=PipelineError("Invalid API Key. Please check your settings.", ErrorKind.AUTH))
    app.dependency_overrides[get_stage_factory] = lambda: (lambda credential: failing)
    app.dependency_overrides[get_tracker] = lambda: api_tracker
    try:
        with TestClient(app) as test_client:
            response = _generate(test_client, api_key="revoked-key")
            assert response.status_code == 202

            last = test_client.get("/api/messages", params={"limit": 1}).json()[0]
            assert last["role"] == "system"
            assert last["error_kind"] == "AUTH"
            assert last["content"] == "⚠️ Invalid API Key. Please check your settings."

            run = test_client.get("/api/runs", params={"limit": 1}).json()[0]
            assert run["outcome"] == "failed"
            assert run["error_kind"] == "AUTH"
    finally:
        app.dependency_overrides.clear()

    assert api_tracker.active is False


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------

def test_07_status_is_idle_between_runs(client):
    _generate(client)

    status = client.get("/api/status").json()
    assert status["active"] is False
    assert status["current_stage_id"] == "chat"
    assert status["steps"] == []


def test_08_status_reports_active_step(client, api_tracker):
    api_tracker.initialize(build_steps("Hindi"), "Processing inputs...")
    api_tracker.mark_active("research", "Analyzing context...")

    status = client.get("/api/status").json()

    assert status["active"] is True
    assert status["current_stage_id"] == "research"
    steps = {step["id"]: step["status"] for step in status["steps"]}
    assert steps["research"] == "active"
    assert steps["multimodal"] == "pending"


def test_09_health(client, api_tracker):
    body = client.get("/api/health").json()

    assert body["status"] == "ok"
    assert body["busy"] is False
    assert body["text_model"]


@pytest.mark.parametrize("path,limit", [("/api/messages", 0), ("/api/messages", 501), ("/api/runs", 201)])
def test_10_limits_are_validated(client, path, limit):
    assert client.get(path, params={"limit": limit}).status_code == 422


# ---------------------------------------------------------------------------
# Run serialization
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_11_concurrent_requests_accept_only_one():
    """Two requests racing through the message insert: one runs, one gets 409."""
    await init_database()
    run_tracker = ProgressTracker()
    stages = RecordingStages()
    request = GenerateRequest(request_text="Two at once", api_key="test-key")
    queues = [BackgroundTasks(), BackgroundTasks()]

    try:
        results = await asyncio.gather(
            *(generate_song(request, queue, lambda credential: stages.build(), run_tracker) for queue in queues),
            return_exceptions=True,
        )
    finally:
        await shutdown()

    accepted = [r for r in results if not isinstance(r, BaseException)]
    rejected = [r for r in results if isinstance(r, HTTPException)]
    assert len(accepted) == 1
    assert accepted[0].status == "accepted"
    assert len(rejected) == 1
    assert rejected[0].status_code == 409
    assert sum(len(queue.tasks) for queue in queues) == 1
    assert run_tracker.active is True
    assert run_tracker.snapshot().message == "Queued..."
