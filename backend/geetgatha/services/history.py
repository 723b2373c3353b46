"""Chat history and run-log persistence.

Each call opens its own session; background tasks must never share a
session with the request that scheduled them.
"""

import logging
from typing import Optional

from sqlalchemy import select

from geetgatha.db import async_session
from geetgatha.db.models import ChatMessageRecord, PipelineRunRecord
from geetgatha.orchestrator.pipeline import RunLog
from geetgatha.schemas.messages import ChatMessage, ResultMessage, SystemMessage

logger = logging.getLogger(__name__)


def _record_from_message(message: ChatMessage, run_id: Optional[str]) -> ChatMessageRecord:
    record = ChatMessageRecord(
        id=message.id,
        run_id=run_id,
        role=message.role,
        sender_agent=message.sender_agent,
        content=message.content,
        timestamp=message.timestamp,
    )
    if isinstance(message, ResultMessage):
        record.alternate_format = message.alternate_format
        record.style_prompt = message.style_prompt
        record.compliance_report = message.compliance_report.model_dump()
    elif isinstance(message, SystemMessage) and message.error_kind is not None:
        record.error_kind = message.error_kind.value
    return record


async def save_message(message: ChatMessage, run_id: Optional[str] = None) -> None:
    """Append one chat message."""
    async with async_session() as session:
        session.add(_record_from_message(message, run_id))
        await session.commit()
    logger.debug("Stored %s message %s", message.role, message.id)


async def save_run(run_log: RunLog, request_text: str, language_label: str) -> None:
    """Insert or update the run row for ``run_log``."""
    async with async_session() as session:
        record = await session.get(PipelineRunRecord, run_log.run_id)
        if record is None:
            record = PipelineRunRecord(id=run_log.run_id, started_at=run_log.started_at)
            session.add(record)
        record.request_text = request_text
        record.language_label = language_label
        record.outcome = run_log.outcome
        record.error_kind = run_log.error_kind.value if run_log.error_kind else None
        record.resolved_settings = run_log.resolved_settings
        record.step_durations = dict(run_log.steps)
        record.total_duration_seconds = run_log.total_duration_seconds
        record.completed_at = run_log.completed_at
        await session.commit()
    logger.info(f"Stored run {run_log.run_id} ({run_log.outcome})")


async def list_messages(limit: int = 50) -> list[ChatMessageRecord]:
    """Most recent messages, oldest first."""
    async with async_session() as session:
        result = await session.execute(
            select(ChatMessageRecord)
            .order_by(ChatMessageRecord.timestamp.desc())
            .limit(limit)
        )
        records = list(result.scalars().all())
    records.reverse()
    return records


async def list_runs(limit: int = 20) -> list[PipelineRunRecord]:
    """Most recent runs, newest first."""
    async with async_session() as session:
        result = await session.execute(
            select(PipelineRunRecord)
            .order_by(PipelineRunRecord.started_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
