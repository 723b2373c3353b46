"""SQLAlchemy 2.0 ORM models for chat history and pipeline run logs."""

from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Float, Index, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class ChatMessageRecord(Base):
    """One message appended to the chat stream (user, model or system)."""
    __tablename__ = "chat_messages"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    run_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    role: Mapped[str] = mapped_column(String(20))
    sender_agent: Mapped[str] = mapped_column(String(50), default="ORCHESTRATOR")
    content: Mapped[str] = mapped_column(Text)
    alternate_format: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    style_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    compliance_report: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    error_kind: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    timestamp: Mapped[datetime] = mapped_column()
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    __table_args__ = (
        Index("idx_chat_messages_timestamp", "timestamp"),
    )


class PipelineRunRecord(Base):
    """Outcome and step timings of one pipeline run."""
    __tablename__ = "pipeline_runs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    request_text: Mapped[str] = mapped_column(Text)
    language_label: Mapped[str] = mapped_column(String(100))
    outcome: Mapped[str] = mapped_column(String(20), default="running")
    error_kind: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    resolved_settings: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    step_durations: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    total_duration_seconds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    started_at: Mapped[datetime] = mapped_column()
    completed_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)
