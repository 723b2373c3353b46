"""Chat messages emitted by the orchestrator to its result sink."""

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

from geetgatha.errors import ErrorKind
from geetgatha.schemas.analysis import ComplianceReport


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(BaseModel):
    """Common envelope for anything appended to the chat stream."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "model", "system"]
    content: str
    sender_agent: str = "ORCHESTRATOR"
    timestamp: datetime = Field(default_factory=_utcnow)


class ResultMessage(ChatMessage):
    """Successful pipeline output.

    primary_content holds the polished lyrics (plus a compliance warning when
    originality is low); alternate_format is the Suno.com-formatted variant.
    """

    role: Literal["model"] = "model"
    alternate_format: str
    style_prompt: str = ""
    compliance_report: ComplianceReport

    @property
    def primary_content(self) -> str:
        return self.content


class SystemMessage(ChatMessage):
    """User-facing description of a failed run."""

    role: Literal["system"] = "system"
    error_kind: Optional[ErrorKind] = None
