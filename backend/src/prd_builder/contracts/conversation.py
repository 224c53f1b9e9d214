"""Conversation contracts for the PRD chat log."""

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

from prd_builder.contracts.agent import AgentPayload
from prd_builder.contracts.stages import INITIAL_STAGE, StageKey


class TurnAttachment(BaseModel):
    """File reference shown on a user turn."""

    name: str
    human_size: str


class Turn(BaseModel):
    """Single turn in a conversation."""

    id: str
    role: Literal["user", "agent"]
    content: str
    agent_payload: AgentPayload | None = None
    attachments: list[TurnAttachment] = Field(default_factory=list)
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def display_text(self) -> str:
        """Text shown in the bubble: the agent's message when structured."""
        if self.agent_payload is not None:
            return self.agent_payload.message
        return self.content


class ApprovedSection(BaseModel):
    """Ledger entry for an approved PRD section."""

    title: str
    content: str = ""


class ConversationState(BaseModel):
    """Snapshot of a PRD conversation."""

    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    turns: list[Turn] = Field(default_factory=list)
    current_stage: StageKey = INITIAL_STAGE
    approved_sections: list[ApprovedSection] = Field(default_factory=list)
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    last_active: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
