"""In-memory conversation store for one PRD session."""

import itertools
import threading
from datetime import datetime, timezone

from prd_builder.contracts.agent import AgentPayload
from prd_builder.contracts.conversation import (
    ApprovedSection,
    ConversationState,
    Turn,
    TurnAttachment,
)
from prd_builder.contracts.stages import StageKey
from prd_builder.errors import SchemaError
from prd_builder.logging_config import get_logger

logger = get_logger(__name__)


class ConversationStore:
    """Append-only turn log with the derived stage and approved-sections ledger.

    The agent is the authority on workflow position: any recognized stage it
    declares is accepted, in any order. The ledger is first-write-wins per
    title, whichever path (agent title list or explicit approval) writes it.
    Readers always receive copies.
    """

    def __init__(self, session_id: str | None = None):
        self._state = ConversationState()
        if session_id:
            self._state.session_id = session_id
        self._sequence = itertools.count(1)
        self._lock = threading.Lock()

    @property
    def session_id(self) -> str:
        return self._state.session_id

    def append_user_turn(
        self,
        text: str,
        attachments: list[TurnAttachment] | None = None,
    ) -> Turn:
        """Append a user turn. Requires text or at least one attachment."""
        attachments = list(attachments or [])
        if not text and not attachments:
            raise SchemaError(
                "User turn needs text or attachments",
                context={"session_id": self.session_id},
            )
        return self._append(Turn(id=self._next_id(), role="user", content=text, attachments=attachments))

    def append_agent_turn(self, payload: AgentPayload) -> Turn:
        """Append an agent turn and fold its stage and approvals into state."""
        with self._lock:
            turn = Turn(
                id=self._next_id(),
                role="agent",
                content=payload.message,
                agent_payload=payload.model_copy(deep=True),
            )
            self._state.turns.append(turn)
            if payload.declared_stage is not None and payload.declared_stage != self._state.current_stage:
                logger.info(
                    "stage_changed",
                    previous=self._state.current_stage,
                    current=payload.declared_stage,
                )
                self._state.current_stage = payload.declared_stage
            for title in payload.approved_sections:
                self._record_section(title, "")
            self._touch()
            return turn.model_copy(deep=True)

    def append_fallback_turn(self, text: str) -> Turn:
        """Append an agent turn with plain text and no structured payload."""
        return self._append(Turn(id=self._next_id(), role="agent", content=text))

    def record_approval(self, title: str, content: str) -> bool:
        """Record an explicitly approved section. Returns False if already present."""
        with self._lock:
            return self._record_section(title, content)

    def current_stage(self) -> StageKey:
        with self._lock:
            return self._state.current_stage

    def approved_sections(self) -> list[ApprovedSection]:
        """Ledger entries ordered by first approval."""
        with self._lock:
            return [section.model_copy() for section in self._state.approved_sections]

    def turns(self) -> list[Turn]:
        with self._lock:
            return [turn.model_copy(deep=True) for turn in self._state.turns]

    def latest_agent_turn(self) -> Turn | None:
        with self._lock:
            for turn in reversed(self._state.turns):
                if turn.role == "agent":
                    return turn.model_copy(deep=True)
        return None

    def snapshot(self) -> ConversationState:
        with self._lock:
            return self._state.model_copy(deep=True)

    def _append(self, turn: Turn) -> Turn:
        with self._lock:
            self._state.turns.append(turn)
            self._touch()
            return turn.model_copy(deep=True)

    def _record_section(self, title: str, content: str) -> bool:
        """Insert a ledger entry unless the title exists. Must be called with lock held."""
        if not title:
            return False
        if any(section.title == title for section in self._state.approved_sections):
            return False
        self._state.approved_sections.append(ApprovedSection(title=title, content=content))
        logger.info("section_approved", title=title, has_content=bool(content))
        return True

    def _next_id(self) -> str:
        return f"turn-{next(self._sequence):05d}"

    def _touch(self) -> None:
        self._state.last_active = datetime.now(timezone.utc).isoformat()
