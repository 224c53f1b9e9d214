"""Session controller - drives one PRD conversation against the agent."""

import time
import uuid
from typing import Any, Literal, Protocol

from pydantic import BaseModel, Field

from prd_builder.contracts.agent import AgentPayload
from prd_builder.contracts.attachments import AttachedFile, UploadSource
from prd_builder.contracts.conversation import Turn
from prd_builder.contracts.stages import TERMINAL_STAGE
from prd_builder.errors import AgentCallError
from prd_builder.logging_config import get_logger, session_context
from prd_builder.services.attachments import AttachmentManager
from prd_builder.services.composer import compose_turn
from prd_builder.services.conversation import ConversationStore
from prd_builder.services.normalizer import extract_fallback_text, normalize_agent_reply

logger = get_logger(__name__)

GREETING_MESSAGE = "Hello, I want to build a PRD"
APPROVAL_MESSAGE = "I approve this section"
CHANGE_REQUEST_TEMPLATE = "I would like the following changes: {feedback}"
APOLOGY_TEXT = "Sorry, something went wrong. Please try again."
ERROR_BANNER = "Failed to get a response. Please try again."

ReviewMode = Literal["buttons", "feedback"]


class AgentCaller(Protocol):
    async def call(
        self,
        message: str,
        agent_id: str,
        session_id: str,
        asset_ids: list[str] | None = None,
    ) -> dict[str, Any]: ...


def new_session_id() -> str:
    """Random session token, or a millisecond timestamp without an OS random source."""
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        return str(int(time.time() * 1000))


class SessionHandle(BaseModel):
    """Identity threaded through every agent call of one session."""

    session_id: str = Field(default_factory=new_session_id)
    agent_id: str


class PRDSession:
    """One PRD-building conversation.

    At most one agent call is in flight: while ``busy`` is set, send,
    approve and request-changes are ignored. Calls are single-shot with no
    retry and no timeout of their own.
    """

    def __init__(
        self,
        handle: SessionHandle,
        agent_client: AgentCaller,
        attachments: AttachmentManager,
        store: ConversationStore | None = None,
    ):
        self.handle = handle
        self.agent = agent_client
        self.attachments = attachments
        self.store = store or ConversationStore(session_id=handle.session_id)
        self.busy = False
        self.error_message = ""
        self.review_mode: ReviewMode = "buttons"
        self._started = False

    @property
    def session_id(self) -> str:
        return self.handle.session_id

    @property
    def is_completed(self) -> bool:
        return self.store.current_stage() == TERMINAL_STAGE

    async def start(self) -> Turn | None:
        """Open the conversation with the hidden greeting, once."""
        if self._started or self.busy:
            return None
        self._started = True
        return await self._dispatch(GREETING_MESSAGE)

    async def send(self, text: str = "") -> Turn | None:
        """
        Send typed text plus any uploaded attachments.

        Returns:
            The agent (or fallback) turn, or None when nothing was sent
        """
        if self.busy:
            logger.info("send_ignored", reason="busy")
            return None
        composed = compose_turn(text, self.attachments.files())
        if composed is None:
            return None
        self.attachments.clear()
        self.store.append_user_turn(composed.display_text, composed.attachments)
        return await self._dispatch(composed.transmit_text, composed.asset_ids)

    def pending_review(self) -> AgentPayload | None:
        """Payload of the latest agent turn when it asks for a review."""
        turn = self.store.latest_agent_turn()
        if turn is None or turn.agent_payload is None:
            return None
        if not turn.agent_payload.offers_review:
            return None
        return turn.agent_payload

    async def approve(self) -> Turn | None:
        """Approve the section under review and tell the agent."""
        if self.busy:
            logger.info("approve_ignored", reason="busy")
            return None
        review = self.pending_review()
        if review is None:
            return None
        self.store.record_approval(review.section_title, review.section_content)
        self.review_mode = "buttons"
        return await self._send_text(APPROVAL_MESSAGE)

    def open_feedback(self) -> None:
        if self.pending_review() is not None:
            self.review_mode = "feedback"

    def cancel_feedback(self) -> None:
        self.review_mode = "buttons"

    async def request_changes(self, feedback: str) -> Turn | None:
        """Ask the agent to revise the section under review."""
        if self.busy:
            logger.info("request_changes_ignored", reason="busy")
            return None
        if not feedback.strip() or self.pending_review() is None:
            return None
        turn = await self._send_text(CHANGE_REQUEST_TEMPLATE.format(feedback=feedback))
        self.review_mode = "buttons"
        return turn

    async def attach(self, sources: list[UploadSource]) -> list[AttachedFile]:
        """Upload files for the next send. Independent of the busy flag."""
        return await self.attachments.attach(sources)

    async def _send_text(self, text: str) -> Turn:
        self.store.append_user_turn(text)
        return await self._dispatch(text)

    async def _dispatch(self, message: str, asset_ids: list[str] | None = None) -> Turn:
        """Make the single agent call for a turn and record its outcome."""
        self.busy = True
        self.error_message = ""
        try:
            with session_context(self.session_id):
                try:
                    reply = await self.agent.call(
                        message,
                        self.handle.agent_id,
                        self.session_id,
                        asset_ids or None,
                    )
                except AgentCallError as e:
                    logger.warning("agent_call_failed", error_code=e.code, error=e.message)
                    return self._record_failure()
                except Exception as e:
                    logger.error("agent_call_crashed", error_type=type(e).__name__, error=str(e))
                    return self._record_failure()
                return self._record_reply(reply)
        finally:
            self.busy = False

    def _record_failure(self) -> Turn:
        self.error_message = ERROR_BANNER
        return self.store.append_fallback_turn(APOLOGY_TEXT)

    def _record_reply(self, reply: dict[str, Any]) -> Turn:
        payload = normalize_agent_reply(reply)
        if payload is None:
            logger.warning("agent_reply_unusable")
            self.error_message = ERROR_BANNER
            return self.store.append_fallback_turn(extract_fallback_text(reply))
        self.review_mode = "buttons"
        return self.store.append_agent_turn(payload)
