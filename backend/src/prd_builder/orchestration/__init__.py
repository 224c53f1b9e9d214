"""Orchestration package."""

from prd_builder.orchestration.session import PRDSession, SessionHandle, new_session_id

__all__ = ["PRDSession", "SessionHandle", "new_session_id"]
