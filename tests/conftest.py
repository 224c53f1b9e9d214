"""Shared fakes for the agent and upload collaborators."""

import asyncio
import json
from typing import Any

import pytest

from prd_builder.contracts.attachments import UploadResult, UploadSource


def make_reply(**fields: Any) -> dict[str, Any]:
    """Successful agent reply carrying fields as a JSON-encoded result."""
    return {"success": True, "response": {"result": json.dumps(fields)}}


class FakeAgent:
    """Agent collaborator returning scripted replies (or raising them)."""

    def __init__(self, replies: list[Any] | None = None):
        self.replies = list(replies or [])
        self.calls: list[dict[str, Any]] = []
        self.gate: asyncio.Event | None = None

    async def call(
        self,
        message: str,
        agent_id: str,
        session_id: str,
        asset_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        self.calls.append(
            {
                "message": message,
                "agent_id": agent_id,
                "session_id": session_id,
                "asset_ids": asset_ids,
            }
        )
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0) if self.replies else make_reply(message="ok")
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeUploader:
    """Upload collaborator keyed by file name."""

    def __init__(self, outcomes: dict[str, Any] | None = None):
        self.outcomes = dict(outcomes or {})
        self.uploaded: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}

    async def upload(self, source: UploadSource) -> UploadResult:
        self.uploaded.append(source.name)
        gate = self.gates.get(source.name)
        if gate is not None:
            await gate.wait()
        outcome = self.outcomes.get(source.name, UploadResult(success=True, asset_ids=[f"asset-{source.name}"]))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def reply_factory():
    return make_reply


@pytest.fixture
def fake_agent() -> FakeAgent:
    return FakeAgent()


@pytest.fixture
def fake_uploader() -> FakeUploader:
    return FakeUploader()


@pytest.fixture
def source_factory():
    def _make(name: str, size: int = 10) -> UploadSource:
        return UploadSource(name=name, data=b"x" * size, content_type="text/plain")

    return _make
