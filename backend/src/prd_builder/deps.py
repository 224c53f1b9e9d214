"""Dependency injection helpers."""

from __future__ import annotations

import httpx

from prd_builder.config import Settings, get_settings
from prd_builder.errors import ConfigurationError
from prd_builder.orchestration.session import AgentCaller, PRDSession, SessionHandle
from prd_builder.services.agent_client import AgentClient
from prd_builder.services.attachments import AttachmentManager, Uploader
from prd_builder.services.conversation import ConversationStore
from prd_builder.services.upload_client import UploadClient


def _checked_base_url(url: str, setting: str) -> str:
    """Reject base URLs httpx cannot use, naming the offending setting."""
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ConfigurationError(
            f"Invalid {setting}: {e}", context={"setting": setting, "value": url}
        ) from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(
            f"Invalid {setting}: expected an http(s) URL", context={"setting": setting, "value": url}
        )
    return url


def create_agent_client(settings: Settings | None = None) -> AgentClient:
    """Create agent client from settings."""
    _settings = settings or get_settings()
    return AgentClient(
        base_url=_checked_base_url(_settings.agent_base_url, "agent_base_url"),
        chat_path=_settings.agent_chat_path,
        api_key=_settings.agent_api_key,
        timeout=_settings.request_timeout,
    )


def create_upload_client(settings: Settings | None = None) -> UploadClient:
    """Create upload client from settings."""
    _settings = settings or get_settings()
    return UploadClient(
        base_url=_checked_base_url(_settings.resolved_upload_base_url, "upload_base_url"),
        upload_path=_settings.upload_path,
        api_key=_settings.agent_api_key,
        timeout=_settings.request_timeout,
    )


def create_session(
    settings: Settings | None = None,
    agent_client: AgentCaller | None = None,
    uploader: Uploader | None = None,
) -> PRDSession:
    """Create a fresh PRD session with default dependencies."""
    _settings = settings or get_settings()
    handle = SessionHandle(agent_id=_settings.agent_id)
    return PRDSession(
        handle=handle,
        agent_client=agent_client or create_agent_client(_settings),
        attachments=AttachmentManager(uploader or create_upload_client(_settings)),
        store=ConversationStore(session_id=handle.session_id),
    )
