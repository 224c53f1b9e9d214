"""Agent service client over HTTP."""

from typing import Any

import httpx

from prd_builder.errors import AgentCallError
from prd_builder.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_AGENT_BASE_URL = "http://localhost:8000"
DEFAULT_AGENT_CHAT_PATH = "/api/agent"


class AgentClient:
    """Single-shot calls to the PRD drafting agent.

    No retry is attempted: re-sending a turn the agent may already have
    processed is not known to be safe.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_AGENT_BASE_URL,
        chat_path: str = DEFAULT_AGENT_CHAT_PATH,
        api_key: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url
        self.chat_path = chat_path
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _load_client(self) -> httpx.AsyncClient:
        """Create the httpx client lazily."""
        if self._client is None:
            headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
            )
        return self._client

    async def call(
        self,
        message: str,
        agent_id: str,
        session_id: str,
        asset_ids: list[str] | None = None,
    ) -> dict[str, Any]:
        """
        Send one message to the agent.

        Args:
            message: Text to transmit
            agent_id: Identifier of the agent to address
            session_id: Session token, unchanged for the session's lifetime
            asset_ids: Uploaded asset identifiers referenced by this turn

        Returns:
            Decoded reply body, passed unchanged to the normalizer

        Raises:
            AgentCallError: transport failure, error status, or non-JSON body
        """
        body: dict[str, Any] = {
            "message": message,
            "agent_id": agent_id,
            "session_id": session_id,
        }
        if asset_ids:
            body["assets"] = list(asset_ids)

        logger.info("agent_call_start", message=message, assets=len(asset_ids or []))
        try:
            response = await self._load_client().post(self.chat_path, json=body)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise AgentCallError(
                f"Agent call returned HTTP {e.response.status_code}",
                context={"status_code": e.response.status_code, "agent_id": agent_id},
            ) from e
        except httpx.HTTPError as e:
            raise AgentCallError(
                f"Agent call failed: {type(e).__name__}",
                context={"agent_id": agent_id},
            ) from e
        except httpx.InvalidURL as e:
            raise AgentCallError(
                f"Agent URL is invalid: {e}",
                context={"agent_id": agent_id, "base_url": self.base_url},
                retry_hint=False,
            ) from e
        except ValueError as e:
            raise AgentCallError(
                "Agent reply was not valid JSON",
                context={"agent_id": agent_id},
                retry_hint=False,
            ) from e

        logger.info("agent_call_done", success=isinstance(data, dict) and data.get("success") is True)
        return data if isinstance(data, dict) else {"success": False, "response": {}}

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
