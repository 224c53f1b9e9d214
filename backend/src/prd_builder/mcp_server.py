"""MCP server exposing the PRD conversation as tools."""

from __future__ import annotations

from typing import Any, Optional

from prd_builder.config import get_settings
from prd_builder.contracts.attachments import UploadSource
from prd_builder.contracts.conversation import Turn
from prd_builder.logging_config import configure_logging, get_logger
from prd_builder.orchestration.session import PRDSession
from prd_builder.render import export_prd, render_progress, render_session, render_turn

logger = get_logger(__name__)


class PRDBuilderServer:
    """MCP server holding a single PRD session."""

    def __init__(self, session: PRDSession | None = None) -> None:
        self._session = session

    @property
    def session(self) -> PRDSession:
        if self._session is None:
            from prd_builder.deps import create_session

            self._session = create_session()
        return self._session

    async def start_session(self) -> dict[str, Any]:
        """Open the conversation and return the agent's greeting."""
        turn = await self.session.start()
        return self._result(turn is not None, turn)

    async def send_message(self, text: str = "") -> dict[str, Any]:
        """
        Send a message with any uploaded attachments.

        Args:
            text: Free text; may be empty when documents are attached

        Returns:
            Result flag, the reply turn, and the refreshed session view
        """
        turn = await self.session.send(text)
        return self._result(turn is not None, turn)

    async def attach_files(self, paths: list[str]) -> dict[str, Any]:
        """Read local files and upload them as one batch."""
        try:
            sources = [UploadSource.from_path(path) for path in paths]
        except OSError as e:
            logger.warning("attach_read_failed", error=type(e).__name__)
            return {"success": False, "error": f"Could not read file: {e}"}
        files = await self.session.attach(sources)
        return {
            "success": True,
            "files": [f.model_dump() for f in files],
            "upload_progress": self.session.attachments.upload_progress,
        }

    def remove_attachment(self, file_id: str) -> dict[str, Any]:
        return {"success": self.session.attachments.remove(file_id)}

    def clear_attachments(self) -> dict[str, Any]:
        self.session.attachments.clear()
        return {"success": True}

    async def approve_section(self) -> dict[str, Any]:
        """Approve the section currently under review."""
        turn = await self.session.approve()
        return self._result(turn is not None, turn)

    async def request_changes(self, feedback: str) -> dict[str, Any]:
        """Send change requests for the section under review."""
        turn = await self.session.request_changes(feedback)
        return self._result(turn is not None, turn)

    def get_progress(self) -> dict[str, Any]:
        return render_progress(self.session)

    def get_conversation(self) -> dict[str, Any]:
        return render_session(self.session)

    def export_prd(self) -> dict[str, Any]:
        approved = self.session.store.approved_sections()
        return {"markdown": export_prd(approved), "sections": len(approved)}

    def _result(self, accepted: bool, turn: Turn | None) -> dict[str, Any]:
        return {
            "success": accepted,
            "turn": render_turn(turn) if turn is not None else None,
            "session": render_session(self.session),
        }


# Global MCP server instance
_mcp_server: Optional[PRDBuilderServer] = None


def get_mcp_server() -> PRDBuilderServer:
    """Get or create MCP server instance."""
    global _mcp_server
    if _mcp_server is None:
        _mcp_server = PRDBuilderServer()
    return _mcp_server


def create_fastmcp_server() -> Any | None:
    """Create FastMCP server wrapping PRDBuilderServer methods."""
    try:
        from fastmcp import FastMCP
    except ImportError:
        logger.warning("fastmcp_unavailable")
        return None

    mcp = FastMCP("PRD Builder")
    server = get_mcp_server()

    @mcp.tool()
    async def start_session() -> dict:  # type: ignore[type-arg]
        """Start the PRD conversation and get the agent's first message."""
        return await server.start_session()

    @mcp.tool()
    async def send_message(text: str = "") -> dict:  # type: ignore[type-arg]
        """Send a message to the PRD agent, including any uploaded documents."""
        return await server.send_message(text)

    @mcp.tool()
    async def attach_file(paths: list[str]) -> dict:  # type: ignore[type-arg]
        """Upload local documents to reference in the next message."""
        return await server.attach_files(paths)

    @mcp.tool()
    def remove_attachment(file_id: str) -> dict:  # type: ignore[type-arg]
        """Remove one pending attachment."""
        return server.remove_attachment(file_id)

    @mcp.tool()
    def clear_attachments() -> dict:  # type: ignore[type-arg]
        """Remove all pending attachments."""
        return server.clear_attachments()

    @mcp.tool()
    async def approve_section() -> dict:  # type: ignore[type-arg]
        """Approve the PRD section currently under review."""
        return await server.approve_section()

    @mcp.tool()
    async def request_changes(feedback: str) -> dict:  # type: ignore[type-arg]
        """Request changes to the PRD section currently under review."""
        return await server.request_changes(feedback)

    @mcp.tool()
    def get_progress() -> dict:  # type: ignore[type-arg]
        """Show workflow stages and approved sections."""
        return server.get_progress()

    @mcp.tool()
    def get_conversation() -> dict:  # type: ignore[type-arg]
        """Show the full conversation and session state."""
        return server.get_conversation()

    @mcp.tool()
    def export_prd() -> dict:  # type: ignore[type-arg]
        """Export approved sections as a markdown PRD."""
        return server.export_prd()

    return mcp


def main() -> None:
    configure_logging(get_settings().log_level)
    mcp = create_fastmcp_server()
    if mcp:
        mcp.run()


if __name__ == "__main__":
    main()
