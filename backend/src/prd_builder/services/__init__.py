"""Services package - export service abstractions."""

from prd_builder.services.agent_client import AgentClient
from prd_builder.services.attachments import AttachmentManager, format_file_size
from prd_builder.services.composer import ComposedTurn, compose_turn
from prd_builder.services.conversation import ConversationStore
from prd_builder.services.normalizer import extract_fallback_text, normalize_agent_reply
from prd_builder.services.progress import project_stages
from prd_builder.services.upload_client import UploadClient, parse_upload_response

__all__ = [
    "AgentClient",
    "AttachmentManager",
    "ComposedTurn",
    "ConversationStore",
    "UploadClient",
    "compose_turn",
    "extract_fallback_text",
    "format_file_size",
    "normalize_agent_reply",
    "parse_upload_response",
    "project_stages",
]
