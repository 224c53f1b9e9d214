"""Contracts package - export key models."""

from prd_builder.contracts.agent import AgentPayload, ConfidenceAspect
from prd_builder.contracts.attachments import AttachedFile, UploadResult, UploadSource
from prd_builder.contracts.conversation import (
    ApprovedSection,
    ConversationState,
    Turn,
    TurnAttachment,
)
from prd_builder.contracts.stages import (
    INITIAL_STAGE,
    PRD_SECTION_TITLES,
    STAGE_SECTION_TITLES,
    STAGES,
    TERMINAL_STAGE,
    StageDefinition,
    StageKey,
    StageProgress,
    StageStatus,
)

__all__ = [
    "AgentPayload",
    "ApprovedSection",
    "AttachedFile",
    "ConfidenceAspect",
    "ConversationState",
    "INITIAL_STAGE",
    "PRD_SECTION_TITLES",
    "STAGES",
    "STAGE_SECTION_TITLES",
    "StageDefinition",
    "StageKey",
    "StageProgress",
    "StageStatus",
    "TERMINAL_STAGE",
    "Turn",
    "TurnAttachment",
    "UploadResult",
    "UploadSource",
]
