"""Outgoing turn composition with fixed document-analysis prompts."""

from pydantic import BaseModel, Field

from prd_builder.contracts.attachments import AttachedFile
from prd_builder.contracts.conversation import TurnAttachment

UPLOAD_DISPLAY_TEXT = "Uploaded documents for analysis"

PRD_FACETS: tuple[str, ...] = (
    "Product name and a one-paragraph overview",
    "The problem being solved and who experiences it",
    "Target users and personas",
    "Goals and measurable success metrics",
    "Core features and functional requirements",
    "Non-functional requirements (performance, security, compliance)",
    "Constraints, dependencies and assumptions",
    "Known risks and open questions",
)

EXTRACTION_PROMPT = (
    "I have uploaded documents describing my product. Please analyze them "
    "thoroughly and extract everything relevant to a Product Requirements "
    "Document. Specifically, identify:\n\n"
    + "\n".join(f"{i}. {facet}" for i, facet in enumerate(PRD_FACETS, 1))
    + "\n\nSummarize what you found for each item, call out anything the "
    "documents do not cover, and then continue with the PRD workflow."
)

ATTACHMENT_CONTEXT = "I have uploaded documents for additional context. Please use them along with my message."

CONDENSED_CHECKLIST = (
    "When analyzing the documents, extract: "
    + "; ".join(facet.split(" (")[0].lower() for facet in PRD_FACETS)
    + "."
)


class ComposedTurn(BaseModel):
    """What a send transmits to the agent and what it shows in the log."""

    transmit_text: str
    display_text: str
    asset_ids: list[str] = Field(default_factory=list)
    attachments: list[TurnAttachment] = Field(default_factory=list)


def compose_turn(text: str, attachments: list[AttachedFile] | None = None) -> ComposedTurn | None:
    """
    Build the outgoing message for a send action.

    Only attachments that finished uploading are referenced; files still
    uploading or in error are dropped from this send.

    Args:
        text: Free text typed by the user
        attachments: Files currently attached to the composer

    Returns:
        ComposedTurn, or None when there is nothing to send
    """
    completed = [f for f in attachments or [] if f.uploaded and f.asset_id]
    has_text = bool(text.strip())

    if not completed:
        if not has_text:
            return None
        return ComposedTurn(transmit_text=text, display_text=text)

    asset_ids = [f.asset_id for f in completed if f.asset_id]
    turn_attachments = [TurnAttachment(name=f.name, human_size=f.human_size) for f in completed]

    if not has_text:
        return ComposedTurn(
            transmit_text=EXTRACTION_PROMPT,
            display_text=UPLOAD_DISPLAY_TEXT,
            asset_ids=asset_ids,
            attachments=turn_attachments,
        )

    return ComposedTurn(
        transmit_text=f"{ATTACHMENT_CONTEXT}\n\n{text}\n\n{CONDENSED_CHECKLIST}",
        display_text=text,
        asset_ids=asset_ids,
        attachments=turn_attachments,
    )
