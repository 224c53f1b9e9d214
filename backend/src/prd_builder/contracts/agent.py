"""Normalized agent reply contracts."""

from pydantic import BaseModel, Field

from prd_builder.contracts.stages import INITIAL_STAGE, StageKey


class ConfidenceAspect(BaseModel):
    """One scored aspect of the agent's self-assessment."""

    aspect: str = ""
    score: int = Field(default=0, ge=0, le=100)
    reasoning: str = ""


class AgentPayload(BaseModel):
    """Normalized view of one agent reply.

    Every field carries a safe default. ``current_stage`` is always a valid
    stage key for display; ``declared_stage`` holds the stage only when the
    agent actually announced a recognized one, and is what drives the
    conversation store.
    """

    message: str = ""
    current_stage: StageKey = INITIAL_STAGE
    declared_stage: StageKey | None = None
    review_action_needed: bool = False
    section_title: str = ""
    section_content: str = ""
    approved_sections: list[str] = Field(default_factory=list)
    gap_items: list[str] = Field(default_factory=list)
    overall_confidence: int = Field(default=0, ge=0, le=100)
    confidence_breakdown: list[ConfidenceAspect] = Field(default_factory=list)
    reflection: str = ""
    accuracy_flags: list[str] = Field(default_factory=list)

    @property
    def offers_review(self) -> bool:
        """Whether this reply asks the user to approve or amend a section."""
        return bool(self.review_action_needed and self.section_title and self.section_content)
