"""Workflow stage definitions for the PRD review process."""

from typing import Literal

from pydantic import BaseModel, Field

StageKey = Literal[
    "information_gathering",
    "review_1_problem_goals",
    "review_2_use_cases",
    "review_3_requirements",
    "review_4_risks",
    "gap_analysis",
    "completed",
]

StageStatus = Literal["pending", "in_review", "approved"]


class StageDefinition(BaseModel):
    """One fixed position in the review workflow."""

    key: StageKey
    label: str
    short: str


STAGES: tuple[StageDefinition, ...] = (
    StageDefinition(key="information_gathering", label="Information Gathering", short="Gather"),
    StageDefinition(key="review_1_problem_goals", label="Problem & Goals", short="Review 1"),
    StageDefinition(key="review_2_use_cases", label="Use Cases", short="Review 2"),
    StageDefinition(key="review_3_requirements", label="Requirements & Analysis", short="Review 3"),
    StageDefinition(key="review_4_risks", label="Risks", short="Review 4"),
    StageDefinition(key="gap_analysis", label="Gap Analysis & Next Steps", short="Gaps"),
    StageDefinition(key="completed", label="Completed", short="Done"),
)

STAGE_KEYS: tuple[str, ...] = tuple(stage.key for stage in STAGES)

INITIAL_STAGE: StageKey = "information_gathering"
TERMINAL_STAGE: StageKey = "completed"

# Review stages whose approval is recorded under a named section
STAGE_SECTION_TITLES: dict[str, str] = {
    "review_1_problem_goals": "Problem Statement & Goals",
    "review_2_use_cases": "Use Cases",
    "review_3_requirements": "Requirements & Analysis",
    "review_4_risks": "Risks",
}

PRD_SECTION_TITLES: tuple[str, ...] = (
    "Problem Statement & Goals",
    "Use Cases",
    "Requirements & Analysis",
    "Risks",
    "Gap Analysis & Next Steps",
)


class StageProgress(BaseModel):
    """Projected display status of one stage."""

    key: StageKey
    label: str
    short: str
    index: int = Field(ge=0)
    status: StageStatus
    is_current: bool = False
    is_passed: bool = False


def is_stage_key(value: object) -> bool:
    """Return True when value is one of the seven stage keys."""
    return isinstance(value, str) and value in STAGE_KEYS


def get_stage_index(stage: str) -> int:
    """Position of a stage in the workflow, -1 when unknown."""
    try:
        return STAGE_KEYS.index(stage)
    except ValueError:
        return -1


def get_stage_label(stage: str) -> str:
    """Display label for a stage key, defaulting to the first stage's label."""
    index = get_stage_index(stage)
    if index < 0:
        return STAGES[0].label
    return STAGES[index].label


def stage_percent(stage: str) -> int:
    """Workflow completion implied by a stage position, 0-100."""
    index = get_stage_index(stage)
    if index < 0:
        return 0
    return round(index / (len(STAGES) - 1) * 100)
