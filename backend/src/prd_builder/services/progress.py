"""Stage progress projection."""

from prd_builder.contracts.conversation import ApprovedSection
from prd_builder.contracts.stages import (
    STAGE_SECTION_TITLES,
    STAGES,
    TERMINAL_STAGE,
    StageProgress,
    StageStatus,
    get_stage_index,
)


def project_stages(
    current_stage: str,
    approved_sections: list[ApprovedSection],
) -> list[StageProgress]:
    """Per-stage display status derived from the stage and the ledger."""
    approved_titles = {section.title for section in approved_sections}
    current_index = get_stage_index(current_stage)

    projected = []
    for index, stage in enumerate(STAGES):
        status: StageStatus = "pending"
        if stage.key == current_stage:
            status = "approved" if stage.key == TERMINAL_STAGE else "in_review"
        section_title = STAGE_SECTION_TITLES.get(stage.key)
        if section_title and section_title in approved_titles:
            status = "approved"
        projected.append(
            StageProgress(
                key=stage.key,
                label=stage.label,
                short=stage.short,
                index=index,
                status=status,
                is_current=stage.key == current_stage,
                is_passed=index < current_index,
            )
        )
    return projected
