"""Presentation helpers: turn the session state into display-ready data."""

from typing import Any

from pydantic import BaseModel

from prd_builder.contracts.conversation import ApprovedSection, Turn
from prd_builder.contracts.stages import PRD_SECTION_TITLES, get_stage_label, stage_percent
from prd_builder.orchestration.session import PRDSession
from prd_builder.services.progress import project_stages

EMPTY_EXPORT_TEXT = "No approved sections yet."
SECTION_SEPARATOR = "\n\n---\n\n"


class PreviewSection(BaseModel):
    """One slot of the PRD preview panel."""

    title: str
    approved: bool
    content: str = ""


def export_prd(approved_sections: list[ApprovedSection]) -> str:
    """Markdown document of the approved sections, in approval order."""
    if not approved_sections:
        return EMPTY_EXPORT_TEXT
    return SECTION_SEPARATOR.join(f"# {s.title}\n\n{s.content}" for s in approved_sections)


def prd_preview(approved_sections: list[ApprovedSection]) -> list[PreviewSection]:
    """The five PRD sections, each approved with content or pending."""
    by_title = {s.title: s for s in approved_sections}
    preview = []
    for title in PRD_SECTION_TITLES:
        section = by_title.get(title)
        preview.append(
            PreviewSection(
                title=title,
                approved=section is not None,
                content=section.content if section else "",
            )
        )
    return preview


def approved_counter(approved_sections: list[ApprovedSection]) -> str:
    return f"{len(approved_sections)}/{len(PRD_SECTION_TITLES)}"


def render_turn(turn: Turn) -> dict[str, Any]:
    """Display record of one turn, with agent sub-panels when present."""
    rendered: dict[str, Any] = {
        "id": turn.id,
        "role": turn.role,
        "text": turn.display_text,
        "timestamp": turn.timestamp,
    }
    if turn.attachments:
        rendered["attachments"] = [a.model_dump() for a in turn.attachments]

    payload = turn.agent_payload
    if payload is None:
        return rendered

    if payload.offers_review:
        rendered["review"] = {"title": payload.section_title, "content": payload.section_content}
    if payload.gap_items:
        rendered["gap_items"] = list(payload.gap_items)
    if payload.overall_confidence or payload.confidence_breakdown:
        rendered["confidence"] = {
            "overall": payload.overall_confidence,
            "breakdown": [c.model_dump() for c in payload.confidence_breakdown],
        }
    if payload.reflection:
        rendered["reflection"] = payload.reflection
    if payload.accuracy_flags:
        rendered["accuracy_flags"] = list(payload.accuracy_flags)
    return rendered


def render_progress(session: PRDSession) -> dict[str, Any]:
    """Stage tracker, approved counter and completion state."""
    stage = session.store.current_stage()
    approved = session.store.approved_sections()
    return {
        "current_stage": stage,
        "stage_label": get_stage_label(stage),
        "stage_percent": stage_percent(stage),
        "stages": [s.model_dump() for s in project_stages(stage, approved)],
        "approved_sections": approved_counter(approved),
        "preview": [p.model_dump() for p in prd_preview(approved)],
        "is_completed": session.is_completed,
    }


def render_session(session: PRDSession) -> dict[str, Any]:
    """Everything a client needs to draw the chat screen."""
    review = session.pending_review()
    return {
        "session_id": session.session_id,
        "turns": [render_turn(t) for t in session.store.turns()],
        "busy": session.busy,
        "error_message": session.error_message,
        "review_mode": session.review_mode,
        "pending_review": (
            {"title": review.section_title, "content": review.section_content} if review else None
        ),
        "attachments": [f.model_dump() for f in session.attachments.files()],
        "upload_progress": session.attachments.upload_progress,
        "uploading": session.attachments.is_uploading,
        "progress": render_progress(session),
    }
