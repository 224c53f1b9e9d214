"""Agent reply normalization.

Turns whatever the agent service returned into an ``AgentPayload``. Every
field is checked on its own and falls back to its default, so a partial or
malformed reply degrades field by field instead of failing as a whole.
"""

import json
import math
from typing import Any

from prd_builder.contracts.agent import AgentPayload, ConfidenceAspect
from prd_builder.contracts.stages import INITIAL_STAGE, is_stage_key
from prd_builder.logging_config import get_logger

logger = get_logger(__name__)

NO_RESPONSE_TEXT = "No response received."


def normalize_agent_reply(reply: Any) -> AgentPayload | None:
    """
    Normalize a raw agent reply.

    Args:
        reply: Decoded reply of the agent call, of any shape

    Returns:
        AgentPayload with every field defaulted, or None when the call
        itself did not report success
    """
    if not isinstance(reply, dict) or reply.get("success") is not True:
        return None

    response = _as_dict(reply.get("response"))
    parsed = _locate_result(response.get("result"))

    declared = parsed.get("current_stage")
    declared_stage = declared if is_stage_key(declared) else None
    if declared is not None and declared_stage is None:
        logger.debug("agent_stage_ignored", declared=str(declared)[:50])

    message = (
        _as_str(parsed.get("message"))
        or _as_str(response.get("message"))
        or _as_str(reply.get("message"))
    )

    return AgentPayload(
        message=message,
        current_stage=declared_stage or INITIAL_STAGE,
        declared_stage=declared_stage,
        review_action_needed=_as_bool(parsed.get("review_action_needed")),
        section_title=_as_str(parsed.get("section_title")),
        section_content=_as_str(parsed.get("section_content")),
        approved_sections=_unique(_as_str_list(parsed.get("approved_sections"))),
        gap_items=_as_str_list(parsed.get("gap_items")),
        overall_confidence=_as_score(parsed.get("overall_confidence")),
        confidence_breakdown=_as_breakdown(parsed.get("confidence_breakdown")),
        reflection=_as_str(parsed.get("reflection")),
        accuracy_flags=_as_str_list(parsed.get("accuracy_flags")),
    )


def extract_fallback_text(reply: Any) -> str:
    """Best-effort plain text of a reply that could not be normalized."""
    response = _as_dict(reply.get("response")) if isinstance(reply, dict) else {}
    message = _as_str(response.get("message"))
    if message:
        return message
    text = _as_str(_as_dict(response.get("result")).get("text"))
    return text or NO_RESPONSE_TEXT


def _locate_result(result: Any) -> dict[str, Any]:
    """Find the structured body: JSON string, mapping, or nothing."""
    if isinstance(result, str):
        try:
            decoded = json.loads(result)
        except (ValueError, RecursionError):
            return {"message": result}
        if isinstance(decoded, dict):
            return decoded
        # Valid JSON that is not an object carries no fields
        return {"message": result}
    if isinstance(result, dict):
        return result
    return {}


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _as_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def _unique(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def _as_score(value: Any) -> int:
    """Clamp a numeric score into 0-100; anything else is 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return max(0, min(100, round(value)))


def _as_breakdown(value: Any) -> list[ConfidenceAspect]:
    if not isinstance(value, list):
        return []
    aspects = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        aspects.append(
            ConfidenceAspect(
                aspect=_as_str(entry.get("aspect")),
                score=_as_score(entry.get("score")),
                reasoning=_as_str(entry.get("reasoning")),
            )
        )
    return aspects
