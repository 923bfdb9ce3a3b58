from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..client import ChorusClient
from ..formatting import ResponseFormat, format_date, format_output
from ..pagination import (
    DEFAULT_PAGE_SIZE,
    format_pagination_info,
    window_from_collection,
)
from ._common import (
    chorus_tool,
    fetch_collection,
    fetch_record,
    filter_params,
    not_found,
    page_params,
    text,
)


def _criteria(record: Dict[str, Any]) -> List[Dict[str, Any]]:
    value = record.get("criteria")
    return [c for c in value if isinstance(c, dict)] if isinstance(value, list) else []


def _score_percent(score: Any, max_score: Any) -> Optional[int]:
    try:
        return round(float(score) / float(max_score) * 100)
    except (TypeError, ValueError, ZeroDivisionError, OverflowError):
        return None


def _evaluated_user(scorecard: Dict[str, Any]) -> str:
    return text(scorecard, "userName") or text(scorecard, "userId", "Unknown")


@chorus_tool()
async def list_scorecards(
    client: ChorusClient,
    *,
    user_id: Optional[str] = None,
    conversation_id: Optional[str] = None,
    template_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    List scorecards, filtered by evaluated rep, conversation, template or
    date range. Returns scores and evaluator info.
    """
    params = {
        **page_params(limit, offset),
        **filter_params(
            user_id=user_id,
            conversation_id=conversation_id,
            template_id=template_id,
            start_date=start_date,
            end_date=end_date,
        ),
    }
    collection = await fetch_collection(
        client, "scorecards", params=params, tool="scorecards"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No scorecards found matching the specified filters."

    def _render() -> str:
        lines = ["# Scorecards", "", format_pagination_info(window), ""]
        for s in window.items:
            lines.append(
                f"## {_evaluated_user(s)} - "
                f"{text(s, 'overallScore')}/{text(s, 'maxScore')}"
            )
            lines.append(f"- **ID**: {text(s, 'id')}")
            lines.append(f"- **Conversation**: {text(s, 'conversationId')}")
            if s.get("templateName"):
                lines.append(f"- **Template**: {s['templateName']}")
            if s.get("evaluatorName"):
                lines.append(f"- **Evaluator**: {s['evaluatorName']}")
            lines.append(f"- **Date**: {format_date(s.get('createdAt'))}")
            lines.append("")
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_scorecard(
    client: ChorusClient,
    scorecard_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get one scorecard with criteria-level scores, comments and overall rating."""
    sc = await fetch_record(client, f"scorecards/{scorecard_id}", tool="scorecards")
    if sc.get("id") is None:
        return not_found("scorecard", scorecard_id)

    def _render() -> str:
        overall = f"{text(sc, 'overallScore')}/{text(sc, 'maxScore')}"
        percent = _score_percent(sc.get("overallScore"), sc.get("maxScore"))
        if percent is not None:
            overall += f" ({percent}%)"
        lines = [
            f"# Scorecard: {_evaluated_user(sc)}",
            "",
            f"- **Overall Score**: {overall}",
            f"- **Conversation**: {text(sc, 'conversationId')}",
            f"- **Date**: {format_date(sc.get('createdAt'))}",
        ]
        if sc.get("evaluatorName"):
            lines.append(f"- **Evaluator**: {sc['evaluatorName']}")
        if sc.get("templateName"):
            lines.append(f"- **Template**: {sc['templateName']}")

        criteria = _criteria(sc)
        if criteria:
            lines.extend(["", "## Criteria Scores", ""])
            lines.append("| Criteria | Score | Max |")
            lines.append("|----------|-------|-----|")
            for c in criteria:
                name, score = text(c, "name"), text(c, "score")
                lines.append(f"| {name} | {score} | {text(c, 'maxScore')} |")
            commented = [c for c in criteria if c.get("comments")]
            if commented:
                lines.extend(["", "## Comments"])
                for c in commented:
                    lines.append(f"- **{text(c, 'name')}**: {c['comments']}")
        return "\n".join(lines)

    return format_output(sc, _render, response_format)


@chorus_tool()
async def list_scorecard_templates(
    client: ChorusClient,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """List scorecard evaluation templates (rubrics) with criteria counts."""
    collection = await fetch_collection(
        client,
        "scorecards/templates",
        params=page_params(limit, offset),
        tool="scorecards",
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No scorecard templates found."

    def _render() -> str:
        lines = ["# Scorecard Templates", "", format_pagination_info(window), ""]
        for t in window.items:
            description = f": {t['description']}" if t.get("description") else ""
            lines.append(
                f"- **{text(t, 'name', 'Untitled')}** ({text(t, 'id')}) - "
                f"{len(_criteria(t))} criteria{description}"
            )
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_scorecard_template(
    client: ChorusClient,
    template_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get a scorecard template with its criteria, max scores and weights."""
    template = await fetch_record(
        client, f"scorecards/templates/{template_id}", tool="scorecards"
    )
    if template.get("id") is None:
        return not_found("scorecard template", template_id)

    def _render() -> str:
        lines = [f"# {text(template, 'name', 'Untitled')}", ""]
        if template.get("description"):
            lines.extend([str(template["description"]), ""])
        lines.extend(["## Criteria", ""])
        lines.append("| Criteria | Max Score | Weight | Description |")
        lines.append("|----------|-----------|--------|-------------|")
        for c in _criteria(template):
            lines.append(
                f"| {text(c, 'name')} | {text(c, 'maxScore')} | "
                f"{text(c, 'weight', 'N/A')} | {text(c, 'description')} |"
            )
        return "\n".join(lines)

    return format_output(template, _render, response_format)
