from __future__ import annotations

from typing import Any, List, Optional

from ..client import ChorusClient
from ..formatting import ResponseFormat, format_duration, format_output, to_json_text
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

ACTIVITY_METRICS = (
    "total_calls",
    "total_duration",
    "avg_duration",
    "talk_ratio",
    "longest_monologue",
    "interactivity",
    "patience",
    "question_rate",
)


def _percent(ratio: Any) -> Optional[int]:
    try:
        return round(float(ratio) * 100)
    except (TypeError, ValueError, OverflowError):
        return None


@chorus_tool()
async def list_reports(
    client: ChorusClient,
    *,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """List the reports available in Chorus."""
    collection = await fetch_collection(
        client, "reports", params=page_params(limit, offset), tool="reports"
    )
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No reports found."

    def _render() -> str:
        lines = ["# Reports", "", format_pagination_info(window), ""]
        for r in window.items:
            lines.append(
                f"- **{text(r, 'name', 'Untitled')}** ({text(r, 'id')}) "
                f"[{text(r, 'type', 'Unknown')}]"
            )
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_report(
    client: ChorusClient,
    report_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get one report with its analytics data."""
    report = await fetch_record(client, f"reports/{report_id}", tool="reports")
    if report.get("id") is None:
        return not_found("report", report_id)

    def _render() -> str:
        lines = [
            f"# {text(report, 'name', 'Untitled')}",
            "",
            f"- **ID**: {text(report, 'id')}",
            f"- **Type**: {text(report, 'type', 'Unknown')}",
        ]
        date_range = report.get("dateRange")
        if isinstance(date_range, dict):
            start, end = text(date_range, "start"), text(date_range, "end")
            lines.append(f"- **Period**: {start} to {end}")
        if report.get("data"):
            data = to_json_text(report["data"])
            lines.extend(["", "## Data", "```json", data, "```"])
        return "\n".join(lines)

    return format_output(report, _render, response_format)


@chorus_tool()
async def get_activity_metrics(
    client: ChorusClient,
    start_date: str,
    end_date: str,
    *,
    team_id: Optional[str] = None,
    user_id: Optional[str] = None,
    metrics: Optional[List[str]] = None,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    Get activity metrics (calls, talk time, talk ratio, question rate, ...)
    for a date range, optionally scoped to a team or a user. ``metrics``
    restricts the result to the named metrics.
    """
    unknown = sorted(set(metrics or ()) - set(ACTIVITY_METRICS))
    if unknown:
        raise ValueError(f"Unknown metrics: {', '.join(unknown)}")
    params = filter_params(
        start_date=start_date,
        end_date=end_date,
        team_id=team_id,
        user_id=user_id,
        metrics=",".join(metrics) if metrics else None,
    )
    data = await fetch_record(client, "reports/activity", params=params, tool="reports")

    def _render() -> str:
        lines = ["# Activity Metrics", "", f"- **Period**: {start_date} to {end_date}"]
        if data.get("userName"):
            lines.append(f"- **User**: {data['userName']}")
        lines.extend(["", "## Metrics"])
        lines.append(f"- **Total Calls**: {text(data, 'totalCalls', '0')}")
        total = format_duration(data.get("totalDuration"))
        lines.append(f"- **Total Duration**: {total}")
        average = format_duration(data.get("avgDuration"))
        lines.append(f"- **Avg Duration**: {average}")
        talk_ratio = _percent(data.get("talkRatio"))
        if talk_ratio is not None:
            lines.append(f"- **Talk Ratio**: {talk_ratio}%")
        if data.get("longestMonologue") is not None:
            monologue = format_duration(data["longestMonologue"])
            lines.append(f"- **Longest Monologue**: {monologue}")
        for key, label in (
            ("interactivity", "Interactivity"),
            ("patience", "Patience"),
            ("questionRate", "Question Rate"),
        ):
            if data.get(key) is not None:
                lines.append(f"- **{label}**: {data[key]}")
        return "\n".join(lines)

    return format_output(data, _render, response_format)
