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


def _email_data(record: Dict[str, Any]) -> Dict[str, Any]:
    value = record.get("email")
    return value if isinstance(value, dict) else {}


def _sender(record: Dict[str, Any]) -> str:
    initiator = _email_data(record).get("initiator")
    if not isinstance(initiator, dict):
        return "Unknown"
    return text(initiator, "name") or text(initiator, "email", "Unknown")


def _sent(record: Dict[str, Any]) -> str:
    sent_time = _email_data(record).get("sent_time")
    return format_date(sent_time) if sent_time else "N/A"


@chorus_tool()
async def list_emails(
    client: ChorusClient,
    *,
    sender_email: Optional[str] = None,
    recipient_email: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """
    List email engagements tracked in Chorus, optionally filtered by sender,
    recipient or date range.
    """
    params = {
        **page_params(limit, offset),
        **filter_params(
            sender_email=sender_email,
            recipient_email=recipient_email,
            start_date=start_date,
            end_date=end_date,
        ),
    }
    collection = await fetch_collection(client, "emails", params=params, tool="emails")
    window = window_from_collection(collection, offset)
    if not window.items:
        return "No email engagements found."

    def _render() -> str:
        lines = ["# Email Engagements", "", format_pagination_info(window), ""]
        for e in window.items:
            company = f" | {e['company_name']}" if e.get("company_name") else ""
            lines.append(
                f"- **{text(e, 'name', 'No Subject')}** ({text(e, 'id')}) - "
                f"{_sent(e)} from {_sender(e)}{company}"
            )
        return "\n".join(lines)

    return format_output(window, _render, response_format)


@chorus_tool()
async def get_email(
    client: ChorusClient,
    email_id: str,
    *,
    response_format: ResponseFormat = ResponseFormat.MARKDOWN,
) -> str:
    """Get one email engagement: subject, sender, owner and participants."""
    email = await fetch_record(client, f"emails/{email_id}", tool="emails")
    if email.get("id") is None:
        return not_found("email engagement", email_id)

    def _render() -> str:
        lines = [
            f"# {text(email, 'name', 'No Subject')}",
            "",
            f"- **ID**: {text(email, 'id')}",
            f"- **Date**: {_sent(email)}",
            f"- **From**: {_sender(email)}",
            f"- **Company**: {text(email, 'company_name')}",
        ]
        owner = email.get("owner")
        if isinstance(owner, dict):
            lines.append(f"- **Owner**: {text(owner, 'name')} ({text(owner, 'email')})")
        participants: List[Dict[str, Any]] = [
            p for p in email.get("participants") or [] if isinstance(p, dict)
        ]
        if participants:
            lines.extend(["", "## Participants"])
            for p in participants:
                role = f" [{p['type']}]" if p.get("type") else ""
                company = f" | {p['company_name']}" if p.get("company_name") else ""
                lines.append(
                    f"- **{text(p, 'name')}** ({text(p, 'email')}){role}{company}"
                )
        return "\n".join(lines)

    return format_output(email, _render, response_format)
