"""
Calendar Handlers Module

List upcoming events, create events and respond to, cancel or delete them.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from outlook_mcp.graph.client import GraphClient, query_params
from outlook_mcp.graph.errors import ValidationError
from outlook_mcp.graph.mailbox import build_mailbox_path, describe_mailbox
from outlook_mcp.handlers.common import require, tool_errors
from outlook_mcp.handlers.helpers import format_timestamp
from outlook_mcp.utils.config import get_config_value
from outlook_mcp.utils.date_parser import format_odata_datetime
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)

MAX_EVENTS = 50


def _event_time(value: Union[str, Dict[str, Any]]) -> Dict[str, str]:
    if isinstance(value, dict):
        return {
            "dateTime": value.get("dateTime", ""),
            "timeZone": value.get("timeZone") or get_config_value("default_timezone"),
        }
    return {"dateTime": value, "timeZone": get_config_value("default_timezone")}


def _format_event(event: Dict[str, Any], index: int) -> str:
    start = format_timestamp((event.get("start") or {}).get("dateTime", ""))
    end = format_timestamp((event.get("end") or {}).get("dateTime", ""))
    location = (event.get("location") or {}).get("displayName") or "No location"
    organizer = ((event.get("organizer") or {}).get("emailAddress") or {}).get("name", "Unknown")
    cancelled = "[CANCELLED] " if event.get("isCancelled") else ""
    return (
        f"{index}. {cancelled}{event.get('subject') or 'No Subject'} - Location: {location}\n"
        f"Start: {start}\nEnd: {end}\nOrganizer: {organizer}\n"
        f"Summary: {event.get('bodyPreview', '')}\nID: {event.get('id', '')}\n"
    )


@tool_errors("listing events")
async def list_events(
    client: GraphClient,
    count: int = 10,
    mailbox: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    count = min(max(count or 10, 1), MAX_EVENTS)
    start = format_odata_datetime(now or datetime.now(timezone.utc))

    params = query_params(
        select=get_config_value("calendar_select_fields"),
        filter_expr=f"start/dateTime ge '{start}'",
        order_by="start/dateTime",
    )
    result = await client.fetch(build_mailbox_path(mailbox, "events"), params, count)
    mailbox_info = describe_mailbox(mailbox)

    if not result.items:
        return f"No calendar events found{mailbox_info}."

    listing = "\n".join(_format_event(event, index) for index, event in enumerate(result.items, start=1))
    return f"Found {len(result.items)} events{mailbox_info}:\n\n{listing}"


@tool_errors("creating event")
async def create_event(
    client: GraphClient,
    subject: str,
    start: Union[str, Dict[str, Any]],
    end: Union[str, Dict[str, Any]],
    attendees: Optional[List[str]] = None,
    body: Optional[str] = None,
    mailbox: Optional[str] = None,
) -> str:
    if not subject or not start or not end:
        raise ValidationError("Subject, start, and end times are required to create an event.")

    event: Dict[str, Any] = {
        "subject": subject,
        "start": _event_time(start),
        "end": _event_time(end),
        "body": {"contentType": "HTML", "content": body or ""},
    }
    if attendees:
        event["attendees"] = [
            {"emailAddress": {"address": address}, "type": "required"} for address in attendees
        ]

    await client.call("POST", build_mailbox_path(mailbox, "events"), body=event)
    return f"Event '{subject}' has been successfully created{describe_mailbox(mailbox, ' in shared mailbox {}')}."


async def _respond(client: GraphClient, event_id: str, action: str, comment: str, mailbox: Optional[str]) -> None:
    await client.call("POST", build_mailbox_path(mailbox, f"events/{event_id}/{action}"), body={"comment": comment})


@tool_errors("accepting event")
async def accept_event(client: GraphClient, event_id: str, comment: Optional[str] = None, mailbox: Optional[str] = None) -> str:
    require(event_id, "Event ID is required to accept an event.")
    await _respond(client, event_id, "accept", comment or "Accepted via API", mailbox)
    return f"Event with ID {event_id} has been successfully accepted{describe_mailbox(mailbox)}."


@tool_errors("declining event")
async def decline_event(client: GraphClient, event_id: str, comment: Optional[str] = None, mailbox: Optional[str] = None) -> str:
    require(event_id, "Event ID is required to decline an event.")
    await _respond(client, event_id, "decline", comment or "Declined via API", mailbox)
    return f"Event with ID {event_id} has been successfully declined{describe_mailbox(mailbox)}."


@tool_errors("cancelling event")
async def cancel_event(client: GraphClient, event_id: str, comment: Optional[str] = None, mailbox: Optional[str] = None) -> str:
    require(event_id, "Event ID is required to cancel an event.")
    await _respond(client, event_id, "cancel", comment or "Cancelled via API", mailbox)
    return f"Event with ID {event_id} has been successfully cancelled{describe_mailbox(mailbox)}."


@tool_errors("deleting event")
async def delete_event(client: GraphClient, event_id: str, mailbox: Optional[str] = None) -> str:
    require(event_id, "Event ID is required to delete an event.")
    await client.call("DELETE", build_mailbox_path(mailbox, f"events/{event_id}"))
    return f"Event with ID {event_id} has been successfully deleted{describe_mailbox(mailbox)}."
