"""
Email Handlers Module

List, search, read, send, mark and delete messages.
"""

from typing import Optional

from outlook_mcp.graph.client import GraphClient, query_params
from outlook_mcp.graph.errors import RemoteError, ValidationError
from outlook_mcp.graph.folders import resolve_folder_path
from outlook_mcp.graph.mailbox import build_mailbox_path, describe_mailbox
from outlook_mcp.graph.search import SearchPlanner
from outlook_mcp.handlers.common import require, split_list, tool_errors
from outlook_mcp.handlers.helpers import (
    extract_body_text,
    extract_email_info,
    format_address,
    format_email_list,
)
from outlook_mcp.models import FilterTerms, SearchResult, SearchTerms
from outlook_mcp.utils.config import get_config_value
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)

MAX_COUNT = 50
IMPORTANCE_LEVELS = ("low", "normal", "high")


def _clamp_count(count: Optional[int]) -> int:
    if not count or count < 1:
        return 10
    return min(count, MAX_COUNT)


@tool_errors("listing emails")
async def list_emails(
    client: GraphClient,
    folder: str = "inbox",
    count: int = 10,
    mailbox: Optional[str] = None,
) -> str:
    folder = folder or "inbox"
    endpoint = await resolve_folder_path(client, folder, mailbox)
    params = query_params(
        select=get_config_value("email_select_fields"),
        order_by="receivedDateTime desc",
    )
    result = await client.fetch(endpoint, params, _clamp_count(count))
    mailbox_info = describe_mailbox(mailbox)

    if not result.items:
        return f"No emails found in {folder}{mailbox_info}."

    text = (
        f"Found {len(result.items)} emails in {folder}{mailbox_info}:\n\n"
        f"{format_email_list(result.items, show_categories=True)}"
    )
    if result.error:
        text += f"\n(Listing stopped early: {result.error})"
    return text


def format_search_results(result: SearchResult) -> str:
    """
    Format a progressive search result.

    Args:
        result: The search result

    Returns:
        Numbered listing with the sort order, the offset and the strategy used
    """
    if not result.items:
        return "No emails found matching your search criteria."

    sort_info = "oldest first" if result.sort_order == "asc" else "newest first"
    if result.skip > 0:
        range_info = f" (showing {result.skip + 1}-{result.skip + len(result.items)}, {sort_info})"
    else:
        range_info = f" ({sort_info})"

    text = (
        f"Found {len(result.items)} emails{range_info}:\n"
        f"(Search used {result.strategy_used} strategy)\n\n"
        f"{format_email_list(result.items, start=result.skip + 1)}"
    )
    if result.error:
        text += f"\n(Results may be incomplete: {result.error})"
    return text


@tool_errors("searching emails")
async def search_emails(
    planner: SearchPlanner,
    query: str = "",
    folder: str = "inbox",
    from_: str = "",
    to: str = "",
    subject: str = "",
    has_attachments: Optional[bool] = None,
    unread_only: Optional[bool] = None,
    category: Optional[str] = None,
    before: Optional[str] = None,
    after: Optional[str] = None,
    sort_order: str = "desc",
    skip: int = 0,
    count: int = 10,
    mailbox: Optional[str] = None,
) -> str:
    endpoint = await resolve_folder_path(planner.client, folder or "inbox", mailbox)
    logger.info(f"Using endpoint: {endpoint} for folder: {folder} in mailbox: {mailbox or 'primary'}")

    result = await planner.search(
        endpoint,
        SearchTerms(query=query or "", subject=subject or "", from_=from_ or "", to=to or ""),
        FilterTerms(
            has_attachments=has_attachments,
            unread_only=unread_only,
            category=category,
            before=before,
            after=after,
        ),
        max_items=_clamp_count(count),
        sort_order=(sort_order or "desc").lower(),
        skip=skip or 0,
    )
    return format_search_results(result)


@tool_errors("reading email")
async def read_email(client: GraphClient, email_id: str, mailbox: Optional[str] = None) -> str:
    require(email_id, "Email ID is required.")

    try:
        msg = await client.call(
            "GET",
            build_mailbox_path(mailbox, f"messages/{email_id}"),
            params=query_params(select=get_config_value("email_detail_fields")),
        )
    except RemoteError as e:
        if e.status_code == 404:
            return f'Email with ID "{email_id}" not found.'
        raise

    info = extract_email_info(msg)
    bcc = ", ".join(format_address(r) for r in msg.get("bccRecipients") or [])
    lines = [
        f"From: {info['from']}",
        f"To: {', '.join(info['to']) or 'None'}",
    ]
    if info["cc"]:
        lines.append(f"CC: {', '.join(info['cc'])}")
    if bcc:
        lines.append(f"BCC: {bcc}")
    lines.extend([
        f"Subject: {info['subject']}",
        f"Date: {info['date']}",
        f"Importance: {msg.get('importance', 'normal')}",
        f"Has Attachments: {'Yes' if info['has_attachments'] else 'No'}",
    ])
    if info["categories"]:
        lines.append(f"Categories: {', '.join(info['categories'])}")

    return "\n".join(lines) + f"\n\n{extract_body_text(msg) or info['snippet']}"


def _recipients(addresses):
    return [{"emailAddress": {"address": address}} for address in addresses]


@tool_errors("sending email")
async def send_email(
    client: GraphClient,
    to: str,
    subject: str,
    body: str,
    cc: Optional[str] = None,
    bcc: Optional[str] = None,
    importance: str = "normal",
    save_to_sent_items: bool = True,
    mailbox: Optional[str] = None,
) -> str:
    to_addresses = split_list(to)
    require(to_addresses, "Recipient (to) is required.")
    require(subject, "Subject is required.")
    require(body, "Body content is required.")
    importance = (importance or "normal").lower()
    if importance not in IMPORTANCE_LEVELS:
        raise ValidationError(f"Invalid importance '{importance}'. Use low, normal or high.")

    content_type = "HTML" if "<html" in body.lower() or "<p>" in body.lower() else "Text"
    message = {
        "subject": subject,
        "body": {"contentType": content_type, "content": body},
        "toRecipients": _recipients(to_addresses),
        "importance": importance,
    }
    if cc:
        message["ccRecipients"] = _recipients(split_list(cc))
    if bcc:
        message["bccRecipients"] = _recipients(split_list(bcc))

    await client.call(
        "POST",
        build_mailbox_path(mailbox, "sendMail"),
        body={"message": message, "saveToSentItems": save_to_sent_items},
    )

    mailbox_info = describe_mailbox(mailbox, " from shared mailbox {}")
    return f"Email sent successfully{mailbox_info}!\n\nSubject: {subject}\nRecipients: {len(to_addresses)}"


@tool_errors("marking email")
async def mark_as_read(
    client: GraphClient,
    email_id: str,
    is_read: bool = True,
    mailbox: Optional[str] = None,
) -> str:
    require(email_id, "Email ID is required.")

    await client.call("PATCH", build_mailbox_path(mailbox, f"messages/{email_id}"), body={"isRead": is_read})

    status = "read" if is_read else "unread"
    return f"Email marked as {status}{describe_mailbox(mailbox)}."


@tool_errors("deleting email")
async def delete_email(client: GraphClient, email_id: str, mailbox: Optional[str] = None) -> str:
    require(email_id, "Email ID is required. Please provide the ID of the email to delete.")

    mailbox_info = describe_mailbox(mailbox)
    logger.info(f"Deleting email {email_id}{mailbox_info}")

    try:
        await client.call("DELETE", build_mailbox_path(mailbox, f"messages/{email_id}"))
    except RemoteError as e:
        if e.status_code == 404:
            return (
                f'Email not found. The email with ID "{email_id}" may have already been '
                "deleted or does not exist."
            )
        raise

    return f"Email deleted successfully{mailbox_info}. The email has been moved to Deleted Items."
