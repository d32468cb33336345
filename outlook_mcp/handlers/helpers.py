"""
Graph Helper Functions

This module provides helper functions for turning Graph API message and event
resources into compact dictionaries and readable text.
"""

import html
import re
from datetime import datetime
from typing import Any, Dict, List

TAG_PATTERN = re.compile(r"<[^>]+>")
BLANK_LINES_PATTERN = re.compile(r"\n\s*\n+")


def format_address(recipient: Dict[str, Any]) -> str:
    """Render a Graph recipient as ``Name (address)``."""
    address = (recipient or {}).get("emailAddress") or {}
    name = address.get("name") or "Unknown"
    email = address.get("address") or "unknown"
    return f"{name} ({email})"


def format_timestamp(value: str) -> str:
    """Render a Graph ISO timestamp as local time; unparseable values pass through."""
    if not value:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M")


def extract_email_info(msg: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract common email info from a Graph message resource.

    Args:
        msg: The Graph message object.

    Returns:
        Dict containing:
            - id: Message ID
            - subject: Email subject
            - from: Sender as "Name (address)"
            - to: Recipients as "Name (address)" strings
            - cc: CC recipients
            - date: Received timestamp, local time
            - snippet: Body preview
            - categories: Category names
            - is_read: Read flag
            - has_attachments: Attachment flag
    """
    return {
        "id": msg.get("id", ""),
        "subject": msg.get("subject") or "No Subject",
        "from": format_address(msg.get("from")) if msg.get("from") else "Unknown (unknown)",
        "to": [format_address(r) for r in msg.get("toRecipients") or []],
        "cc": [format_address(r) for r in msg.get("ccRecipients") or []],
        "date": format_timestamp(msg.get("receivedDateTime", "")),
        "snippet": msg.get("bodyPreview", ""),
        "categories": msg.get("categories") or [],
        "is_read": msg.get("isRead", True),
        "has_attachments": msg.get("hasAttachments", False),
    }


def format_email_line(msg: Dict[str, Any], index: int, show_categories: bool = False) -> str:
    """One numbered entry of an email listing."""
    info = extract_email_info(msg)
    read_status = "" if info["is_read"] else "[UNREAD] "
    categories = ""
    if show_categories and info["categories"]:
        categories = f"[{', '.join(info['categories'])}] "
    return (
        f"{index}. {read_status}{categories}{info['date']} - From: {info['from']}\n"
        f"Subject: {info['subject']}\n"
        f"ID: {info['id']}\n"
    )


def format_email_list(messages: List[Dict[str, Any]], start: int = 1, show_categories: bool = False) -> str:
    return "\n".join(
        format_email_line(msg, start + offset, show_categories) for offset, msg in enumerate(messages)
    )


def html_to_text(content: str) -> str:
    """Crude HTML to text conversion for displaying message bodies."""
    text = re.sub(r"(?i)<br\s*/?>|</p>|</div>", "\n", content)
    text = TAG_PATTERN.sub("", text)
    text = html.unescape(text)
    return BLANK_LINES_PATTERN.sub("\n\n", text).strip()


def extract_body_text(msg: Dict[str, Any]) -> str:
    body = msg.get("body") or {}
    content = body.get("content") or ""
    if body.get("contentType", "").lower() == "html":
        return html_to_text(content)
    return content.strip()
