"""
Category Handlers Module

Outlook categories play the role of labels: a master list per mailbox, and a
list of category names on each message.
"""

from typing import List, Optional

from outlook_mcp.graph.client import GraphClient
from outlook_mcp.graph.errors import RemoteError
from outlook_mcp.graph.mailbox import build_mailbox_path, describe_mailbox, get_mailbox_base_path
from outlook_mcp.handlers.common import require, tool_errors
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)


async def _get_message_categories(client: GraphClient, base_path: str, email_id: str) -> List[str]:
    email = await client.call(
        "GET",
        f"{base_path}/messages/{email_id}",
        params={"$select": "categories"},
    )
    return list(email.get("categories") or [])


@tool_errors("listing categories")
async def list_categories(client: GraphClient, mailbox: Optional[str] = None) -> str:
    mailbox_info = describe_mailbox(mailbox, " for shared mailbox: {}")

    response = await client.call("GET", build_mailbox_path(mailbox, "outlook/masterCategories"), params={"$top": 50})
    categories = response.get("value") or []
    if not categories:
        return f"No categories found{mailbox_info}. You can create categories in Outlook settings."

    lines = [
        f"{index}. {category.get('displayName')} (Color: {category.get('color') or 'none'})"
        for index, category in enumerate(categories, start=1)
    ]
    return f"Found {len(categories)} categories{mailbox_info}:\n\n" + "\n".join(lines)


@tool_errors("adding category")
async def add_category(client: GraphClient, email_id: str, category: str, mailbox: Optional[str] = None) -> str:
    require(email_id, "Email ID is required. Please provide the ID of the email.")
    require(category, "Category name is required. Use 'list_categories' to see available categories.")

    base_path = get_mailbox_base_path(mailbox)
    mailbox_info = describe_mailbox(mailbox)
    logger.info(f"Adding category '{category}' to email {email_id}{mailbox_info}")

    current = await _get_message_categories(client, base_path, email_id)
    if category in current:
        return f'Email already has the category "{category}".'

    updated = current + [category]
    try:
        await client.call("PATCH", f"{base_path}/messages/{email_id}", body={"categories": updated})
    except RemoteError as e:
        if "does not exist" in e.message:
            return f"Category \"{category}\" does not exist. Use 'list_categories' to see available categories."
        raise

    return f'Category "{category}" added to email{mailbox_info}. Email now has categories: {", ".join(updated)}'


@tool_errors("removing category")
async def remove_category(client: GraphClient, email_id: str, category: str, mailbox: Optional[str] = None) -> str:
    require(email_id, "Email ID is required. Please provide the ID of the email.")
    require(category, "Category name is required.")

    base_path = get_mailbox_base_path(mailbox)
    mailbox_info = describe_mailbox(mailbox)
    logger.info(f"Removing category '{category}' from email {email_id}{mailbox_info}")

    current = await _get_message_categories(client, base_path, email_id)
    if category not in current:
        present = ", ".join(current) if current else "none"
        return f'Email does not have the category "{category}". Current categories: {present}'

    updated = [c for c in current if c != category]
    await client.call("PATCH", f"{base_path}/messages/{email_id}", body={"categories": updated})

    if updated:
        remaining = f"Remaining categories: {', '.join(updated)}"
    else:
        remaining = "Email has no more categories."
    return f'Category "{category}" removed from email{mailbox_info}. {remaining}'
