"""
Folder Handlers Module

List and create mail folders, and move messages between them.
"""

from typing import Optional

from outlook_mcp.graph import folders
from outlook_mcp.graph.client import GraphClient
from outlook_mcp.graph.mailbox import describe_mailbox
from outlook_mcp.handlers.common import require, split_list, tool_errors


@tool_errors("listing folders")
async def list_folders(
    client: GraphClient,
    include_item_counts: bool = False,
    include_children: bool = False,
    mailbox: Optional[str] = None,
) -> str:
    all_folders = await folders.get_all_folders(client, mailbox, include_children=include_children)
    mailbox_info = describe_mailbox(mailbox)
    if not all_folders:
        return f"No folders found{mailbox_info}."

    top_level_ids = {f["id"] for f in all_folders if not any(f.get("parentFolderId") == p["id"] for p in all_folders)}
    lines = []
    for folder in all_folders:
        indent = "" if folder["id"] in top_level_ids else "  "
        line = f"{indent}{folder.get('displayName')}"
        if include_item_counts:
            line += f" - {folder.get('totalItemCount', 0)} items"
            if folder.get("unreadItemCount"):
                line += f" ({folder['unreadItemCount']} unread)"
        lines.append(line)

    return f"Found {len(all_folders)} folders{mailbox_info}:\n\n" + "\n".join(lines)


@tool_errors("creating folder")
async def create_folder(
    client: GraphClient,
    name: str,
    parent_folder: Optional[str] = None,
    mailbox: Optional[str] = None,
) -> str:
    require(name, "Folder name is required.")
    return await folders.create_mail_folder(client, name, parent_folder, mailbox)


@tool_errors("moving emails")
async def move_emails(
    client: GraphClient,
    email_ids: str,
    target_folder: str,
    mailbox: Optional[str] = None,
) -> str:
    ids = split_list(email_ids)
    require(ids, "Email IDs are required. Provide a comma-separated list of email IDs to move.")
    require(target_folder, "Target folder name is required.")

    result = await folders.move_emails(client, ids, target_folder, mailbox)
    mailbox_info = describe_mailbox(mailbox)
    moved, failed = result["moved"], result["failed"]

    if not failed:
        return f'Successfully moved {len(moved)} email(s) to "{target_folder}"{mailbox_info}.'
    if not moved:
        return f'Failed to move any of the {len(failed)} email(s) to "{target_folder}"{mailbox_info}.'
    return (
        f'Moved {len(moved)} email(s) to "{target_folder}"{mailbox_info}. '
        f"{len(failed)} email(s) could not be moved: {', '.join(failed)}"
    )
