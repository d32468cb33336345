"""
Mail folder utilities.

Resolves user-supplied folder names to Graph message collection paths, and
lists, creates and moves into folders.
"""

from typing import Any, Dict, List, Optional

from outlook_mcp.graph.client import GraphClient
from outlook_mcp.graph.errors import RemoteError, TransportError, ValidationError
from outlook_mcp.graph.mailbox import describe_mailbox, get_mailbox_base_path, get_well_known_folders
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)

FOLDER_SELECT_FIELDS = "id,displayName,parentFolderId,childFolderCount,totalItemCount,unreadItemCount"


async def get_folder_id_by_name(client: GraphClient, folder_name: str, mailbox: Optional[str] = None) -> Optional[str]:
    """
    Find a mail folder ID by display name.

    Tries an exact server-side match first, then a case-insensitive match over
    the top-level folder listing.

    Returns:
        The folder ID, or None if no folder matches
    """
    base_path = get_mailbox_base_path(mailbox)
    escaped = folder_name.replace("'", "''")

    response = await client.call(
        "GET",
        f"{base_path}/mailFolders",
        params={"$filter": f"displayName eq '{escaped}'"},
    )
    folders = response.get("value") or []
    if folders:
        return folders[0]["id"]

    logger.debug(f"No exact match for folder '{folder_name}', trying case-insensitive search")
    response = await client.call("GET", f"{base_path}/mailFolders", params={"$top": 100})
    lower_name = folder_name.lower()
    for folder in response.get("value") or []:
        if folder.get("displayName", "").lower() == lower_name:
            return folder["id"]

    return None


async def resolve_folder_path(client: GraphClient, folder_name: Optional[str], mailbox: Optional[str] = None) -> str:
    """
    Resolve a folder name to its message collection path.

    Well-known names (inbox, sent, drafts, ...) map directly. Other names are
    looked up; unknown folders and lookup failures fall back to the inbox.
    """
    well_known = get_well_known_folders(mailbox)
    if not folder_name:
        return well_known["inbox"]

    lower_name = folder_name.lower()
    if lower_name in well_known:
        return well_known[lower_name]

    try:
        folder_id = await get_folder_id_by_name(client, folder_name, mailbox)
    except (RemoteError, TransportError) as e:
        logger.error(f"Error resolving folder '{folder_name}': {e}")
        return well_known["inbox"]

    if folder_id:
        return f"{get_mailbox_base_path(mailbox)}/mailFolders/{folder_id}/messages"

    logger.warning(f"Couldn't find folder '{folder_name}', falling back to inbox")
    return well_known["inbox"]


async def get_all_folders(client: GraphClient, mailbox: Optional[str] = None, include_children: bool = True) -> List[Dict[str, Any]]:
    """
    List top-level folders and, optionally, their direct children.

    A child listing that fails is logged and left out.
    """
    base_path = get_mailbox_base_path(mailbox)
    response = await client.call(
        "GET",
        f"{base_path}/mailFolders",
        params={"$top": 100, "$select": FOLDER_SELECT_FIELDS},
    )
    folders = response.get("value") or []
    if not include_children:
        return folders

    children: List[Dict[str, Any]] = []
    for folder in folders:
        if not folder.get("childFolderCount"):
            continue
        try:
            child_response = await client.call(
                "GET",
                f"{base_path}/mailFolders/{folder['id']}/childFolders",
                params={"$select": FOLDER_SELECT_FIELDS},
            )
        except (RemoteError, TransportError) as e:
            logger.error(f"Error getting child folders for '{folder.get('displayName')}': {e}")
            continue
        children.extend(child_response.get("value") or [])

    return folders + children


async def create_mail_folder(
    client: GraphClient,
    folder_name: str,
    parent_folder: Optional[str] = None,
    mailbox: Optional[str] = None,
) -> str:
    """
    Create a mail folder at the root or inside a named parent.

    Returns:
        A message describing the outcome
    """
    if not folder_name:
        raise ValidationError("Folder name is required.")

    base_path = get_mailbox_base_path(mailbox)
    mailbox_info = describe_mailbox(mailbox, " in shared mailbox {}")

    if await get_folder_id_by_name(client, folder_name, mailbox):
        return f'A folder named "{folder_name}" already exists{mailbox_info}.'

    endpoint = f"{base_path}/mailFolders"
    if parent_folder:
        parent_id = await get_folder_id_by_name(client, parent_folder, mailbox)
        if not parent_id:
            return (
                f'Parent folder "{parent_folder}" not found{mailbox_info}. Please specify a valid '
                "parent folder or leave it blank to create at the root level."
            )
        endpoint = f"{base_path}/mailFolders/{parent_id}/childFolders"

    response = await client.call("POST", endpoint, body={"displayName": folder_name})
    if not response.get("id"):
        return "Failed to create folder. The server didn't return a folder ID."

    location = f'inside "{parent_folder}"' if parent_folder else "at the root level"
    return f'Successfully created folder "{folder_name}" {location}{mailbox_info}.'


async def move_emails(
    client: GraphClient,
    email_ids: List[str],
    target_folder: str,
    mailbox: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Move messages into a folder, one request per message.

    Returns:
        Dict with 'moved' and 'failed' message ID lists and the resolved 'destination'
    """
    if not email_ids:
        raise ValidationError("At least one email ID is required.")
    if not target_folder:
        raise ValidationError("Target folder name is required.")

    base_path = get_mailbox_base_path(mailbox)
    well_known = {
        "inbox": "inbox",
        "drafts": "drafts",
        "sent": "sentitems",
        "deleted": "deleteditems",
        "junk": "junkemail",
        "archive": "archive",
    }
    destination = well_known.get(target_folder.lower())
    if destination is None:
        destination = await get_folder_id_by_name(client, target_folder, mailbox)
        if destination is None:
            raise ValidationError(f'Target folder "{target_folder}" not found.')

    moved: List[str] = []
    failed: List[str] = []
    for email_id in email_ids:
        try:
            await client.call("POST", f"{base_path}/messages/{email_id}/move", body={"destinationId": destination})
            moved.append(email_id)
        except (RemoteError, TransportError) as e:
            logger.error(f"Failed to move email {email_id}: {e}")
            failed.append(email_id)

    return {"moved": moved, "failed": failed, "destination": destination}
