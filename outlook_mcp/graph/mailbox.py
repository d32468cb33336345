"""
Mailbox path helpers.

Graph addresses the signed-in user's mailbox as ``me`` and a shared mailbox as
``users/{address}``.
"""

from typing import Dict, Optional


def get_mailbox_base_path(mailbox: Optional[str] = None) -> str:
    """Return ``me`` for the primary mailbox, ``users/{address}`` for a shared one."""
    if not mailbox or not mailbox.strip():
        return "me"
    return f"users/{mailbox.strip()}"


def build_mailbox_path(mailbox: Optional[str], resource_path: str) -> str:
    return f"{get_mailbox_base_path(mailbox)}/{resource_path.lstrip('/')}"


def get_well_known_folders(mailbox: Optional[str] = None) -> Dict[str, str]:
    """Map well-known folder names to their message collection paths."""
    base_path = get_mailbox_base_path(mailbox)
    return {
        "inbox": f"{base_path}/mailFolders/inbox/messages",
        "drafts": f"{base_path}/mailFolders/drafts/messages",
        "sent": f"{base_path}/mailFolders/sentItems/messages",
        "deleted": f"{base_path}/mailFolders/deletedItems/messages",
        "junk": f"{base_path}/mailFolders/junkemail/messages",
        "archive": f"{base_path}/mailFolders/archive/messages",
    }


def describe_mailbox(mailbox: Optional[str], template: str = " (shared mailbox: {})") -> str:
    """Suffix used in user-facing messages; empty for the primary mailbox."""
    if not mailbox or not mailbox.strip():
        return ""
    return template.format(mailbox.strip())
