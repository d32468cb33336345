"""
Folder Tools Module

Registers the mail folder tools on the FastMCP application.
"""

from typing import Optional

from mcp.server.fastmcp import FastMCP

from outlook_mcp.handlers import folders as folder_handlers
from outlook_mcp.utils.services import Services


def setup_folder_tools(mcp: FastMCP, services: Services) -> None:
    """Set up folder tools on the FastMCP application."""

    @mcp.tool()
    async def list_folders(
        include_item_counts: bool = False,
        include_children: bool = False,
        mailbox: Optional[str] = None,
    ) -> str:
        """
        List mail folders in your account or a shared mailbox.

        Args:
            include_item_counts (bool): Include total and unread counts for each folder
            include_children (bool): Include child folders in the listing
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await folder_handlers.list_folders(services.client, include_item_counts, include_children, mailbox)

    @mcp.tool()
    async def create_folder(name: str, parent_folder: Optional[str] = None, mailbox: Optional[str] = None) -> str:
        """
        Create a new mail folder.

        Args:
            name (str): Name of the folder to create
            parent_folder (str, optional): Name of the parent folder (default: top level)
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await folder_handlers.create_folder(services.client, name, parent_folder, mailbox)

    @mcp.tool()
    async def move_emails(email_ids: str, target_folder: str, mailbox: Optional[str] = None) -> str:
        """
        Move emails from one folder to another.

        Args:
            email_ids (str): Comma-separated list of email IDs to move
            target_folder (str): Name of the folder to move the emails to
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await folder_handlers.move_emails(services.client, email_ids, target_folder, mailbox)
