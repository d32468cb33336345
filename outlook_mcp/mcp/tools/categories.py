"""
Category Tools Module

Registers the Outlook category tools on the FastMCP application.
"""

from typing import Optional

from mcp.server.fastmcp import FastMCP

from outlook_mcp.handlers import categories as category_handlers
from outlook_mcp.utils.services import Services


def setup_category_tools(mcp: FastMCP, services: Services) -> None:
    """Set up category tools on the FastMCP application."""

    @mcp.tool()
    async def list_categories(mailbox: Optional[str] = None) -> str:
        """
        List the categories defined in the mailbox.

        Args:
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await category_handlers.list_categories(services.client, mailbox)

    @mcp.tool()
    async def add_category(email_id: str, category: str, mailbox: Optional[str] = None) -> str:
        """
        Add a category to an email. The category must already exist (see list_categories).

        Args:
            email_id (str): ID of the email
            category (str): Name of the category to add
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await category_handlers.add_category(services.client, email_id, category, mailbox)

    @mcp.tool()
    async def remove_category(email_id: str, category: str, mailbox: Optional[str] = None) -> str:
        """
        Remove a category from an email.

        Args:
            email_id (str): ID of the email
            category (str): Name of the category to remove
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await category_handlers.remove_category(services.client, email_id, category, mailbox)
