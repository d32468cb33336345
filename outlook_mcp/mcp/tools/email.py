"""
Email Tools Module

Registers the message tools on the FastMCP application.
"""

from typing import Optional

from mcp.server.fastmcp import FastMCP

from outlook_mcp.handlers import email as email_handlers
from outlook_mcp.utils.services import Services


def setup_email_tools(mcp: FastMCP, services: Services) -> None:
    """Set up email tools on the FastMCP application."""

    @mcp.tool()
    async def list_emails(folder: str = "inbox", count: int = 10, mailbox: Optional[str] = None) -> str:
        """
        List recent emails from your inbox or a shared mailbox.

        Args:
            folder (str): Email folder to list (e.g. 'inbox', 'sent', 'drafts', or a folder name)
            count (int): Number of emails to retrieve (default: 10, max: 50)
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await email_handlers.list_emails(services.client, folder, count, mailbox)

    @mcp.tool()
    async def search_emails(
        query: str = "",
        folder: str = "inbox",
        sender: str = "",
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
        """
        Search for emails using various criteria. Supports date filtering, sort order and paging.

        If the full combination of criteria finds nothing, simpler searches are tried
        automatically; the result says which search strategy produced it.

        Args:
            query (str): Search query text to find in emails
            folder (str): Email folder to search in (default: 'inbox')
            sender (str): Filter by sender email address or name
            to (str): Filter by recipient email address or name
            subject (str): Filter by email subject
            has_attachments (bool, optional): Only emails with attachments
            unread_only (bool, optional): Only unread emails
            category (str, optional): Only emails with this category (see list_categories)
            before (str, optional): Received before this date. ISO dates (2024-01-15) or 'today', 'yesterday', '7 days ago', '2 weeks ago', '1 month ago'
            after (str, optional): Received after this date. Same formats as 'before'
            sort_order (str): 'asc' for oldest first, 'desc' for newest first (default: 'desc')
            skip (int): Number of emails to skip for pagination (e.g. skip=50 to get emails 51-100)
            count (int): Number of results to return (default: 10, max: 50)
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await email_handlers.search_emails(
            services.planner,
            query=query,
            folder=folder,
            from_=sender,
            to=to,
            subject=subject,
            has_attachments=has_attachments,
            unread_only=unread_only,
            category=category,
            before=before,
            after=after,
            sort_order=sort_order,
            skip=skip,
            count=count,
            mailbox=mailbox,
        )

    @mcp.tool()
    async def read_email(email_id: str, mailbox: Optional[str] = None) -> str:
        """
        Read the content of a specific email.

        Args:
            email_id (str): ID of the email to read
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await email_handlers.read_email(services.client, email_id, mailbox)

    @mcp.tool()
    async def send_email(
        to: str,
        subject: str,
        body: str,
        cc: Optional[str] = None,
        bcc: Optional[str] = None,
        importance: str = "normal",
        save_to_sent_items: bool = True,
        mailbox: Optional[str] = None,
    ) -> str:
        """
        Compose and send a new email from your account or a shared mailbox.

        Args:
            to (str): Comma-separated list of recipient email addresses
            subject (str): Email subject
            body (str): Email body content (plain text or HTML)
            cc (str, optional): Comma-separated list of CC recipient email addresses
            bcc (str, optional): Comma-separated list of BCC recipient email addresses
            importance (str): Email importance (normal, high, low)
            save_to_sent_items (bool): Whether to save the email to sent items
            mailbox (str, optional): Email address of a shared mailbox to send from.
        """
        return await email_handlers.send_email(
            services.client, to, subject, body, cc, bcc, importance, save_to_sent_items, mailbox
        )

    @mcp.tool()
    async def mark_as_read(email_id: str, is_read: bool = True, mailbox: Optional[str] = None) -> str:
        """
        Mark an email as read or unread.

        Args:
            email_id (str): ID of the email
            is_read (bool): True to mark as read, False to mark as unread
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await email_handlers.mark_as_read(services.client, email_id, is_read, mailbox)

    @mcp.tool()
    async def delete_email(email_id: str, mailbox: Optional[str] = None) -> str:
        """
        Delete an email. The email is moved to Deleted Items.

        Args:
            email_id (str): ID of the email to delete
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await email_handlers.delete_email(services.client, email_id, mailbox)
