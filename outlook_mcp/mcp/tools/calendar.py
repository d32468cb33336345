"""
Calendar Tools Module

Registers the calendar event tools on the FastMCP application.
"""

from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from outlook_mcp.handlers import calendar as calendar_handlers
from outlook_mcp.utils.services import Services


def setup_calendar_tools(mcp: FastMCP, services: Services) -> None:
    """Set up calendar tools on the FastMCP application."""

    @mcp.tool()
    async def list_events(count: int = 10, mailbox: Optional[str] = None) -> str:
        """
        List upcoming events from your calendar or a shared mailbox calendar.

        Args:
            count (int): Number of events to retrieve (default: 10, max: 50)
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await calendar_handlers.list_events(services.client, count, mailbox)

    @mcp.tool()
    async def create_event(
        subject: str,
        start: str,
        end: str,
        attendees: Optional[List[str]] = None,
        body: Optional[str] = None,
        mailbox: Optional[str] = None,
    ) -> str:
        """
        Create a new calendar event.

        Args:
            subject (str): The subject of the event
            start (str): The start time of the event in ISO 8601 format
            end (str): The end time of the event in ISO 8601 format
            attendees (List[str], optional): Email addresses of attendees
            body (str, optional): The body of the event
            mailbox (str, optional): Email address of a shared mailbox to create the event in.
        """
        return await calendar_handlers.create_event(services.client, subject, start, end, attendees, body, mailbox)

    @mcp.tool()
    async def accept_event(event_id: str, comment: Optional[str] = None, mailbox: Optional[str] = None) -> str:
        """
        Accept a calendar event.

        Args:
            event_id (str): The ID of the event to accept
            comment (str, optional): Comment sent with the response
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await calendar_handlers.accept_event(services.client, event_id, comment, mailbox)

    @mcp.tool()
    async def decline_event(event_id: str, comment: Optional[str] = None, mailbox: Optional[str] = None) -> str:
        """
        Decline a calendar event.

        Args:
            event_id (str): The ID of the event to decline
            comment (str, optional): Comment sent with the response
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await calendar_handlers.decline_event(services.client, event_id, comment, mailbox)

    @mcp.tool()
    async def cancel_event(event_id: str, comment: Optional[str] = None, mailbox: Optional[str] = None) -> str:
        """
        Cancel a calendar event you organized. Attendees receive the comment.

        Args:
            event_id (str): The ID of the event to cancel
            comment (str, optional): Comment sent to attendees
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await calendar_handlers.cancel_event(services.client, event_id, comment, mailbox)

    @mcp.tool()
    async def delete_event(event_id: str, mailbox: Optional[str] = None) -> str:
        """
        Delete a calendar event.

        Args:
            event_id (str): The ID of the event to delete
            mailbox (str, optional): Email address of a shared mailbox. Leave empty to use your primary mailbox.
        """
        return await calendar_handlers.delete_event(services.client, event_id, mailbox)
