"""
Outlook MCP Tools Module

This module registers all tools on the FastMCP application.
"""

from mcp.server.fastmcp import FastMCP

from outlook_mcp.mcp.tools.auth import setup_auth_tools
from outlook_mcp.mcp.tools.calendar import setup_calendar_tools
from outlook_mcp.mcp.tools.categories import setup_category_tools
from outlook_mcp.mcp.tools.email import setup_email_tools
from outlook_mcp.mcp.tools.folders import setup_folder_tools
from outlook_mcp.utils.logger import get_logger
from outlook_mcp.utils.services import Services

logger = get_logger(__name__)


def setup_tools(mcp: FastMCP, services: Services) -> None:
    """
    Set up all tools on the FastMCP application.

    Args:
        mcp (FastMCP): The FastMCP application.
        services (Services): Shared request layer the tools call into.
    """
    setup_auth_tools(mcp, services)
    setup_email_tools(mcp, services)
    setup_calendar_tools(mcp, services)
    setup_folder_tools(mcp, services)
    setup_category_tools(mcp, services)
    logger.debug("Registered Outlook tools")
