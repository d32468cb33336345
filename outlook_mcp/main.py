#!/usr/bin/env python3
"""
Outlook MCP Server

This module provides the main entry point for the Outlook MCP server.
"""

import sys
import traceback
from contextlib import asynccontextmanager
from typing import AsyncIterator

from mcp.server.fastmcp import FastMCP

from outlook_mcp.mcp.tools import setup_tools
from outlook_mcp.utils.config import get_config
from outlook_mcp.utils.logger import setup_logger
from outlook_mcp.utils.services import Services, create_services

logger = setup_logger()


def create_app(services: Services) -> FastMCP:
    """
    Create the FastMCP application with every tool registered.

    Args:
        services (Services): The request layer shared by all tools.

    Returns:
        FastMCP: The application.
    """

    @asynccontextmanager
    async def lifespan(app: FastMCP) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await services.aclose()
            logger.info("HTTP client closed")

    mcp = FastMCP(name=services.config.get("server_name") or "Outlook Assistant", lifespan=lifespan)
    setup_tools(mcp, services)
    return mcp


def main() -> None:
    """
    Main entry point for the Outlook MCP server.
    """
    try:
        config = get_config()
        services = create_services(config)

        if services.token_manager.record is None:
            logger.info("No stored credentials, use the 'authenticate' tool to sign in")

        mcp = create_app(services)
        logger.info("Starting MCP server")
        mcp.run()
    except Exception as e:
        logger.error(f"Error running MCP server: {e}")
        logger.error(traceback.format_exc())
        sys.exit(1)


if __name__ == "__main__":
    main()
