"""
Outlook MCP

MCP server for Outlook mail, calendar and categories over Microsoft Graph.
"""

__version__ = "0.3.0"
