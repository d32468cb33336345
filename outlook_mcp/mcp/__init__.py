"""
Outlook MCP Protocol Module

FastMCP tool registration for the Outlook server.
"""
