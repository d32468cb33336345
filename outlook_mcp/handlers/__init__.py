"""
Outlook MCP Handlers Module

Tool implementations. Each handler takes its collaborators explicitly and
returns a single human-readable message.
"""
