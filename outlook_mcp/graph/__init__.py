"""
Outlook MCP Graph Module

Authenticated Microsoft Graph requests, pagination and progressive search.
"""

from outlook_mcp.graph.errors import (
    OutlookError,
    AuthError,
    RemoteError,
    TransportError,
    ValidationError,
)
from outlook_mcp.graph.client import GraphClient, query_params
from outlook_mcp.graph.search import SearchPlanner

__all__ = [
    'OutlookError',
    'AuthError',
    'RemoteError',
    'TransportError',
    'ValidationError',
    'GraphClient',
    'query_params',
    'SearchPlanner',
]
