"""
Outlook MCP Authentication Module

Credential persistence, token renewal and the authorization code flow.
"""

from outlook_mcp.auth.token_store import TokenStore
from outlook_mcp.auth.token_manager import TokenManager
from outlook_mcp.auth.oauth import OAuthFlow

__all__ = [
    'TokenStore',
    'TokenManager',
    'OAuthFlow',
]
