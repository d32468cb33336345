"""
OAuth Module

This module builds the Microsoft identity platform authorization URL and exchanges
the returned authorization code for a credential record.
"""

import secrets
from datetime import timedelta
from typing import Optional
from urllib.parse import urlencode

from outlook_mcp.auth.token_manager import TokenManager, coerce_expires_in
from outlook_mcp.models import CredentialRecord
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)

AUTHORIZE_ENDPOINT_TEMPLATE = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/authorize"


class OAuthFlow:
    """
    Authorization code flow for a single pending login.
    """

    def __init__(self, token_manager: TokenManager, redirect_uri: str, tenant_id: str = "common") -> None:
        self.token_manager = token_manager
        self.redirect_uri = redirect_uri
        self.tenant_id = tenant_id or "common"
        self._state: Optional[str] = None

    def build_authorization_url(self) -> str:
        """
        Generate a fresh OAuth state and return the URL the user must visit.

        Returns:
            str: The authorization URL.
        """
        self._state = secrets.token_urlsafe(16)
        params = {
            "client_id": self.token_manager.client_id,
            "response_type": "code",
            "redirect_uri": self.redirect_uri,
            "response_mode": "query",
            "scope": " ".join(self.token_manager.scopes),
            "state": self._state,
        }
        base = AUTHORIZE_ENDPOINT_TEMPLATE.format(tenant=self.tenant_id)
        return f"{base}?{urlencode(params)}"

    def verify_state(self, state: str) -> bool:
        """
        Verify the OAuth state parameter.

        Args:
            state (str): The state parameter to verify.

        Returns:
            bool: True if the state parameter is valid, False otherwise.
        """
        if not self._state or not state or self._state != state:
            logger.warning("Invalid OAuth state parameter")
            return False

        # One-time use
        self._state = None
        return True

    async def exchange_code(self, code: str) -> CredentialRecord:
        """
        Exchange an authorization code for tokens and store them.

        Args:
            code (str): The authorization code returned to the redirect URI.

        Returns:
            CredentialRecord: The stored record.

        Raises:
            TransportError: The token endpoint could not be reached.
            RemoteError: The token endpoint rejected the code.
        """
        payload = await self.token_manager.request_token(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
                "scope": " ".join(self.token_manager.scopes),
            }
        )
        scope = payload.get("scope")
        record = CredentialRecord(
            access_token=payload["access_token"],
            refresh_token=payload.get("refresh_token"),
            expires_at=self.token_manager.clock() + timedelta(seconds=coerce_expires_in(payload.get("expires_in"))),
            scopes=scope.split() if isinstance(scope, str) and scope else self.token_manager.scopes,
        )
        self.token_manager.store_credentials(record)
        logger.info("Authorization code exchanged successfully")
        return record
