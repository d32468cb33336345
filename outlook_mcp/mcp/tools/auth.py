"""
Authentication Tools Module

Registers server information, authentication and mailbox discovery tools.
"""

from mcp.server.fastmcp import FastMCP

from outlook_mcp.handlers import auth as auth_handlers
from outlook_mcp.handlers import mailboxes as mailbox_handlers
from outlook_mcp.utils.services import Services


def setup_auth_tools(mcp: FastMCP, services: Services) -> None:
    """Set up authentication tools on the FastMCP application."""

    @mcp.tool()
    def about() -> str:
        """Returns information about this Outlook Assistant server."""
        return auth_handlers.about()

    @mcp.tool()
    def authenticate(force: bool = False) -> str:
        """
        Authenticate with Microsoft Graph API to access Outlook data.

        Returns a sign-in URL. After signing in, call complete_authentication with
        the code and state from the redirect.

        Args:
            force (bool): Force re-authentication even if already authenticated
        """
        return auth_handlers.authenticate(
            services.token_manager,
            services.oauth,
            test_mode=bool(services.config.get("use_test_mode")),
            force=force,
        )

    @mcp.tool()
    async def complete_authentication(code: str, state: str) -> str:
        """
        Finish sign-in by exchanging the authorization code for tokens.

        Args:
            code (str): The 'code' value from the redirect URL
            state (str): The 'state' value from the redirect URL
        """
        return await auth_handlers.complete_authentication(services.oauth, code, state)

    @mcp.tool()
    def check_auth_status() -> str:
        """Check the current authentication status and granted permissions."""
        return auth_handlers.check_auth_status(services.token_manager)

    @mcp.tool()
    def logout() -> str:
        """Log out and remove the stored tokens."""
        return auth_handlers.logout(services.token_manager)

    @mcp.tool()
    async def list_shared_mailboxes() -> str:
        """List shared mailboxes you have access to. Use the returned addresses as the 'mailbox' parameter."""
        return await mailbox_handlers.list_shared_mailboxes(services.client)
