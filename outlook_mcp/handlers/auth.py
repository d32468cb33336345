"""
Authentication Handlers Module

Server information, sign-in, status and sign-out.
"""

from outlook_mcp import __version__
from outlook_mcp.auth.oauth import OAuthFlow
from outlook_mcp.auth.token_manager import TokenManager
from outlook_mcp.handlers.common import require, tool_errors
from outlook_mcp.models import TokenState
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)


def about() -> str:
    return (
        f"Outlook Assistant MCP Server v{__version__}\n\n"
        "Provides access to Microsoft Outlook email, calendar and categories through the "
        "Microsoft Graph API.\n\n"
        "Features:\n"
        "- Email: list, search, read, send, mark and delete emails\n"
        "- Calendar: list, create, accept, decline, cancel and delete events\n"
        "- Folders: list and create folders, move emails\n"
        "- Categories: list categories, add them to and remove them from emails\n"
        "- Shared mailboxes: pass the 'mailbox' parameter with a shared mailbox address\n\n"
        "Use 'list_shared_mailboxes' to discover available shared mailboxes."
    )


def authenticate(token_manager: TokenManager, oauth: OAuthFlow, test_mode: bool = False, force: bool = False) -> str:
    if test_mode:
        token_manager.create_test_credentials()
        return "Successfully authenticated with Microsoft Graph API (test mode)"

    if not force and token_manager.classify(token_manager.record) is TokenState.VALID:
        return "Already authenticated. Use force=true to sign in again."

    if not token_manager.client_id:
        return "No client ID configured. Set MS_CLIENT_ID or auth.client_id in config.yaml."

    url = oauth.build_authorization_url()
    return (
        f"Authentication required. Please visit the following URL to authenticate with Microsoft: {url}\n\n"
        "After signing in, call 'complete_authentication' with the 'code' and 'state' "
        "values from the redirect URL."
    )


@tool_errors("completing authentication")
async def complete_authentication(oauth: OAuthFlow, code: str, state: str) -> str:
    require(code, "Authorization code is required.")
    if not oauth.verify_state(state):
        return "Invalid or expired state parameter. Please start again with 'authenticate'."

    record = await oauth.exchange_code(code)
    return f"Successfully authenticated. Granted scopes: {', '.join(record.scopes) or 'none reported'}"


def check_auth_status(token_manager: TokenManager) -> str:
    record = token_manager.record
    state = token_manager.classify(record)

    if state is TokenState.ABSENT:
        return "Not authenticated. Please use the 'authenticate' tool to sign in."

    if state is TokenState.EXPIRING and not record.refresh_token:
        return "Token expired. Please re-authenticate using the 'authenticate' tool."

    message = "Authenticated and ready"
    if state is TokenState.EXPIRING:
        message += " (token will be refreshed on next use)"

    if record.scopes:
        has_shared = any(".shared" in scope.lower() for scope in record.scopes)
        message += "\n\nGranted permissions:\n- Primary mailbox: Yes"
        message += f"\n- Shared mailboxes: {'Yes' if has_shared else 'No (re-authenticate to enable)'}"
        if not has_shared:
            message += (
                "\n\nNote: To access shared mailboxes, re-authenticate with the 'authenticate' "
                "tool (force=true) to request shared mailbox permissions."
            )
    return message


def logout(token_manager: TokenManager) -> str:
    if token_manager.record is None:
        return "No active session to log out from."
    token_manager.clear()
    return "Logged out successfully."
