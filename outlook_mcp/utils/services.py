"""
Services Module

Builds the objects tools depend on: one HTTP client, one token manager and the
Graph request layer on top of them. Created once at startup and handed to the
tool setup functions.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from outlook_mcp.auth.oauth import OAuthFlow
from outlook_mcp.auth.token_manager import TokenManager
from outlook_mcp.auth.token_store import TokenStore
from outlook_mcp.graph.client import GraphClient
from outlook_mcp.graph.search import SearchPlanner


@dataclass
class Services:
    config: Dict[str, Any]
    http_client: httpx.AsyncClient
    token_manager: TokenManager
    oauth: OAuthFlow
    client: GraphClient
    planner: SearchPlanner

    async def aclose(self) -> None:
        await self.http_client.aclose()


def create_services(config: Dict[str, Any], http_client: Optional[httpx.AsyncClient] = None) -> Services:
    """
    Wire up the request layer from configuration.

    Args:
        config (Dict[str, Any]): The configuration returned by get_config().
        http_client (Optional[httpx.AsyncClient]): Client to use instead of a new one.

    Returns:
        Services: The wired services.
    """
    if http_client is None:
        http_client = httpx.AsyncClient(timeout=float(config.get("request_timeout", 30)))

    store = TokenStore(config["token_storage_path"], config.get("token_encryption_key") or None)
    token_manager = TokenManager.from_config(config, store, http_client)
    oauth = OAuthFlow(token_manager, config.get("redirect_uri", ""), config.get("tenant_id", "common"))
    client = GraphClient(
        token_manager,
        http_client,
        base_url=config.get("graph_api_endpoint", "https://graph.microsoft.com/v1.0/"),
        page_size=int(config.get("page_size", 50)),
    )
    planner = SearchPlanner(client, select_fields=config.get("email_select_fields"))
    return Services(
        config=config,
        http_client=http_client,
        token_manager=token_manager,
        oauth=oauth,
        client=client,
        planner=planner,
    )
