"""
Graph Client Module

This module issues authenticated requests against the Microsoft Graph API and
drives server-side pagination for list requests.
"""

from typing import Any, Dict, Optional, Protocol, Tuple

import httpx

from outlook_mcp.graph.errors import AuthError, OutlookError, RemoteError, TransportError
from outlook_mcp.models import FetchResult
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)

GRAPH_API_ENDPOINT = "https://graph.microsoft.com/v1.0/"
DEFAULT_PAGE_SIZE = 50


class AccessTokenProvider(Protocol):
    async def get_access_token(self) -> Optional[str]:
        ...


def query_params(
    select: Optional[str] = None,
    filter_expr: Optional[str] = None,
    search: Optional[str] = None,
    order_by: Optional[str] = None,
    top: Optional[int] = None,
    skip: int = 0,
) -> Dict[str, Any]:
    """
    Build OData query parameters. Unset values are left out.

    Args:
        select: Comma separated field selection ($select)
        filter_expr: Filter expression ($filter)
        search: Search expression ($search)
        order_by: Ordering expression ($orderby)
        top: Page size ($top)
        skip: Offset into the collection ($skip); 0 is omitted

    Returns:
        Dict of query parameters keyed by their OData names
    """
    params: Dict[str, Any] = {}
    if select:
        params["$select"] = select
    if filter_expr:
        params["$filter"] = filter_expr
    if search:
        params["$search"] = search
    if order_by:
        params["$orderby"] = order_by
    if top:
        params["$top"] = top
    if skip > 0:
        params["$skip"] = skip
    return params


def _error_details(response: httpx.Response) -> Tuple[str, Optional[str]]:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase, None

    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict):
        return error.get("message") or response.reason_phrase, error.get("code")
    if isinstance(error, str):
        return payload.get("error_description") or error, error
    return response.reason_phrase, None


class GraphClient:
    """
    Authenticated Microsoft Graph request executor.

    Every request asks the token provider for a fresh access token, so a
    credential renewed by another caller is picked up immediately. No request is
    retried here.
    """

    def __init__(
        self,
        token_manager: AccessTokenProvider,
        http_client: httpx.AsyncClient,
        base_url: str = GRAPH_API_ENDPOINT,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.token_manager = token_manager
        self.http_client = http_client
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.page_size = page_size

    async def call(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Issue a single Graph request.

        Args:
            method: HTTP method
            path: Resource path relative to the API root (e.g. ``me/messages``)
            body: JSON body for write requests
            params: OData query parameters, passed through untouched

        Returns:
            The parsed JSON body, or an empty dict for bodiless responses

        Raises:
            AuthError: No usable access token; nothing was sent
            TransportError: The request did not produce a response
            RemoteError: The API answered with a non-2xx status
        """
        access_token = await self.token_manager.get_access_token()
        if not access_token:
            raise AuthError()

        url = self.base_url + path.lstrip("/")
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
        }
        logger.debug(f"{method} {path} params={params}")

        try:
            response = await self.http_client.request(
                method,
                url,
                params=params,
                json=body,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if not response.is_success:
            message, code = _error_details(response)
            raise RemoteError(response.status_code, message, code)

        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(response.status_code, "Invalid JSON response") from e

    async def fetch(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        max_items: int = 10,
    ) -> FetchResult:
        """
        Fetch up to ``max_items`` items from a collection, one page at a time.

        Each page asks for ``min(page_size, remaining)`` items starting at the
        caller's ``$skip`` plus what has been fetched so far. Fetching stops when
        the budget is met, a page comes back short or the response carries no
        ``@odata.nextLink``.

        Args:
            path: Collection path
            params: Base OData parameters; ``$top`` is replaced per page
            max_items: Maximum number of items to return

        Returns:
            FetchResult with items in server order. If a page after the first one
            fails, the items gathered so far are returned with ``error`` set.

        Raises:
            OutlookError: The first page failed
        """
        base_params = dict(params or {})
        base_params.pop("$top", None)
        offset = int(base_params.pop("$skip", 0) or 0)

        items = []
        pages = 0
        while len(items) < max_items:
            top = min(self.page_size, max_items - len(items))
            page_params = dict(base_params)
            page_params["$top"] = top
            if offset + len(items) > 0:
                page_params["$skip"] = offset + len(items)

            try:
                response = await self.call("GET", path, params=page_params)
            except OutlookError as e:
                if pages == 0:
                    raise
                logger.warning(f"Pagination of {path} stopped after {pages} page(s): {e}")
                return FetchResult(items=items, pages=pages, error=str(e))

            pages += 1
            page = response.get("value") or []
            items.extend(page[:top])
            logger.debug(f"Fetched page {pages} of {path}: {len(page)} item(s), {len(items)} total")

            if len(page) < top or not response.get("@odata.nextLink"):
                break

        return FetchResult(items=items, pages=pages)
