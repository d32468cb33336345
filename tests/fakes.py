"""
Test doubles for the Graph request layer.
"""

from typing import Any, Dict, List, Optional

import httpx

from outlook_mcp.models import FetchResult


class StaticTokenProvider:
    """Hands out a fixed access token, or None to simulate a signed-out user."""

    def __init__(self, token: Optional[str] = "test-access-token") -> None:
        self.token = token
        self.calls = 0

    async def get_access_token(self) -> Optional[str]:
        self.calls += 1
        return self.token


class PagedCollection:
    """
    Serves a list of items the way Graph pages a collection: honours $top and
    $skip and adds @odata.nextLink while more items remain.
    """

    def __init__(self, items: List[Dict[str, Any]]) -> None:
        self.items = items
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        top = int(request.url.params.get("$top", 10))
        skip = int(request.url.params.get("$skip", 0))
        page = self.items[skip:skip + top]
        body: Dict[str, Any] = {"value": page}
        if skip + top < len(self.items):
            body["@odata.nextLink"] = f"https://graph.microsoft.com/v1.0/next?$skip={skip + top}"
        return httpx.Response(200, json=body)


class ScriptedFetchClient:
    """
    Stands in for GraphClient in search tests. Each fetch() consumes the next
    scripted outcome: a list of items or an exception to raise.
    """

    def __init__(self, outcomes: List[Any]) -> None:
        self.outcomes = list(outcomes)
        self.calls: List[Dict[str, Any]] = []

    async def fetch(self, path, params=None, max_items=10):
        self.calls.append({"path": path, "params": dict(params or {}), "max_items": max_items})
        outcome = self.outcomes.pop(0) if self.outcomes else []
        if isinstance(outcome, Exception):
            raise outcome
        return FetchResult(items=outcome, pages=1)


def make_messages(count: int) -> List[Dict[str, Any]]:
    return [{"id": f"msg{i}", "subject": f"Message {i}"} for i in range(count)]
