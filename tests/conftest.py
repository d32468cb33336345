"""
Shared fixtures for the request layer tests.
"""

from typing import Callable, Optional

import httpx
import pytest

from outlook_mcp.graph.client import GraphClient
from tests.fakes import StaticTokenProvider


@pytest.fixture
def make_client() -> Callable[..., GraphClient]:
    """Build a GraphClient whose HTTP traffic goes to ``handler``."""

    def factory(handler, token: Optional[str] = "test-access-token", page_size: int = 50) -> GraphClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return GraphClient(StaticTokenProvider(token), http_client, page_size=page_size)

    return factory
