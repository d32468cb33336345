"""
Tests for auth/token_manager.py - Expiry classification and single-flight refresh
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from urllib.parse import parse_qs

import httpx
import pytest

from outlook_mcp.auth.token_manager import TokenManager, coerce_expires_in
from outlook_mcp.auth.token_store import TokenStore
from outlook_mcp.graph.errors import RemoteError
from outlook_mcp.models import CredentialRecord, TokenState

NOW = datetime(2026, 1, 19, 12, 0, tzinfo=timezone.utc)


class TokenEndpoint:
    """Fake identity platform token endpoint that counts refresh requests."""

    def __init__(self, status_code=200, payload=None, delay=0.01):
        self.status_code = status_code
        self.payload = payload if payload is not None else {
            "access_token": "new-access",
            "refresh_token": "new-refresh",
            "expires_in": 3600,
        }
        self.delay = delay
        self.forms = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.forms.append({k: v[0] for k, v in parse_qs(request.content.decode()).items()})
        await asyncio.sleep(self.delay)
        return httpx.Response(self.status_code, json=self.payload)


def make_manager(tmp_path, endpoint, expires_in=timedelta(minutes=4), refresh_token="old-refresh"):
    store = TokenStore(tmp_path / "tokens.json")
    store.save(CredentialRecord(
        access_token="old-access",
        refresh_token=refresh_token,
        expires_at=NOW + expires_in,
        scopes=["User.Read", "Mail.Read"],
    ))
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
    return TokenManager(store, http_client, client_id="client-id", clock=lambda: NOW)


class TestClassify:
    """Tests for expiry classification."""

    def test_four_minutes_left_is_expiring(self, tmp_path):
        manager = make_manager(tmp_path, TokenEndpoint())
        assert manager.classify(manager.record) is TokenState.EXPIRING

    def test_ten_minutes_left_is_valid(self, tmp_path):
        manager = make_manager(tmp_path, TokenEndpoint(), expires_in=timedelta(minutes=10))
        assert manager.classify(manager.record) is TokenState.VALID

    def test_no_record_is_absent(self, tmp_path):
        manager = make_manager(tmp_path, TokenEndpoint())
        assert manager.classify(None) is TokenState.ABSENT

    def test_unknown_expiry_is_expiring(self, tmp_path):
        manager = make_manager(tmp_path, TokenEndpoint())
        assert manager.classify(CredentialRecord(access_token="a")) is TokenState.EXPIRING

    def test_state_before_load_is_unloaded(self, tmp_path):
        manager = make_manager(tmp_path, TokenEndpoint())
        assert manager.state is TokenState.UNLOADED


class TestGetAccessToken:
    """Tests for TokenManager.get_access_token."""

    @pytest.mark.asyncio
    async def test_valid_token_is_returned_without_refresh(self, tmp_path):
        endpoint = TokenEndpoint()
        manager = make_manager(tmp_path, endpoint, expires_in=timedelta(hours=1))

        assert await manager.get_access_token() == "old-access"
        assert endpoint.forms == []

    @pytest.mark.asyncio
    async def test_no_stored_record(self, tmp_path):
        endpoint = TokenEndpoint()
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
        manager = TokenManager(TokenStore(tmp_path / "none.json"), http_client, client_id="client-id")

        assert await manager.get_access_token() is None
        assert endpoint.forms == []

    @pytest.mark.asyncio
    async def test_absent_record_is_reloaded(self, tmp_path):
        """Test that credentials written after startup are picked up."""
        store = TokenStore(tmp_path / "tokens.json")
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(TokenEndpoint()))
        manager = TokenManager(store, http_client, client_id="client-id", clock=lambda: NOW)

        assert await manager.get_access_token() is None
        store.save(CredentialRecord(access_token="late", expires_at=NOW + timedelta(hours=1)))
        assert await manager.get_access_token() == "late"

    @pytest.mark.asyncio
    async def test_expiring_token_is_refreshed(self, tmp_path):
        """Test that a token within the buffer is renewed and persisted."""
        endpoint = TokenEndpoint()
        manager = make_manager(tmp_path, endpoint)

        token = await manager.get_access_token()

        assert token == "new-access"
        assert endpoint.forms[0]["grant_type"] == "refresh_token"
        assert endpoint.forms[0]["refresh_token"] == "old-refresh"
        assert endpoint.forms[0]["client_id"] == "client-id"
        assert endpoint.forms[0]["scope"] == "User.Read Mail.Read"
        assert manager.record.expires_at == NOW + timedelta(seconds=3600)
        assert TokenStore(tmp_path / "tokens.json").load().access_token == "new-access"

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_refresh(self, tmp_path):
        """Test that simultaneous callers trigger exactly one refresh request."""
        endpoint = TokenEndpoint(delay=0.05)
        manager = make_manager(tmp_path, endpoint)

        tokens = await asyncio.gather(*(manager.get_access_token() for _ in range(5)))

        assert tokens == ["new-access"] * 5
        assert len(endpoint.forms) == 1

    @pytest.mark.asyncio
    async def test_failed_refresh_returns_none_to_all(self, tmp_path):
        """Test that a rejected refresh reports absence to every waiter."""
        endpoint = TokenEndpoint(status_code=400, payload={"error": "invalid_grant", "error_description": "expired"})
        manager = make_manager(tmp_path, endpoint)

        tokens = await asyncio.gather(*(manager.get_access_token() for _ in range(3)))

        assert tokens == [None, None, None]
        assert len(endpoint.forms) == 1
        assert manager.record.access_token == "old-access"

    @pytest.mark.asyncio
    async def test_failed_refresh_is_retried_on_next_call(self, tmp_path):
        endpoint = TokenEndpoint(status_code=500, payload={})
        manager = make_manager(tmp_path, endpoint)

        assert await manager.get_access_token() is None
        assert await manager.get_access_token() is None
        assert len(endpoint.forms) == 2

    @pytest.mark.asyncio
    async def test_expiring_without_refresh_token(self, tmp_path):
        endpoint = TokenEndpoint()
        manager = make_manager(tmp_path, endpoint, refresh_token=None)

        assert await manager.get_access_token() is None
        assert endpoint.forms == []

    @pytest.mark.asyncio
    async def test_old_refresh_token_kept_when_not_rotated(self, tmp_path):
        endpoint = TokenEndpoint(payload={"access_token": "new-access", "expires_in": 1800})
        manager = make_manager(tmp_path, endpoint)

        await manager.get_access_token()

        assert manager.record.refresh_token == "old-refresh"
        assert manager.record.expires_at == NOW + timedelta(seconds=1800)
        assert manager.record.scopes == ["User.Read", "Mail.Read"]

    @pytest.mark.asyncio
    async def test_returned_scope_replaces_stored_scopes(self, tmp_path):
        endpoint = TokenEndpoint(payload={"access_token": "new-access", "scope": "Mail.Read.Shared"})
        manager = make_manager(tmp_path, endpoint)

        await manager.get_access_token()

        assert manager.record.scopes == ["Mail.Read.Shared"]
        assert manager.record.expires_at == NOW + timedelta(seconds=3600)

    @pytest.mark.asyncio
    async def test_persist_failure_still_returns_token(self, tmp_path):
        """Test that a refreshed token is used even if it cannot be saved."""
        manager = make_manager(tmp_path, TokenEndpoint())

        with patch.object(manager.store, "save", return_value=False):
            token = await manager.get_access_token()

        assert token == "new-access"
        assert manager.record.access_token == "new-access"

    @pytest.mark.asyncio
    async def test_missing_access_token_in_response_is_failure(self, tmp_path):
        manager = make_manager(tmp_path, TokenEndpoint(payload={"token_type": "Bearer"}))
        assert await manager.get_access_token() is None


class TestRequestToken:
    """Tests for TokenManager.request_token."""

    @pytest.mark.asyncio
    async def test_error_description_is_reported(self, tmp_path):
        endpoint = TokenEndpoint(status_code=400, payload={"error": "invalid_grant", "error_description": "AADSTS70008"})
        manager = make_manager(tmp_path, endpoint)

        with pytest.raises(RemoteError) as exc_info:
            await manager.request_token({"grant_type": "refresh_token"})

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "invalid_grant"
        assert "AADSTS70008" in str(exc_info.value)


class TestCoerceExpiresIn:
    """Tests for coerce_expires_in function."""

    def test_values(self):
        assert coerce_expires_in(1800) == 1800
        assert coerce_expires_in("1800") == 1800
        assert coerce_expires_in(None) == 3600
        assert coerce_expires_in(-5) == 3600
        assert coerce_expires_in("soon") == 3600


class TestCredentialHelpers:
    """Tests for test-mode credentials and clearing."""

    def test_create_test_credentials(self, tmp_path):
        manager = make_manager(tmp_path, TokenEndpoint())

        record = manager.create_test_credentials()

        assert record.access_token.startswith("test_access_token_")
        assert manager.classify(manager.record) is TokenState.VALID

    def test_clear(self, tmp_path):
        manager = make_manager(tmp_path, TokenEndpoint())
        manager.clear()

        assert manager.store.exists() is False
        assert manager.state is TokenState.ABSENT
