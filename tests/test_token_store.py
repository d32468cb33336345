"""
Tests for auth/token_store.py - Credential persistence
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from outlook_mcp.auth.token_store import TokenStore
from outlook_mcp.models import CredentialRecord


@pytest.fixture
def record():
    return CredentialRecord(
        access_token="access-123",
        refresh_token="refresh-456",
        expires_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        scopes=["User.Read", "Mail.Read"],
    )


class TestTokenStoreRoundTrip:
    """Tests for saving and loading records."""

    def test_plain_round_trip(self, tmp_path, record):
        """Test that a saved record loads back unchanged."""
        store = TokenStore(tmp_path / "tokens.json")

        assert store.save(record) is True
        loaded = store.load()

        assert loaded == record

    def test_encrypted_round_trip(self, tmp_path, record):
        """Test that an encrypted file loads back and hides the token."""
        path = tmp_path / "tokens.json"
        store = TokenStore(path, encryption_key="passphrase")

        assert store.save(record) is True
        assert "access-123" not in path.read_text()
        assert store.load() == record

    def test_wrong_key_reads_as_absent(self, tmp_path, record):
        path = tmp_path / "tokens.json"
        TokenStore(path, encryption_key="passphrase").save(record)

        assert TokenStore(path, encryption_key="other").load() is None

    def test_creates_parent_directory(self, tmp_path, record):
        store = TokenStore(tmp_path / "nested" / "dir" / "tokens.json")
        assert store.save(record) is True
        assert store.exists()

    def test_clear_removes_file(self, tmp_path, record):
        store = TokenStore(tmp_path / "tokens.json")
        store.save(record)

        store.clear()

        assert not store.exists()
        assert store.load() is None


class TestTokenStoreLoad:
    """Tests for reading problematic files."""

    def test_missing_file(self, tmp_path):
        assert TokenStore(tmp_path / "missing.json").load() is None

    def test_malformed_file(self, tmp_path):
        """Test that an unparseable file reads as no record."""
        path = tmp_path / "tokens.json"
        path.write_text("{not json")

        assert TokenStore(path).load() is None

    def test_empty_access_token(self, tmp_path):
        path = tmp_path / "tokens.json"
        path.write_text(json.dumps({"access_token": "", "refresh_token": "r"}))

        assert TokenStore(path).load() is None

    def test_legacy_layout(self, tmp_path):
        """Test that epoch-millisecond expiry and a scope string are accepted."""
        path = tmp_path / "tokens.json"
        path.write_text(json.dumps({
            "access_token": "legacy-access",
            "refresh_token": "legacy-refresh",
            "expires_at": 1700000000000,
            "scope": "User.Read Mail.Read",
        }))

        loaded = TokenStore(path).load()

        assert loaded.access_token == "legacy-access"
        assert loaded.scopes == ["User.Read", "Mail.Read"]
        assert loaded.expires_at == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_naive_expiry_is_utc(self, tmp_path):
        path = tmp_path / "tokens.json"
        path.write_text(json.dumps({"access_token": "a", "expires_at": "2026-01-01T00:00:00"}))

        loaded = TokenStore(path).load()

        assert loaded.expires_at.tzinfo is not None
        assert loaded.expires_at.utcoffset() == timedelta(0)
