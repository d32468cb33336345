"""
Token Manager Module

This module keeps the Microsoft Graph access token valid. It loads the credential
record lazily, renews it shortly before expiry and makes sure only one renewal
call is in flight at a time; concurrent callers share its outcome.
"""

import asyncio
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx

from outlook_mcp.auth.token_store import TokenStore
from outlook_mcp.graph.errors import RemoteError, TransportError, OutlookError
from outlook_mcp.models import CredentialRecord, TokenState
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_REFRESH_BUFFER = timedelta(seconds=300)
DEFAULT_EXPIRES_IN = 3600
TOKEN_ENDPOINT_TEMPLATE = "https://login.microsoftonline.com/{tenant}/oauth2/v2.0/token"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def coerce_expires_in(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_EXPIRES_IN
    if isinstance(value, (int, float)):
        return int(value) if value > 0 else DEFAULT_EXPIRES_IN
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip()) or DEFAULT_EXPIRES_IN
    return DEFAULT_EXPIRES_IN


class TokenManager:
    """
    Owns the in-process credential record and the single refresh attempt slot.
    """

    def __init__(
        self,
        store: TokenStore,
        http_client: httpx.AsyncClient,
        client_id: str,
        client_secret: str = "",
        scopes: Optional[List[str]] = None,
        token_endpoint: str = TOKEN_ENDPOINT_TEMPLATE.format(tenant="common"),
        refresh_buffer: timedelta = DEFAULT_REFRESH_BUFFER,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.http_client = http_client
        self.client_id = client_id
        self.client_secret = client_secret
        self.scopes = list(scopes or [])
        self.token_endpoint = token_endpoint
        self.refresh_buffer = refresh_buffer
        self.clock = clock

        self._record: Optional[CredentialRecord] = None
        self._loaded = False
        self._refresh_task: Optional["asyncio.Future[Optional[str]]"] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any], store: TokenStore, http_client: httpx.AsyncClient) -> "TokenManager":
        """
        Build a TokenManager from the server configuration.

        Args:
            config (Dict[str, Any]): The configuration returned by get_config().
            store (TokenStore): Where the credential record lives.
            http_client (httpx.AsyncClient): Client used for token endpoint calls.

        Returns:
            TokenManager: The configured manager.
        """
        return cls(
            store=store,
            http_client=http_client,
            client_id=config.get("client_id", ""),
            client_secret=config.get("client_secret", ""),
            scopes=config.get("scopes"),
            token_endpoint=TOKEN_ENDPOINT_TEMPLATE.format(tenant=config.get("tenant_id") or "common"),
            refresh_buffer=timedelta(seconds=int(config.get("refresh_buffer_seconds", 300))),
        )

    @property
    def record(self) -> Optional[CredentialRecord]:
        """The current in-memory credential record, loading it on first access."""
        self._ensure_loaded()
        return self._record

    @property
    def state(self) -> TokenState:
        if self._refresh_task is not None:
            return TokenState.REFRESHING
        if not self._loaded:
            return TokenState.UNLOADED
        return self.classify(self._record)

    def classify(self, record: Optional[CredentialRecord]) -> TokenState:
        """
        Classify a credential record against the renewal buffer.

        Args:
            record (Optional[CredentialRecord]): The record to classify.

        Returns:
            TokenState: VALID, EXPIRING or ABSENT.
        """
        if record is None or not record.access_token:
            return TokenState.ABSENT
        if record.expires_at is None:
            return TokenState.EXPIRING
        if self.clock() >= record.expires_at - self.refresh_buffer:
            return TokenState.EXPIRING
        return TokenState.VALID

    def _ensure_loaded(self) -> None:
        # An absent record is looked up again so an authorization completed
        # elsewhere is picked up without a restart.
        if self._record is None:
            self._record = self.store.load()
            self._loaded = True

    async def get_access_token(self) -> Optional[str]:
        """
        Get a usable access token, renewing it if it is about to expire.

        Returns:
            Optional[str]: The access token, or None if the user must authenticate.
        """
        self._ensure_loaded()
        record = self._record
        state = self.classify(record)

        if state is TokenState.VALID:
            return record.access_token
        if state is TokenState.ABSENT:
            logger.info("No access token available")
            return None

        if not record.refresh_token:
            logger.warning("Token expired and no refresh token available")
            return None

        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._run_refresh(record))
        else:
            logger.debug("Refresh already in progress, waiting")

        # A cancelled waiter must not cancel the attempt other callers share.
        return await asyncio.shield(self._refresh_task)

    async def _run_refresh(self, record: CredentialRecord) -> Optional[str]:
        try:
            return await self._refresh(record)
        finally:
            self._refresh_task = None

    async def _refresh(self, record: CredentialRecord) -> Optional[str]:
        logger.info("Refreshing access token")
        form = {
            "grant_type": "refresh_token",
            "refresh_token": record.refresh_token,
            "scope": " ".join(record.scopes or self.scopes),
        }
        try:
            payload = await self.request_token(form)
        except OutlookError as e:
            logger.error(f"Failed to refresh token: {e}")
            return None

        updated = self._merge(record, payload)
        self._record = updated
        if not self.store.save(updated):
            logger.warning("Refreshed token could not be persisted, keeping it in memory")
        logger.info("Access token refreshed successfully")
        return updated.access_token

    def _merge(self, record: CredentialRecord, payload: Dict[str, Any]) -> CredentialRecord:
        expires_in = coerce_expires_in(payload.get("expires_in"))
        scope = payload.get("scope")
        return record.model_copy(
            update={
                "access_token": payload["access_token"],
                "refresh_token": payload.get("refresh_token") or record.refresh_token,
                "expires_at": self.clock() + timedelta(seconds=expires_in),
                "scopes": scope.split() if isinstance(scope, str) and scope else record.scopes,
            }
        )

    async def request_token(self, form: Dict[str, str]) -> Dict[str, Any]:
        """
        Post a grant to the identity platform token endpoint.

        Args:
            form (Dict[str, str]): The grant fields, without client credentials.

        Returns:
            Dict[str, Any]: The token response. Always contains ``access_token``.

        Raises:
            TransportError: The endpoint could not be reached.
            RemoteError: The endpoint rejected the grant or answered garbage.
        """
        data = dict(form)
        data["client_id"] = self.client_id
        if self.client_secret:
            data["client_secret"] = self.client_secret

        try:
            response = await self.http_client.post(
                self.token_endpoint,
                data=data,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Token request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        if not response.is_success:
            message = payload.get("error_description") or f"Token refresh failed: {response.status_code}"
            raise RemoteError(response.status_code, message, payload.get("error"))

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise RemoteError(response.status_code, "Token response is missing an access_token")
        return payload

    def store_credentials(self, record: CredentialRecord) -> bool:
        """
        Install a freshly issued credential record and persist it.

        Args:
            record (CredentialRecord): The new record.

        Returns:
            bool: True if the record was persisted.
        """
        self._record = record
        self._loaded = True
        return self.store.save(record)

    def create_test_credentials(self) -> CredentialRecord:
        """Install placeholder credentials valid for one hour (test mode)."""
        suffix = secrets.token_hex(4)
        record = CredentialRecord(
            access_token=f"test_access_token_{suffix}",
            refresh_token=f"test_refresh_token_{suffix}",
            expires_at=self.clock() + timedelta(seconds=DEFAULT_EXPIRES_IN),
            scopes=self.scopes,
        )
        self.store_credentials(record)
        return record

    def clear(self) -> None:
        """Forget the credential in memory and on disk."""
        self._record = None
        self._loaded = True
        self.store.clear()
