"""
Models Module

This module defines the data structures shared by the credential and request layers.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_serializer, field_validator


class CredentialRecord(BaseModel):
    """
    Schema for the persisted OAuth credential.

    The legacy token file layout stored ``scope`` as a space separated string and
    ``expires_at`` as epoch milliseconds; both are accepted on load.
    """
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    scopes: List[str] = Field(default_factory=list, validation_alias=AliasChoices("scopes", "scope"))

    @field_validator("expires_at", mode="before")
    @classmethod
    def _coerce_expiry(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        return value

    @field_validator("expires_at")
    @classmethod
    def _ensure_aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        return value

    @field_serializer("expires_at")
    def _serialize_expiry(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None


class TokenState(str, Enum):
    """Validity state of the in-process credential."""
    UNLOADED = "unloaded"
    VALID = "valid"
    EXPIRING = "expiring"
    REFRESHING = "refreshing"
    ABSENT = "absent"


class SearchTerms(BaseModel):
    """Free-text search criteria. Empty strings count as not supplied."""
    query: str = ""
    subject: str = ""
    from_: str = Field(default="", alias="from")
    to: str = ""

    model_config = {"populate_by_name": True}

    def get(self, field: str) -> str:
        """Look up a term by its search field name (``from`` included)."""
        if field == "from":
            return self.from_
        return getattr(self, field)

    def any(self) -> bool:
        return bool(self.query or self.subject or self.from_ or self.to)


class FilterTerms(BaseModel):
    """Boolean and date filters. Date bounds are absolute dates or relative expressions."""
    has_attachments: Optional[bool] = None
    unread_only: Optional[bool] = None
    category: Optional[str] = None
    before: Optional[str] = None
    after: Optional[str] = None


class FetchResult(BaseModel):
    """
    Items gathered by a paginated fetch.

    ``error`` is set when a later page failed after earlier pages succeeded; the
    items fetched before the failure are kept.
    """
    items: List[Dict[str, Any]] = Field(default_factory=list)
    pages: int = 0
    error: Optional[str] = None

    @property
    def complete(self) -> bool:
        return self.error is None


class AttemptOutcome(str, Enum):
    MATCHED = "matched"
    EMPTY = "empty"
    FAILED = "failed"


class StrategyAttempt(BaseModel):
    name: str
    outcome: AttemptOutcome
    count: int = 0
    error: Optional[str] = None


class SearchResult(BaseModel):
    """Result of a progressive search, including which strategy produced the items."""
    items: List[Dict[str, Any]] = Field(default_factory=list)
    strategy_used: str
    attempts: List[StrategyAttempt] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    sort_order: str = "desc"
    skip: int = 0
    error: Optional[str] = None

    @property
    def strategies(self) -> List[str]:
        """Names of the strategies that were actually attempted, in order."""
        return [attempt.name for attempt in self.attempts]
