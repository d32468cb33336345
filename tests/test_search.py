"""
Tests for graph/search.py - Progressive search planning
"""

import logging
from datetime import datetime, timezone

import pytest

from outlook_mcp.graph.errors import AuthError, RemoteError, TransportError, ValidationError
from outlook_mcp.graph.search import (
    SearchPlanner,
    build_filter_expression,
    combined_search_expression,
    term_expression,
)
from outlook_mcp.models import AttemptOutcome, FilterTerms, SearchTerms
from outlook_mcp.utils.date_parser import DATE_PARSING_HINT
from tests.fakes import ScriptedFetchClient, make_messages

NOW = datetime(2024, 1, 16, 15, 30, tzinfo=timezone.utc)
INBOX = "me/mailFolders/inbox/messages"


def make_planner(outcomes):
    client = ScriptedFetchClient(outcomes)
    return SearchPlanner(client, select_fields="id,subject", clock=lambda: NOW), client


class TestSearchExpressions:
    """Tests for KQL and filter expression builders."""

    def test_term_expression(self):
        assert term_expression("query", "budget") == '"budget"'
        assert term_expression("subject", "report") == 'subject:"report"'
        assert term_expression("from", 'say "hi"') == 'from:"say hi"'

    def test_combined_expression(self):
        terms = SearchTerms(query="budget", subject="Q3", **{"from": "alice"})
        assert combined_search_expression(terms) == 'budget subject:"Q3" from:"alice"'

    def test_combined_expression_empty(self):
        assert combined_search_expression(SearchTerms()) is None

    def test_filter_expression(self):
        """Test that every filter is conjoined in a fixed order."""
        filters = FilterTerms(
            has_attachments=True,
            unread_only=True,
            category="O'Brien",
            after="2024-01-15T00:00:00Z",
        )
        assert build_filter_expression(filters, now=NOW) == (
            "hasAttachments eq true and isRead eq false and "
            "categories/any(c:c eq 'O''Brien') and receivedDateTime ge 2024-01-15T00:00:00Z"
        )

    def test_relative_dates(self):
        filters = FilterTerms(after="yesterday", before="today")
        assert build_filter_expression(filters, now=NOW) == (
            "receivedDateTime lt 2024-01-16T00:00:00Z and receivedDateTime ge 2024-01-15T00:00:00Z"
        )

    def test_false_flags_add_nothing(self):
        assert build_filter_expression(FilterTerms(has_attachments=False, unread_only=False)) is None

    def test_unparseable_date_is_dropped(self):
        """Test that a bad date bound is ignored instead of failing."""
        filters = FilterTerms(unread_only=True, before="banana")
        assert build_filter_expression(filters, now=NOW) == "isRead eq false"

    def test_out_of_range_relative_date_is_dropped(self):
        """Test that a relative bound reaching before year 1 is ignored."""
        filters = FilterTerms(unread_only=True, after="100000 weeks ago", before="99999 months ago")
        assert build_filter_expression(filters, now=NOW) == "isRead eq false"

    def test_dropped_date_warning_lists_formats(self, caplog):
        with caplog.at_level(logging.WARNING, logger="outlook_mcp.graph.search"):
            build_filter_expression(FilterTerms(after="banana"), now=NOW)

        assert "Ignoring unparseable 'after' date: banana" in caplog.text
        assert DATE_PARSING_HINT in caplog.text


class TestSearchPlanner:
    """Tests for SearchPlanner.search."""

    @pytest.mark.asyncio
    async def test_subject_falls_back_to_single_term(self):
        """Test that an empty combined search is followed by a subject-only search."""
        planner, client = make_planner([[], make_messages(2)])

        result = await planner.search(INBOX, SearchTerms(subject="report"), FilterTerms())

        assert result.strategy_used == "single-term-subject"
        assert len(result.items) == 2
        assert len(client.calls) == 2
        assert client.calls[0]["params"]["$search"] == 'subject:"report"'
        assert client.calls[1]["params"]["$search"] == 'subject:"report"'
        assert [a.outcome for a in result.attempts] == [AttemptOutcome.EMPTY, AttemptOutcome.MATCHED]
        assert result.strategies == ["combined", "single-term-subject"]

    @pytest.mark.asyncio
    async def test_first_match_wins(self):
        planner, client = make_planner([make_messages(3)])

        result = await planner.search(INBOX, SearchTerms(query="budget"), FilterTerms())

        assert result.strategy_used == "combined"
        assert len(client.calls) == 1
        assert result.skipped == []

    @pytest.mark.asyncio
    async def test_skip_and_order_apply_to_every_strategy(self):
        """Test that the same offset and ordering reach every attempted strategy."""
        planner, client = make_planner([[], [], make_messages(1)])

        result = await planner.search(INBOX, SearchTerms(subject="report"), FilterTerms(), sort_order="asc", skip=20)

        assert result.strategy_used == "basic-listing"
        assert len(client.calls) == 3
        for call in client.calls:
            assert call["params"]["$skip"] == 20
            assert call["params"]["$orderby"] == "receivedDateTime asc"
            assert call["params"]["$select"] == "id,subject"
        assert "$search" not in client.calls[2]["params"]
        assert result.skipped == ["single-term-from", "single-term-to", "single-term-query", "filters-only"]
        assert result.skip == 20

    @pytest.mark.asyncio
    async def test_no_criteria_goes_straight_to_listing(self):
        planner, client = make_planner([make_messages(5)])

        result = await planner.search(INBOX, SearchTerms(), FilterTerms(), max_items=5)

        assert result.strategy_used == "basic-listing"
        assert len(client.calls) == 1
        assert client.calls[0]["max_items"] == 5
        assert "$skip" not in client.calls[0]["params"]

    @pytest.mark.asyncio
    async def test_filters_only(self):
        """Test that filters are retried without text search."""
        planner, client = make_planner([[], make_messages(1)])

        result = await planner.search(
            INBOX,
            SearchTerms(subject="report"),
            FilterTerms(has_attachments=True),
        )

        assert result.strategy_used == "single-term-subject"
        assert client.calls[1]["params"]["$filter"] == "hasAttachments eq true"

        planner, client = make_planner([[], make_messages(1)])
        result = await planner.search(INBOX, SearchTerms(), FilterTerms(has_attachments=True))

        assert result.strategy_used == "filters-only"
        assert "$search" not in client.calls[1]["params"]
        assert client.calls[1]["params"]["$filter"] == "hasAttachments eq true"

    @pytest.mark.asyncio
    async def test_failed_strategy_is_absorbed(self):
        """Test that a rejected query moves on to the next strategy."""
        planner, client = make_planner([RemoteError(400, "Syntax error"), make_messages(1)])

        result = await planner.search(INBOX, SearchTerms(**{"from": "alice"}), FilterTerms())

        assert result.strategy_used == "single-term-from"
        assert result.attempts[0].outcome is AttemptOutcome.FAILED
        assert "Syntax error" in result.attempts[0].error

    @pytest.mark.asyncio
    async def test_transport_failure_is_absorbed(self):
        planner, client = make_planner([TransportError("timeout"), make_messages(1)])

        result = await planner.search(INBOX, SearchTerms(to="bob"), FilterTerms())

        assert result.strategy_used == "single-term-to"

    @pytest.mark.asyncio
    async def test_last_strategy_failure_propagates(self):
        planner, client = make_planner([[], [], RemoteError(500, "Server error")])

        with pytest.raises(RemoteError):
            await planner.search(INBOX, SearchTerms(query="x"), FilterTerms())

    @pytest.mark.asyncio
    async def test_auth_error_propagates_immediately(self):
        planner, client = make_planner([AuthError()])

        with pytest.raises(AuthError):
            await planner.search(INBOX, SearchTerms(query="x"), FilterTerms())
        assert len(client.calls) == 1

    @pytest.mark.asyncio
    async def test_nothing_found(self):
        planner, client = make_planner([[], [], []])

        result = await planner.search(INBOX, SearchTerms(query="x"), FilterTerms())

        assert result.items == []
        assert result.strategy_used == "basic-listing"
        assert result.attempts[-1].outcome is AttemptOutcome.EMPTY

    @pytest.mark.asyncio
    async def test_out_of_range_date_does_not_stop_search(self):
        planner, client = make_planner([make_messages(2)])

        result = await planner.search(INBOX, SearchTerms(query="x"), FilterTerms(before="99999 months ago"))

        assert result.strategy_used == "combined"
        assert "$filter" not in client.calls[0]["params"]

    @pytest.mark.asyncio
    async def test_invalid_arguments(self):
        planner, client = make_planner([])

        with pytest.raises(ValidationError):
            await planner.search(INBOX, SearchTerms(), FilterTerms(), sort_order="sideways")
        with pytest.raises(ValidationError):
            await planner.search(INBOX, SearchTerms(), FilterTerms(), skip=-1)
        assert client.calls == []
