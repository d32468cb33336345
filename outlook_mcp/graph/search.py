"""
Progressive Search Module

Graph's $search and $filter support is uneven: a query combining several KQL
terms with filters and ordering often comes back empty or rejected even though
simpler variants of it would match. This module tries an ordered list of query
strategies, from most to least specific, and keeps the first one that returns
anything.

Strategy order:
1. combined            every text term plus every filter
2. single-term-<field> one text term plus filters, for subject, from, to, query
3. filters-only        filters without any text search
4. basic-listing       plain ordered listing
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from outlook_mcp.graph.client import GraphClient, query_params
from outlook_mcp.graph.errors import RemoteError, TransportError, ValidationError
from outlook_mcp.models import (
    AttemptOutcome,
    FilterTerms,
    SearchResult,
    SearchTerms,
    StrategyAttempt,
)
from outlook_mcp.utils.config import EMAIL_SELECT_FIELDS
from outlook_mcp.utils.date_parser import DATE_PARSING_HINT, format_odata_datetime, parse_date
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)

SEARCH_PRIORITY = ("subject", "from", "to", "query")
SORT_ORDERS = ("asc", "desc")
BASIC_LISTING = "basic-listing"


def _clean(value: str) -> str:
    # Embedded double quotes would terminate the KQL phrase early
    return value.replace('"', "").strip()


def term_expression(field: str, value: str) -> str:
    """KQL for a single term: the general query is quoted, other fields are prefixed."""
    if field == "query":
        return f'"{_clean(value)}"'
    return f'{field}:"{_clean(value)}"'


def combined_search_expression(terms: SearchTerms) -> Optional[str]:
    """Conjoin all supplied text terms. The general query goes in unprefixed."""
    parts = []
    if terms.query:
        parts.append(_clean(terms.query))
    for field in ("subject", "from", "to"):
        value = terms.get(field)
        if value:
            parts.append(f'{field}:"{_clean(value)}"')
    return " ".join(parts) or None


def build_filter_expression(filters: FilterTerms, now: Optional[datetime] = None) -> Optional[str]:
    """
    Build the $filter expression for boolean, category and date filters.

    Date bounds that cannot be parsed are dropped rather than failing the search.

    Args:
        filters: The filter terms
        now: Reference instant for relative dates (defaults to local now)

    Returns:
        The filter expression, or None if no filter applies
    """
    conditions = []

    if filters.has_attachments is True:
        conditions.append("hasAttachments eq true")

    if filters.unread_only is True:
        conditions.append("isRead eq false")

    if filters.category:
        category = filters.category.replace("'", "''")
        conditions.append(f"categories/any(c:c eq '{category}')")

    if filters.before:
        before = parse_date(filters.before, now=now)
        if before:
            conditions.append(f"receivedDateTime lt {format_odata_datetime(before)}")
        else:
            logger.warning(f"Ignoring unparseable 'before' date: {filters.before}. {DATE_PARSING_HINT}")

    if filters.after:
        after = parse_date(filters.after, now=now)
        if after:
            conditions.append(f"receivedDateTime ge {format_odata_datetime(after)}")
        else:
            logger.warning(f"Ignoring unparseable 'after' date: {filters.after}. {DATE_PARSING_HINT}")

    return " and ".join(conditions) or None


@dataclass(frozen=True)
class SearchCriteria:
    terms: SearchTerms
    filter_expr: Optional[str]


@dataclass(frozen=True)
class SearchStrategy:
    """
    One way of turning criteria into a query.

    ``ready`` says whether the criteria carry the inputs this strategy needs;
    ``build`` returns the ``search``/``filter_expr`` arguments for query_params().
    """
    name: str
    ready: Callable[[SearchCriteria], bool]
    build: Callable[[SearchCriteria], Dict[str, Any]]


def _single_term_strategy(field: str) -> SearchStrategy:
    return SearchStrategy(
        name=f"single-term-{field}",
        ready=lambda c: bool(c.terms.get(field)),
        build=lambda c: {"search": term_expression(field, c.terms.get(field)), "filter_expr": c.filter_expr},
    )


DEFAULT_STRATEGIES: Sequence[SearchStrategy] = (
    SearchStrategy(
        name="combined",
        ready=lambda c: c.terms.any() or bool(c.filter_expr),
        build=lambda c: {"search": combined_search_expression(c.terms), "filter_expr": c.filter_expr},
    ),
    *(_single_term_strategy(field) for field in SEARCH_PRIORITY),
    SearchStrategy(
        name="filters-only",
        ready=lambda c: bool(c.filter_expr),
        build=lambda c: {"filter_expr": c.filter_expr},
    ),
    SearchStrategy(
        name=BASIC_LISTING,
        ready=lambda c: True,
        build=lambda c: {},
    ),
)


class SearchPlanner:
    """
    Runs search strategies in order against a GraphClient until one returns items.

    Strategies run one after another, never concurrently. A failing strategy
    counts as empty, except the last one, whose failure propagates.
    """

    def __init__(
        self,
        client: GraphClient,
        select_fields: str = EMAIL_SELECT_FIELDS,
        strategies: Sequence[SearchStrategy] = DEFAULT_STRATEGIES,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.client = client
        self.select_fields = select_fields
        self.strategies = list(strategies)
        self.clock = clock

    async def search(
        self,
        path: str,
        search_terms: SearchTerms,
        filter_terms: FilterTerms,
        max_items: int = 10,
        sort_order: str = "desc",
        skip: int = 0,
    ) -> SearchResult:
        """
        Search a message collection with progressively simpler queries.

        Args:
            path: Message collection path
            search_terms: Free-text criteria
            filter_terms: Boolean, category and date filters
            max_items: Maximum number of items to return
            sort_order: 'asc' (oldest first) or 'desc' (newest first)
            skip: Offset applied to every strategy

        Returns:
            SearchResult with the items, the strategy that produced them and
            the attempted and skipped strategies

        Raises:
            ValidationError: Invalid sort order or offset
            OutlookError: The final strategy failed
        """
        if sort_order not in SORT_ORDERS:
            raise ValidationError(f"Invalid sort order '{sort_order}'. Use 'asc' or 'desc'.")
        if skip < 0:
            raise ValidationError("skip must not be negative.")

        now = self.clock() if self.clock else None
        criteria = SearchCriteria(
            terms=search_terms,
            filter_expr=build_filter_expression(filter_terms, now=now),
        )
        order_by = f"receivedDateTime {sort_order}"
        attempts: List[StrategyAttempt] = []
        skipped: List[str] = []

        for index, strategy in enumerate(self.strategies):
            is_last = index == len(self.strategies) - 1
            if not is_last and not strategy.ready(criteria):
                skipped.append(strategy.name)
                continue

            params = query_params(
                select=self.select_fields,
                order_by=order_by,
                skip=skip,
                **strategy.build(criteria),
            )
            logger.info(f"Attempting {strategy.name} search with params: {params}")

            try:
                fetched = await self.client.fetch(path, params, max_items)
            except (RemoteError, TransportError) as e:
                if is_last:
                    raise
                logger.warning(f"Search strategy {strategy.name} failed: {e}")
                attempts.append(StrategyAttempt(name=strategy.name, outcome=AttemptOutcome.FAILED, error=str(e)))
                continue

            if fetched.items or is_last:
                outcome = AttemptOutcome.MATCHED if fetched.items else AttemptOutcome.EMPTY
                attempts.append(StrategyAttempt(name=strategy.name, outcome=outcome, count=len(fetched.items)))
                logger.info(f"Search strategy {strategy.name} returned {len(fetched.items)} result(s)")
                return SearchResult(
                    items=fetched.items,
                    strategy_used=strategy.name,
                    attempts=attempts,
                    skipped=skipped,
                    sort_order=sort_order,
                    skip=skip,
                    error=fetched.error,
                )

            attempts.append(StrategyAttempt(name=strategy.name, outcome=AttemptOutcome.EMPTY))

        # Only reachable with an empty strategy list
        return SearchResult(strategy_used=BASIC_LISTING, attempts=attempts, skipped=skipped, sort_order=sort_order, skip=skip)
