"""
Search Date Parser

Turns the date bounds accepted by search tools into absolute instants that can
be embedded in an OData filter expression.

Supported patterns:
- Relative days: today, yesterday
- Numeric relative: 3 days ago, 1 week ago, 2 months ago
- ISO format: 2026-01-20, 2026-01-20T15:00:00Z
- Anything else python-dateutil can read ("Jan 5 2026", "5/1/2026")

Relative expressions resolve to local midnight of the target day.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)

# Error hint for users when date parsing fails
DATE_PARSING_HINT = (
    "Supported formats: ISO dates (2024-01-15), or relative: "
    "'today', 'yesterday', '7 days ago', '2 weeks ago', '1 month ago'"
)

RELATIVE_PATTERN = re.compile(r'^(\d+)\s*(day|days|week|weeks|month|months)\s*ago$')


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def parse_date(date_string: Optional[str], now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Parse an absolute or relative date bound.

    Args:
        date_string: The date string to parse (e.g., "yesterday", "2 weeks ago", "2024-01-15")
        now: Reference datetime for relative expressions (defaults to local now)

    Returns:
        Timezone-aware datetime, or None if the string cannot be parsed

    Examples:
        >>> parse_date("2 weeks ago", now=datetime(2026, 1, 19, 12, 0, tzinfo=timezone.utc))
        datetime(2026, 1, 5, 0, 0, tzinfo=timezone.utc)
    """
    if not date_string or not date_string.strip():
        return None

    text = date_string.strip().lower()
    reference = now or _local_now()
    if reference.tzinfo is None:
        reference = reference.astimezone()

    if text == "today":
        return _start_of_day(reference)

    if text == "yesterday":
        return _start_of_day(reference - timedelta(days=1))

    match = RELATIVE_PATTERN.match(text)
    if match:
        amount = int(match.group(1))
        unit = match.group(2)
        try:
            if unit.startswith("day"):
                target = reference - timedelta(days=amount)
            elif unit.startswith("week"):
                target = reference - timedelta(weeks=amount)
            else:
                target = reference - relativedelta(months=amount)
        except (ValueError, OverflowError) as e:
            logger.warning(f"Date '{date_string}' is out of range: {e}")
            return None
        return _start_of_day(target)

    try:
        parsed = dateutil_parser.parse(date_string.strip())
    except (ValueError, OverflowError) as e:
        logger.warning(f"Could not parse date '{date_string}': {e}")
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=reference.tzinfo)
    return parsed


def format_odata_datetime(dt: datetime) -> str:
    """
    Render a datetime the way Graph filter expressions expect it.

    Args:
        dt: A timezone-aware datetime

    Returns:
        UTC timestamp such as 2024-01-15T00:00:00Z
    """
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
