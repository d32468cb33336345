"""
Outlook MCP Utilities Module

Provides common utilities for configuration, date parsing and logging.
"""

from outlook_mcp.utils.date_parser import (
    parse_date,
    format_odata_datetime,
    DATE_PARSING_HINT,
)

__all__ = [
    'parse_date',
    'format_odata_datetime',
    'DATE_PARSING_HINT',
]
