"""
Shared handler plumbing: input validation and error-to-message conversion.
"""

import functools
from typing import Any, Awaitable, Callable, Optional

from outlook_mcp.graph.errors import AuthError, OutlookError, ValidationError
from outlook_mcp.utils.logger import get_logger

logger = get_logger(__name__)

AUTH_REQUIRED_MESSAGE = "Authentication required. Please use the 'authenticate' tool first."


def require(value: Any, message: str) -> None:
    """Raise ValidationError with ``message`` if ``value`` is empty."""
    if value is None or (isinstance(value, str) and not value.strip()) or value == []:
        raise ValidationError(message)


def split_list(value: Optional[str]) -> list:
    """Split a comma separated list, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def tool_errors(action: str) -> Callable[[Callable[..., Awaitable[str]]], Callable[..., Awaitable[str]]]:
    """
    Turn request layer errors raised by a handler into a single message.

    Args:
        action (str): What the handler does, e.g. "listing emails".
    """
    def decorator(func: Callable[..., Awaitable[str]]) -> Callable[..., Awaitable[str]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> str:
            try:
                return await func(*args, **kwargs)
            except ValidationError as e:
                return str(e)
            except AuthError:
                return AUTH_REQUIRED_MESSAGE
            except OutlookError as e:
                logger.error(f"Error {action}: {e}")
                return f"Error {action}: {e}"
            except Exception as e:
                logger.exception(f"Unexpected error {action}")
                return f"Error {action}: {e}"
        return wrapper
    return decorator
