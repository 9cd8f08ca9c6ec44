"""Base infrastructure for tool handlers.

This module provides the common types and utilities used by all handler modules.
Each handler receives validated arguments plus a HandlerContext and returns a
ToolResult.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ...models import ToolResult


@dataclass(frozen=True)
class HandlerContext:
    """Context object passed to all handlers.

    Handlers must not hold on to it beyond the call; it only identifies the
    call for logging.
    """

    session_id: str | None
    request_id: str | int | None


# Type alias for handler functions. Handlers may be plain functions or
# coroutines; the registry awaits whichever it gets.
HandlerFunc = Callable[
    [dict[str, Any], HandlerContext],
    "ToolResult | Awaitable[ToolResult]",
]

NOT_SPECIFIED = "Not specified"


def format_number(value: int | float | None, fallback: str = NOT_SPECIFIED) -> str:
    """Render a number the way clients expect (1500, not 1500.0).

    Zero and missing values render as ``fallback``.
    """
    if not value:
        return fallback
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def format_list(values: list[str] | None, fallback: str) -> str:
    """Join list values with commas; empty or missing renders as ``fallback``."""
    if not values:
        return fallback
    return ", ".join(values)
